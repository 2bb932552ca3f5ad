from __future__ import annotations

import random

import pytest

from config import make_config
from link_quality import LinkQualityEstimator, path_loss_signal


def test_signal_strictly_decreasing_above_reference():
    ds = [1.0 + 0.5 * k for k in range(400)]
    sig = [path_loss_signal(d) for d in ds]
    assert all(a > b for a, b in zip(sig, sig[1:]))


def test_signal_at_reference_is_tx_power():
    assert path_loss_signal(1.0, tx_power_dbm=20.0) == pytest.approx(20.0)
    assert path_loss_signal(10.0, tx_power_dbm=20.0, path_loss_exp=2.0) == pytest.approx(0.0)


def test_distance_below_reference_is_clamped():
    assert path_loss_signal(0.0) == path_loss_signal(1.0)
    assert path_loss_signal(-3.0) == path_loss_signal(0.25) == path_loss_signal(1.0)


def test_noise_free_estimator_matches_model():
    est = LinkQualityEstimator(make_config(noise_dist="none"))
    for d in (0.0, 1.0, 40.0, 1000.0):
        assert est.estimate(d) == path_loss_signal(d)


def test_noise_free_estimator_is_monotonic():
    est = LinkQualityEstimator(make_config(noise_dist="none"))
    assert est.estimate(5.0) >= est.estimate(5.0)
    assert est.estimate(5.0) >= est.estimate(6.0) >= est.estimate(600.0)


def test_uniform_noise_is_subtracted_within_bounds():
    cfg = make_config(noise_dist="uniform", noise_mean_db=7.0, noise_spread_db=2.0)
    est = LinkQualityEstimator(cfg, rng=random.Random(3))
    base = path_loss_signal(50.0)
    for _ in range(200):
        s = est.estimate(50.0)
        assert base - 9.0 <= s <= base - 5.0


def test_gaussian_noise_reproducible_with_seed():
    cfg = make_config(noise_dist="gaussian", noise_spread_db=1.0)
    a = LinkQualityEstimator(cfg, rng=random.Random(11))
    b = LinkQualityEstimator(cfg, rng=random.Random(11))
    assert [a.estimate(30.0) for _ in range(5)] == [b.estimate(30.0) for _ in range(5)]
