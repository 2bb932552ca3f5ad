from __future__ import annotations

import os

os.environ.setdefault("MPLBACKEND", "Agg")

import pytest

from config import make_config
from controller import RelayController
from drone_node import Node, RelayState, Role, Roster
from link_quality import LinkQualityEstimator


def make_roster(user_x: float, ap_x: float, relays) -> Roster:
    """relays: list of (x, active) by slot"""
    return Roster(
        user=Node(Role.USER, user_x),
        relays=[Node(Role.RELAY, x, relay=RelayState(slot=i, active=a))
                for i, (x, a) in enumerate(relays, start=1)],
        ap=Node(Role.ACCESS_POINT, ap_x),
    )


@pytest.fixture
def quiet_cfg():
    """Noise-free estimator, defaults otherwise"""
    return make_config(noise_dist="none")


@pytest.fixture
def make_controller(quiet_cfg):
    def _make(roster: Roster, **overrides) -> RelayController:
        cfg = make_config(**{"noise_dist": "none", **overrides}) if overrides else quiet_cfg
        return RelayController(roster, cfg, estimator=LinkQualityEstimator(cfg))
    return _make
