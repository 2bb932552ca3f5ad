from __future__ import annotations

import random

import pytest

from balancing import (BalanceParams, auto_balance, resolve_collisions,
                       separated_positions, steer)
from config import make_config
from conftest import make_roster
from drone_node import Roster
from link_quality import path_loss_signal


def params(**kw) -> BalanceParams:
    return BalanceParams.from_config(make_config(**kw))


def test_steer_toward_farther_side():
    p = params()
    assert steer(10.0, 2.0, p) == -p.move_speed
    assert steer(2.0, 10.0, p) == p.move_speed
    assert steer(5.0, 3.0, p) == 0.0
    assert steer(3.0, 6.0, p) == 0.0  # exactly at threshold holds


def test_relay_moves_toward_user_side_when_user_is_farther():
    roster = make_roster(45.0, 0.0, [(10.0, True)])
    events = auto_balance(roster, 1.0, params(), path_loss_signal, now=5.0)
    r = roster.relay(1)
    assert r.x == pytest.approx(13.0)
    assert r.velocity == 3.0
    assert events[0].from_x == 10.0 and events[0].to_x == pytest.approx(13.0)


def test_relay_moves_back_when_left_side_is_farther():
    roster = make_roster(40.0, 0.0, [(35.0, True)])
    auto_balance(roster, 1.0, params(), path_loss_signal)
    assert roster.relay(1).x == pytest.approx(32.0)
    assert roster.relay(1).velocity == -3.0


def test_dead_band_holds_position():
    roster = make_roster(40.0, 0.0, [(21.0, True)])
    assert auto_balance(roster, 1.0, params(), path_loss_signal) == []
    assert roster.relay(1).x == 21.0
    assert roster.relay(1).velocity == 0.0


def test_interval_scales_the_step():
    roster = make_roster(45.0, 0.0, [(10.0, True)])
    auto_balance(roster, 0.5, params(), path_loss_signal)
    assert roster.relay(1).x == pytest.approx(11.5)


def _two_relay_roster(order) -> Roster:
    roster = make_roster(60.0, 0.0, [(4.0, True), (10.0, True)])
    roster.relays = [roster.relays[i] for i in order]
    return roster


@pytest.mark.parametrize("order", [(0, 1), (1, 0)])
def test_update_is_simultaneous(order):
    # D1 sits 4/6 from its neighbours: inside the dead band unless it saw D2's new spot
    roster = _two_relay_roster(order)
    auto_balance(roster, 1.0, params(), path_loss_signal)
    xs = {n.slot: n.x for n in roster.relays}
    assert xs == {1: 4.0, 2: pytest.approx(13.0)}


def test_staged_relays_do_not_move():
    roster = make_roster(60.0, 0.0, [(-1.0, False)])
    assert auto_balance(roster, 1.0, params(), path_loss_signal) == []
    assert roster.relay(1).x == -1.0


def test_clamp_keeps_relay_inside_user_ap_span():
    roster = make_roster(5.0, 0.0, [(0.5, True)])
    auto_balance(roster, 1.0, params(move_speed_mps=10.0), path_loss_signal)
    assert roster.relay(1).x == pytest.approx(4.9)


def test_clamp_can_be_disabled():
    roster = make_roster(5.0, 0.0, [(0.5, True)])
    auto_balance(roster, 1.0, params(move_speed_mps=10.0, balance_clamp=False), path_loss_signal)
    assert roster.relay(1).x == pytest.approx(10.5)


def test_signal_metric_moves_toward_weaker_link():
    roster = make_roster(45.0, 0.0, [(10.0, True)])
    auto_balance(roster, 1.0, params(balance_metric="signal"), path_loss_signal)
    assert roster.relay(1).x == pytest.approx(13.0)


def test_pair_pushed_to_midpoint_plus_minus_half_separation():
    assert separated_positions([10.0, 10.5], 2.0) == pytest.approx([9.25, 11.25])


def test_packed_triple_spread_around_mean():
    out = separated_positions([0.0, 0.1, 0.2], 1.0)
    assert out == pytest.approx([-0.9, 0.1, 1.1])


def test_well_spaced_relays_untouched():
    xs = [0.0, 5.0, 10.0]
    assert separated_positions(xs, 2.0) == xs


def test_only_violating_neighbours_move():
    assert separated_positions([0.0, 5.0, 5.5, 20.0], 2.0) == pytest.approx([0.0, 4.25, 6.25, 20.0])


def test_cascade_reaches_earlier_relay():
    out = separated_positions([0.0, 2.0, 2.1], 2.0)
    assert all(b - a >= 2.0 - 1e-9 for a, b in zip(out, out[1:]))
    assert sum(out) == pytest.approx(4.1)


def test_separation_invariant_on_random_layouts():
    rng = random.Random(7)
    for _ in range(300):
        n = rng.randint(2, 8)
        sep = rng.uniform(0.5, 5.0)
        xs = sorted(rng.uniform(0.0, 20.0) for _ in range(n))
        out = separated_positions(xs, sep)
        assert all(b - a >= sep - 1e-6 for a, b in zip(out, out[1:]))


def test_resolve_collisions_preserves_rank_on_nodes():
    roster = make_roster(100.0, 0.0, [(30.0, True), (29.5, True), (31.0, True)])
    before = [n.slot for n in sorted(roster.relays, key=lambda n: n.x)]
    events = resolve_collisions(roster.active_relays(), 2.0, now=3.0)
    after = sorted(roster.relays, key=lambda n: n.x)
    assert [n.slot for n in after] == before
    assert all(b.x - a.x >= 2.0 - 1e-9 for a, b in zip(after, after[1:]))
    assert events[0].time == 3.0 and set(events[0].slots) == {1, 2, 3}


def test_resolve_collisions_noop_for_zero_or_one_relay():
    roster = make_roster(100.0, 0.0, [(30.0, True)])
    assert resolve_collisions([], 2.0) == []
    assert resolve_collisions(roster.active_relays(), 2.0) == []
    assert roster.relay(1).x == 30.0


def test_crossed_relays_restored_to_previous_rank():
    roster = make_roster(100.0, 0.0, [(2.0, True), (7.5, True), (9.5, True)])
    ranked = sorted(roster.active_relays(), key=lambda n: n.x)
    auto_balance(roster, 1.0, params(), path_loss_signal)
    assert roster.relay(1).x > roster.relay(2).x

    resolve_collisions(ranked, 2.0, ranked=True)
    after = sorted(roster.relays, key=lambda n: n.x)
    assert [n.slot for n in after] == [1, 2, 3]
    assert all(b.x - a.x >= 2.0 - 1e-9 for a, b in zip(after, after[1:]))


def test_out_of_order_input_merged_in_given_rank():
    assert separated_positions([5.0, 4.5, 12.5], 2.0) == pytest.approx([3.75, 5.75, 12.5])
