"""
Relay repositioning: per-tick balancing between chain neighbours, then
minimum-separation enforcement between relays
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Sequence, Tuple

from drone_node import Node, Roster
from messages import MoveEvent, SeparationEvent
from topology import build_active_chain, chain_neighbors


SEPARATION_EPS = 1e-9


@dataclass
class BalanceParams:
    metric: str = "distance"
    move_threshold: float = 3.0
    move_speed: float = 3.0
    clamp: bool = True
    clamp_margin: float = 0.1
    min_separation: float = 2.0

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "BalanceParams":
        return cls(
            metric=cfg["balance_metric"],
            move_threshold=cfg["move_threshold"],
            move_speed=cfg["move_speed_mps"],
            clamp=cfg["balance_clamp"],
            clamp_margin=cfg["balance_clamp_margin_m"],
            min_separation=cfg["min_separation_m"],
        )


def steer(left_metric: float, right_metric: float, params: BalanceParams) -> float:
    """Velocity toward the farther neighbour, or 0 inside the dead band.

    Metrics are per-side "remoteness": distance, or negated signal so that a
    weaker link reads as farther.
    """
    diff = left_metric - right_metric
    if diff > params.move_threshold:
        return -params.move_speed
    if diff < -params.move_threshold:
        return params.move_speed
    return 0.0


def auto_balance(roster: Roster, interval: float, params: BalanceParams,
                 estimate: Callable[[float], float], now: float = 0.0) -> List[MoveEvent]:
    """One explicit Euler step for every active relay.

    Every relay reads its neighbours' positions from before the tick, so the
    update is simultaneous and independent of iteration order.
    """
    chain = build_active_chain(roster.all())
    if len(chain) < 3:
        return []

    lo = min(roster.user.x, roster.ap.x) + params.clamp_margin
    hi = max(roster.user.x, roster.ap.x) - params.clamp_margin

    planned: List[Tuple[Node, float, float, float, float]] = []
    for node in chain[1:-1]:
        if not node.is_relay:
            continue
        left, right = chain_neighbors(chain, node)
        d_left, d_right = node.x - left.x, right.x - node.x
        if params.metric == "signal":
            m_left, m_right = -estimate(d_left), -estimate(d_right)
        else:
            m_left, m_right = d_left, d_right
        v = steer(m_left, m_right, params)
        new_x = node.x + v * interval
        if params.clamp and lo <= hi and lo <= node.x <= hi:
            new_x = min(max(new_x, lo), hi)
        planned.append((node, v, new_x, m_left, m_right))

    events = []
    for node, v, new_x, m_left, m_right in planned:
        old_x = node.x
        node.place(new_x, now)
        node.set_velocity(v, now)
        if abs(new_x - old_x) > 1e-3:
            events.append(MoveEvent(time=now, slot=node.slot, from_x=old_x, to_x=new_x,
                                    left_metric=m_left, right_metric=m_right))
    return events


def separated_positions(xs: Sequence[float], min_sep: float) -> List[float]:
    """Positions for relays given in rank order, no two closer than min_sep.

    Left-to-right sweep: a relay too close to (or past) its left neighbour is
    merged with it into a block spread at exactly min_sep around the block's
    mean, and blocks keep merging leftward while they overlap. For a single
    pair this is midpoint -/+ min_sep/2. At most len(xs) - 1 merges; rank is
    preserved.
    """
    blocks: List[List[float]] = []  # [first index, count, sum of x]

    def edges(b):
        centre = b[2] / b[1]
        half = (b[1] - 1) / 2.0 * min_sep
        return centre - half, centre + half

    for i, x in enumerate(xs):
        blocks.append([i, 1, x])
        while len(blocks) > 1:
            _, prev_right = edges(blocks[-2])
            cur_left, _ = edges(blocks[-1])
            if cur_left - prev_right >= min_sep - SEPARATION_EPS:
                break
            cur = blocks.pop()
            blocks[-1][1] += cur[1]
            blocks[-1][2] += cur[2]

    out = list(xs)
    for first, count, total in blocks:
        if count == 1:
            continue
        centre = total / count
        for k in range(count):
            out[first + k] = centre + (k - (count - 1) / 2.0) * min_sep
    return out


def resolve_collisions(relays: Sequence[Node], min_sep: float, now: float = 0.0,
                       ranked: bool = False) -> List[SeparationEvent]:
    """Push relays apart to min_sep.

    With ranked=True `relays` is taken as the left-to-right order to restore,
    e.g. the order captured before a balancing step let two of them cross.
    """
    ordered = list(relays) if ranked else sorted(relays, key=lambda n: n.x)
    if len(ordered) < 2:
        return []
    new_xs = separated_positions([n.x for n in ordered], min_sep)

    moved = [(n, x) for n, x in zip(ordered, new_xs) if x != n.x]
    for n, x in moved:
        n.place(x, now)
    if not moved:
        return []
    return [SeparationEvent(time=now,
                            slots=tuple(n.slot for n, _ in moved),
                            positions=tuple(x for _, x in moved))]
