"""
Deployment decisions: when to fly the next staged relay in, and where
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from drone_node import Roster
from messages import DeployEvent
from metrics import MetricsAggregator
from topology import build_active_chain, chain_hops, largest_gap

log = logging.getLogger(__name__)


@dataclass
class Thresholds:
    loss_pct: float
    rtt_ms: float
    signal_dbm: float
    max_hop_m: float
    # "weakest-hop" looks at every chain hop, "direct-path" at User<->AP only
    criterion: str = "weakest-hop"
    series: str = "windowed"

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Thresholds":
        return cls(
            loss_pct=cfg["loss_threshold_pct"],
            rtt_ms=cfg["rtt_threshold_ms"],
            signal_dbm=cfg["signal_threshold_dbm"],
            max_hop_m=cfg["max_hop_distance_m"],
            criterion=cfg["deploy_criterion"],
            series=cfg["deploy_metrics_series"],
        )


@dataclass
class LinkAssessment:
    loss_pct: float
    rtt_ms: float
    min_signal_dbm: float
    max_hop_m: float

    def reasons(self, th: Thresholds) -> List[str]:
        out = []
        if self.loss_pct > th.loss_pct:
            out.append("loss")
        if self.rtt_ms > th.rtt_ms:
            out.append("rtt")
        if self.min_signal_dbm < th.signal_dbm:
            out.append("signal")
        if self.max_hop_m > th.max_hop_m:
            out.append("distance")
        return out


def assess_links(roster: Roster, metrics: MetricsAggregator, th: Thresholds,
                 estimate: Callable[[float], float]) -> LinkAssessment:
    if th.criterion == "direct-path":
        d = abs(roster.user.x - roster.ap.x)
        min_signal, max_hop = estimate(d), d
    else:
        hops = chain_hops(build_active_chain(roster.all()), estimate)
        min_signal = min(h.signal_dbm for h in hops)
        max_hop = max(h.distance for h in hops)
    return LinkAssessment(
        loss_pct=metrics.loss_rate(th.series),
        rtt_ms=metrics.average_rtt(th.series),
        min_signal_dbm=min_signal,
        max_hop_m=max_hop,
    )


def maybe_deploy(roster: Roster, metrics: MetricsAggregator, th: Thresholds,
                 estimate: Callable[[float], float], now: float = 0.0) -> Optional[DeployEvent]:
    """Activate at most one staged relay if any link criterion is violated.

    The relay goes to the midpoint of the widest gap in the pre-activation
    chain, and the windowed metrics restart.
    """
    link = assess_links(roster, metrics, th, estimate)
    reasons = link.reasons(th)
    if not reasons:
        return None

    staged = roster.staged_relays()
    if not staged:
        log.debug("[Deploy] link poor (%s) at t=%.2f but no staged drone left", ",".join(reasons), now)
        return None
    relay = staged[0]

    left, right = largest_gap(n.x for n in build_active_chain(roster.all()))
    target = (left + right) / 2.0

    from_x = relay.x
    relay.place(target, now)
    relay.set_velocity(0.0, now)
    relay.relay.active = True
    metrics.reset_window()

    return DeployEvent(
        time=now,
        slot=relay.slot,
        from_x=from_x,
        to_x=target,
        gap=(left, right),
        loss_pct=link.loss_pct,
        rtt_ms=link.rtt_ms,
        min_signal_dbm=link.min_signal_dbm,
        max_hop_m=link.max_hop_m,
    )
