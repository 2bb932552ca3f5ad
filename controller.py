"""
Relay lifecycle controller: the handler surface the simulation clock and the
traffic layer call into
"""

import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from balancing import BalanceParams, auto_balance, resolve_collisions
from deployment import Thresholds, maybe_deploy
from drone_node import Roster
from link_quality import LinkQualityEstimator
from messages import DeployEvent
from metrics import MetricsAggregator, TrafficSeries
from topology import Hop, build_active_chain, chain_hops

log = logging.getLogger(__name__)


class TickKind(Enum):
    MONITOR = "monitor"
    BALANCE = "balance"


@dataclass
class MonitorSnapshot:
    time: float
    user_x: float
    hops: List[Hop]
    cumulative: TrafficSeries
    windowed: TrafficSeries
    active_relays: int
    deployed: Optional[DeployEvent] = None
    log_lines: List[str] = field(default_factory=list)


class RelayController:
    """Owns the roster, the metrics and every relay decision.

    All entry points are synchronous and non-blocking; the caller owns the
    timeline and never runs two of them at once.
    """

    def __init__(self, roster: Roster, cfg: Dict[str, Any],
                 estimator: Optional[LinkQualityEstimator] = None,
                 metrics: Optional[MetricsAggregator] = None):
        self.roster = roster
        self.cfg = cfg
        self.estimator = estimator or LinkQualityEstimator(cfg)
        self.metrics = metrics or MetricsAggregator()
        self.thresholds = Thresholds.from_config(cfg)
        self.balance = BalanceParams.from_config(cfg)
        self.events: List[Any] = []
        self._event_mark = 0

    # -------- Traffic handlers --------

    def on_packet_sent(self, packet_id: int, now: float = 0.0):
        self.metrics.record_send(packet_id, now)

    def on_packet_received(self):
        self.metrics.record_receive()

    def on_round_trip_complete(self, packet_id: int, elapsed_ms: float):
        self.metrics.record_round_trip(packet_id, elapsed_ms)

    # -------- Periodic ticks --------

    def on_tick(self, kind: Union[TickKind, str], now: float):
        kind = TickKind(kind)
        if kind is TickKind.MONITOR:
            return self.monitor(now)
        return self.rebalance(now)

    def monitor(self, now: float) -> MonitorSnapshot:
        """Snapshot the chain, then evaluate deployment"""
        snap = self.snapshot(now)
        # nothing to decide without relay slots
        if self.roster.relays:
            snap.deployed = self.deploy(now)
        snap.log_lines = [ev.describe() for ev in self.events[self._event_mark:]]
        self._event_mark = len(self.events)
        return snap

    def deploy(self, now: float) -> Optional[DeployEvent]:
        ev = maybe_deploy(self.roster, self.metrics, self.thresholds, self.estimator.estimate, now)
        if ev is not None:
            self._record(ev)
        return ev

    def rebalance(self, now: float, interval: Optional[float] = None) -> List[Any]:
        """Auto-balance step followed by separation enforcement"""
        if not self.roster.active_relays():
            return []
        dt = self.cfg["balance_period_s"] if interval is None else interval
        # rank before the step; the resolver restores it if two relays crossed
        ranked = sorted(self.roster.active_relays(), key=lambda n: n.x)
        events = auto_balance(self.roster, dt, self.balance, self.estimator.estimate, now)
        events += resolve_collisions(ranked, self.balance.min_separation, now, ranked=True)
        for ev in events:
            self._record(ev)
        return events

    # -------- Queries --------

    def active_chain(self):
        return build_active_chain(self.roster.all())

    def active_count(self) -> int:
        return len(self.roster.active_relays())

    def snapshot(self, now: float) -> MonitorSnapshot:
        return MonitorSnapshot(
            time=now,
            user_x=self.roster.user.x,
            hops=chain_hops(self.active_chain(), self.estimator.estimate),
            cumulative=copy.copy(self.metrics.cumulative),
            windowed=copy.copy(self.metrics.windowed),
            active_relays=self.active_count(),
        )

    def _record(self, ev):
        self.events.append(ev)
        log.info(ev.describe())
