"""
Simulation coordinator for the Drone Relay Chain
"""

import logging
import random
from typing import Any, Dict, List, Optional

import simpy

from channel import EchoChannel
from controller import MonitorSnapshot, RelayController, TickKind
from drone_node import build_roster
from link_quality import LinkQualityEstimator
from messages import DeployEvent
from report import ascii_map, format_snapshot

log = logging.getLogger(__name__)


class Simulation:
    """Owns the discrete-event clock and schedules the controller's periodic tasks"""

    def __init__(self, cfg: Dict[str, Any]):
        self.cfg = cfg
        self.env = simpy.Environment()
        self.rng = random.Random(cfg["seed"])
        self.roster = None
        self.controller: Optional[RelayController] = None
        self.channel: Optional[EchoChannel] = None
        self.snapshots: List[MonitorSnapshot] = []
        self._started = False

    def build(self):
        """Create the roster, the controller and the traffic channel"""
        self.roster = build_roster(self.cfg)
        estimator = LinkQualityEstimator(self.cfg, rng=self.rng)
        self.controller = RelayController(self.roster, self.cfg, estimator=estimator)
        self.channel = EchoChannel(self.env, self.controller, self.cfg,
                                   rng=random.Random(self.cfg["seed"] + 1))

    # -------- Periodic tasks --------

    def _sync_positions(self):
        self.roster.user.advance_to(self.env.now)

    def mobility_task(self):
        step = self.cfg["mobility_step_s"]
        while True:
            self._sync_positions()
            yield self.env.timeout(step)

    def monitor_task(self):
        period = self.cfg["monitor_period_s"]
        while True:
            yield self.env.timeout(period)
            self._sync_positions()
            snap = self.controller.on_tick(TickKind.MONITOR, self.env.now)
            self.snapshots.append(snap)
            log.info(format_snapshot(snap))
            log.info("\n%s", ascii_map(self.roster.all(), self.cfg["ascii_step_m"]))

    def balance_task(self):
        period = self.cfg["balance_period_s"]
        while True:
            yield self.env.timeout(period)
            self._sync_positions()
            self.controller.on_tick(TickKind.BALANCE, self.env.now)

    def start(self):
        """Register every periodic process on the clock (once)"""
        if self._started:
            return
        self._started = True
        self.env.process(self.mobility_task())
        self.env.process(self.balance_task())
        self.env.process(self.monitor_task())
        self.env.process(self.channel.client_task())

    def step(self, until: float):
        """Advance the clock to `until`, capped at the configured stop time"""
        self.start()
        until = min(until, self.cfg["sim_time_s"])
        if until > self.env.now:
            self.env.run(until=until)
            self._sync_positions()

    def run(self):
        """Run the simulation for the configured duration"""
        self.step(self.cfg["sim_time_s"])

    @property
    def finished(self) -> bool:
        return self.env.now >= self.cfg["sim_time_s"]

    def report(self):
        """Print simulation statistics and results"""
        m = self.controller.metrics
        print("\n=== Simulation Summary ===")
        print(f"Duration: {self.env.now:.1f} s  Relays active: "
              f"{self.controller.active_count()}/{len(self.roster.relays)}  "
              f"Mode: {self.cfg['drone_init_mode']}")
        print(f"Probes sent: {m.cumulative.tx}  Reached AP: {m.cumulative.rx}  "
              f"Echoed: {self.channel.echoed}  Dropped: {self.channel.dropped}")
        print(f"Loss: {m.loss_rate('cumulative'):.2f}%  Avg RTT: {m.average_rtt('cumulative'):.2f} ms")

        deploys = [ev for ev in self.controller.events if isinstance(ev, DeployEvent)]
        print("\nDeployments:")
        if not deploys:
            print("- none")
        for ev in deploys:
            print(f"- t={ev.time:.1f}s {ev.describe()}")

        print("\nFinal positions:")
        for n in self.roster.all():
            state = "" if not n.is_relay else (" active" if n.active else " staged")
            print(f"- {n.label}: X={n.x:.2f}{state}")
        print(ascii_map(self.roster.all(), self.cfg["ascii_step_m"]))
