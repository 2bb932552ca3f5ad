"""
Echo traffic over the relay chain, for driving the controller's metrics
"""

import math
import random
from typing import Any, Dict, List, Optional, TYPE_CHECKING

import simpy

from drone_node import Node
from link_quality import path_loss_signal
from messages import EchoPacket

if TYPE_CHECKING:
    from controller import RelayController


class EchoChannel:
    """In-memory 'air' that carries echo probes hop by hop along the active chain.

    Each hop costs base delay + jitter + processing and succeeds with a
    probability that falls off around the receiver sensitivity.
    """

    def __init__(self, env: simpy.Environment, controller: "RelayController",
                 cfg: Dict[str, Any], rng: Optional[random.Random] = None):
        self.env = env
        self.controller = controller
        self.cfg = cfg
        self.rng = rng or random.Random(cfg["seed"] + 1)

        self.sent = 0
        self.delivered = 0
        self.echoed = 0
        self.dropped = 0

    def hop_success_prob(self, distance: float) -> float:
        signal = path_loss_signal(distance, self.cfg["tx_power_dbm"],
                                  self.cfg["path_loss_exp"], self.cfg["ref_distance_m"])
        z = (signal - self.cfg["rx_sensitivity_dbm"]) / self.cfg["rx_slope_db"]
        # clamp the exponent so far-out links don't overflow
        return 1.0 / (1.0 + math.exp(-max(min(z, 50.0), -50.0)))

    def hop_delay(self) -> float:
        jitter = self.rng.uniform(*self.cfg["channel_jitter_s"])
        return self.cfg["channel_base_delay_s"] + jitter + self.cfg["proc_delay_s"]

    def uplink_path(self) -> List[Node]:
        """Active chain members from the User to the AccessPoint, inclusive"""
        chain = self.controller.active_chain()
        roster = self.controller.roster
        i = next(k for k, n in enumerate(chain) if n is roster.user)
        j = next(k for k, n in enumerate(chain) if n is roster.ap)
        if i <= j:
            return list(chain[i:j + 1])
        return list(reversed(chain[j:i + 1]))

    def _traverse(self, path: List[Node], packet: EchoPacket):
        for a, b in zip(path, path[1:]):
            yield self.env.timeout(self.hop_delay())
            packet.hop_count += 1
            if self.rng.random() > self.hop_success_prob(abs(b.x - a.x)):
                return False
        return True

    def _deliver(self, packet: EchoPacket):
        ok = yield self.env.process(self._traverse(self.uplink_path(), packet))
        if not ok:
            self.dropped += 1
            return
        self.delivered += 1
        self.controller.on_packet_received()

        ok = yield self.env.process(self._traverse(list(reversed(self.uplink_path())), packet))
        if not ok:
            self.dropped += 1
            return
        self.echoed += 1
        elapsed_ms = (self.env.now - packet.created_at) * 1000.0
        self.controller.on_round_trip_complete(packet.id, elapsed_ms)

    def client_task(self):
        """Echo client on the User: one probe per interval"""
        yield self.env.timeout(self.cfg["echo_start_s"])
        while self.sent < self.cfg["echo_max_packets"]:
            packet = EchoPacket(created_at=self.env.now)
            self.sent += 1
            self.controller.on_packet_sent(packet.id, self.env.now)
            self.env.process(self._deliver(packet))
            yield self.env.timeout(self.cfg["echo_interval_s"])
