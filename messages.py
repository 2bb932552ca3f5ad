"""
Message and event types for the Drone Relay Chain
"""

import itertools
from dataclasses import dataclass, field
from typing import Tuple

_packet_ids = itertools.count(1)


@dataclass
class EchoPacket:
    """UDP-echo style probe sent by the User toward the AccessPoint"""
    created_at: float
    hop_count: int = 0
    id: int = field(default_factory=lambda: next(_packet_ids))


@dataclass
class DeployEvent:
    """A staged relay was flown into the chain"""
    time: float
    slot: int
    from_x: float
    to_x: float
    # gap endpoints the target was computed from
    gap: Tuple[float, float]
    loss_pct: float
    rtt_ms: float
    min_signal_dbm: float
    max_hop_m: float

    def describe(self) -> str:
        return (f"[Deploy] Drone {self.slot} moved from X={self.from_x:.2f} to target "
                f"X={self.to_x:.2f} (loss={self.loss_pct:.1f}%, rtt={self.rtt_ms:.1f} ms, "
                f"weakest={self.min_signal_dbm:.1f} dBm, longest hop={self.max_hop_m:.1f} m)")


@dataclass
class MoveEvent:
    """An active relay repositioned by the balancer"""
    time: float
    slot: int
    from_x: float
    to_x: float
    left_metric: float
    right_metric: float

    def describe(self) -> str:
        return (f"[Move] Drone {self.slot} moved from X={self.from_x:.2f} to X={self.to_x:.2f} "
                f"(L={self.left_metric:.2f}, R={self.right_metric:.2f})")


@dataclass
class SeparationEvent:
    """Relays pushed apart to restore the minimum separation"""
    time: float
    slots: Tuple[int, ...]
    positions: Tuple[float, ...]

    def describe(self) -> str:
        where = ", ".join(f"D{s}={x:.2f}" for s, x in zip(self.slots, self.positions))
        return f"[Separate] {where}"
