"""
Node roster for the Drone Relay Chain: User, relay drones and the AccessPoint
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

log = logging.getLogger(__name__)


class Role(Enum):
    USER = "user"
    RELAY = "relay"
    ACCESS_POINT = "ap"


@dataclass
class RelayState:
    """Relay-only payload: slot number and activation flag"""
    slot: int
    active: bool = False


@dataclass
class Node:
    """A chain endpoint or relay on the x axis (y/z stay fixed)"""
    role: Role
    x: float
    y: float = 0.0
    z: float = 0.0
    velocity: float = 0.0
    relay: Optional[RelayState] = None

    # constant-velocity kinematics anchor, see set_velocity / advance_to
    _anchor_x: float = field(default=0.0, init=False, repr=False)
    _anchor_t: float = field(default=0.0, init=False, repr=False)

    def __post_init__(self):
        if (self.role is Role.RELAY) != (self.relay is not None):
            raise ValueError("relay state is required for relays and only for relays")
        self._anchor_x = self.x

    @property
    def pos(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    @property
    def is_relay(self) -> bool:
        return self.role is Role.RELAY

    @property
    def active(self) -> bool:
        """User and AccessPoint are always in the chain; relays only once deployed"""
        return self.relay.active if self.relay is not None else True

    @property
    def slot(self) -> Optional[int]:
        return self.relay.slot if self.relay is not None else None

    @property
    def label(self) -> str:
        if self.role is Role.USER:
            return "U"
        if self.role is Role.ACCESS_POINT:
            return "A"
        return f"D{self.relay.slot}"

    # -------- Mobility --------

    def place(self, x: float, now: float = 0.0):
        self.x = x
        self._anchor_x = x
        self._anchor_t = now

    def set_velocity(self, velocity: float, now: float = 0.0):
        self._anchor_x = self.x
        self._anchor_t = now
        self.velocity = velocity

    def advance_to(self, now: float):
        """Constant-velocity position at simulated time `now`"""
        self.x = self._anchor_x + self.velocity * (now - self._anchor_t)


@dataclass
class Roster:
    """The fixed node set: one User, N relays by slot, one AccessPoint"""
    user: Node
    relays: List[Node]
    ap: Node

    def all(self) -> List[Node]:
        return [self.user, *self.relays, self.ap]

    def active_relays(self) -> List[Node]:
        return [r for r in self.relays if r.active]

    def staged_relays(self) -> List[Node]:
        return [r for r in self.relays if not r.active]

    def relay(self, slot: int) -> Node:
        return self.relays[slot - 1]


def initial_relay_positions(cfg: Dict[str, Any]) -> List[Tuple[float, bool]]:
    """(x, active) per slot for the configured placement mode.

    - even: evenly spaced between the User and the AccessPoint, active
    - clustered-near-source: bunched just past the User, active
    - staged-for-deployment: lined up behind the AccessPoint, staged
    """
    n = cfg["num_drones"]
    mode = cfg["drone_init_mode"]
    if mode == "even":
        start, span = cfg["user_start_x_m"], cfg["ap_x_m"] - cfg["user_start_x_m"]
        return [(start + (i + 1) / (n + 1) * span, True) for i in range(n)]
    if mode == "clustered-near-source":
        base = cfg["user_start_x_m"] + cfg["cluster_offset_m"]
        return [(base + i * cfg["cluster_spacing_m"], True) for i in range(n)]
    if mode == "staged-for-deployment":
        base = cfg["ap_x_m"]
        return [(base - i * cfg["staging_spacing_m"], False) for i in range(n)]
    raise ValueError(f"unknown placement mode: {mode!r}")


def build_roster(cfg: Dict[str, Any]) -> Roster:
    user = Node(Role.USER, cfg["user_start_x_m"])
    user.set_velocity(cfg["user_speed_mps"], 0.0)
    ap = Node(Role.ACCESS_POINT, cfg["ap_x_m"])

    relays = []
    for slot, (x, active) in enumerate(initial_relay_positions(cfg), start=1):
        relays.append(Node(Role.RELAY, x, z=cfg["drone_height_m"],
                           relay=RelayState(slot=slot, active=active)))
        log.info("[Init] Drone %d %s at X=%.2f", slot, "deployed" if active else "staged", x)
    return Roster(user=user, relays=relays, ap=ap)
