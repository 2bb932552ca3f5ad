"""
Active chain derivation: which nodes currently forward traffic, in x order
"""

from dataclasses import dataclass
from typing import Callable, Iterable, List, Sequence, Tuple

from drone_node import Node


@dataclass
class Hop:
    left: Node
    right: Node
    distance: float
    signal_dbm: float


def build_active_chain(nodes: Iterable[Node]) -> List[Node]:
    """User, active relays and AccessPoint sorted by ascending x.

    Equal positions keep roster order. Nothing is mutated.
    """
    return sorted((n for n in nodes if n.active), key=lambda n: n.x)


def chain_hops(chain: Sequence[Node], estimate: Callable[[float], float]) -> List[Hop]:
    hops = []
    for left, right in zip(chain, chain[1:]):
        d = abs(right.x - left.x)
        hops.append(Hop(left=left, right=right, distance=d, signal_dbm=estimate(d)))
    return hops


def chain_neighbors(chain: Sequence[Node], node: Node) -> Tuple[Node, Node]:
    """Immediate left/right neighbours of an interior chain member"""
    i = next(k for k, n in enumerate(chain) if n is node)
    if i == 0 or i == len(chain) - 1:
        raise ValueError(f"{node.label} is a chain end")
    return chain[i - 1], chain[i + 1]


def largest_gap(positions: Iterable[float]) -> Tuple[float, float]:
    """Endpoints of the widest adjacent gap; the first one wins a tie"""
    xs = sorted(positions)
    if len(xs) < 2:
        raise ValueError("need at least two positions")
    best = (xs[0], xs[1])
    for a, b in zip(xs[1:], xs[2:]):
        if b - a > best[1] - best[0]:
            best = (a, b)
    return best
