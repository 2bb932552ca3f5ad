"""
Text rendering of monitor snapshots and the 1-D chain map
"""

import math
from typing import Iterable, List

from controller import MonitorSnapshot
from drone_node import Node


def format_snapshot(snap: MonitorSnapshot) -> str:
    """One monitor line: time, User x, per-hop distance/signal, both metric series"""
    hops = ", ".join(
        f"{h.left.label}-{h.right.label}={h.distance:.2f}m/{h.signal_dbm:.1f}dBm"
        for h in snap.hops
    )
    c, w = snap.cumulative, snap.windowed
    return (f"[Monitor] {snap.time:.2f}s: UserX={snap.user_x:.2f} m, {hops}, "
            f"relays={snap.active_relays}, "
            f"Tx={c.tx}, Rx={c.rx}, loss={c.loss_rate():.1f}%, RTT={c.avg_rtt_ms:.1f} ms | "
            f"window Tx={w.tx}, Rx={w.rx}, loss={w.loss_rate():.1f}%, RTT={w.avg_rtt_ms:.1f} ms")


def ascii_map(nodes: Iterable[Node], step: float = 10.0, min_cols: int = 10) -> str:
    """Sorted-by-x strip of labels, `step` metres per 4-character column.

    When two nodes share a column the one further right in x order wins.
    Staged relays are drawn too, in lower case.
    """
    ents = sorted(((n.x, n.label if n.active else n.label.lower()) for n in nodes),
                  key=lambda e: e[0])
    if not ents:
        return ""
    min_x, max_x = ents[0][0], ents[-1][0]
    if max_x - min_x < step:
        max_x = min_x + step

    cols = max(int(math.ceil((max_x - min_x) / step)), min_cols)
    row: List[str] = ["-"] * cols
    for x, label in ents:
        idx = min(int(math.floor((x - min_x) / step)), cols - 1)
        row[idx] = label

    ruler = []
    for c in range(cols):
        tick = f"{min_x + (c + 0.5) * step:.0f}"
        ruler.append(tick[:4].rjust(4))
    return ("[ASCII] " + "".join(cell.rjust(4) for cell in row) + "\n"
            + "[POS]   " + "".join(ruler))
