"""
Live visualization for the Drone Relay Chain
"""

from typing import List

import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation
from matplotlib.collections import LineCollection

from drone_node import Node, Role
from simulation import Simulation

CHAIN_ROW = 0.0
STAGED_ROW = -0.6


def _node_xy(node: Node):
    return node.x, (CHAIN_ROW if node.active else STAGED_ROW)


def _node_color(node: Node) -> str:
    if node.role is Role.USER:
        return "tab:blue"
    if node.role is Role.ACCESS_POINT:
        return "tab:red"
    return "tab:green" if node.active else "lightgray"


def _compute_edges(sim: Simulation):
    """Chain hops as line segments"""
    chain = sim.controller.active_chain()
    return [(_node_xy(a), _node_xy(b)) for a, b in zip(chain, chain[1:])]


class LiveArtist:
    """Matplotlib strip view of the relay chain"""

    def __init__(self, sim: Simulation):
        self.sim = sim
        self.nodes: List[Node] = sim.roster.all()
        self.fig, self.ax = plt.subplots(figsize=(10.0, 3.2))
        self.ax.set_ylim(-1.2, 1.2)
        self.ax.set_yticks([])
        self.ax.set_xlabel("X (m)")
        self.ax.set_title("Drone Relay Chain - Live View")

        xy = [_node_xy(n) for n in self.nodes]
        self.scatter = self.ax.scatter([p[0] for p in xy], [p[1] for p in xy], s=60,
                                       c=[_node_color(n) for n in self.nodes], zorder=3)

        # Node labels
        self.labels = [self.ax.text(x, y + 0.15, n.label, ha="center", va="bottom", fontsize=8)
                       for n, (x, y) in zip(self.nodes, xy)]

        # Chain hops
        self.lines = LineCollection(_compute_edges(sim), linewidths=1.2, alpha=0.6)
        self.ax.add_collection(self.lines)

        # Stats banner
        self.stats_txt = self.ax.text(0.01, 0.97, "", transform=self.ax.transAxes,
                                      va="top", fontsize=8)
        self._rescale()

    def _rescale(self):
        xs = [n.x for n in self.nodes]
        lo, hi = min(xs), max(xs)
        pad = max(5.0, 0.05 * (hi - lo))
        self.ax.set_xlim(lo - pad, hi + pad)

    def update(self, _frame):
        """Advance the clock one slice and redraw"""
        if not self.sim.finished:
            self.sim.step(self.sim.env.now + self.sim.cfg["viz_frame_s"])

        xy = [_node_xy(n) for n in self.nodes]
        self.scatter.set_offsets(xy)
        self.scatter.set_color([_node_color(n) for n in self.nodes])
        for lbl, (x, y) in zip(self.labels, xy):
            lbl.set_position((x, y + 0.15))
        self.lines.set_segments(_compute_edges(self.sim))
        self._rescale()

        m = self.sim.controller.metrics
        self.stats_txt.set_text(
            f"t={self.sim.env.now:.1f}s  relays={self.sim.controller.active_count()}"
            f"/{len(self.sim.roster.relays)}  "
            f"loss={m.loss_rate('cumulative'):.1f}%  RTT={m.average_rtt('cumulative'):.1f} ms  "
            f"window loss={m.loss_rate():.1f}%"
        )
        return self.scatter, self.lines, *self.labels, self.stats_txt


def run_live_viz(sim: Simulation):
    """Step the simulation from the animation timer and show a live Matplotlib view"""
    artist = LiveArtist(sim)
    anim = FuncAnimation(artist.fig, artist.update, interval=50, blit=False,  # ~20 FPS
                         cache_frame_data=False)

    # Show blocking window; after close, finish the run and print the report
    plt.show()
    sim.run()
    sim.report()
    return anim
