"""
Traffic counters for the relay controller: lifetime and per-deployment window
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple


@dataclass
class TrafficSeries:
    """tx/rx counts and an incrementally averaged RTT"""
    tx: int = 0
    rx: int = 0
    avg_rtt_ms: float = 0.0
    rtt_samples: int = 0

    def add_rtt(self, sample_ms: float):
        self.rtt_samples += 1
        self.avg_rtt_ms += (sample_ms - self.avg_rtt_ms) / self.rtt_samples

    def loss_rate(self) -> float:
        """Loss percentage, 0 when nothing was sent.

        Late echoes from an earlier window can push rx above tx; the result is
        clamped to [0, 100].
        """
        if self.tx == 0:
            return 0.0
        loss = 100.0 * (1.0 - self.rx / self.tx)
        return min(max(loss, 0.0), 100.0)


class MetricsAggregator:
    """Owns every traffic counter the controller reads.

    One instance is shared by all traffic callbacks; there are no module-level
    counters.
    """

    def __init__(self):
        self.cumulative = TrafficSeries()
        self.windowed = TrafficSeries()
        self.window_epoch = 0
        self.last_rtt_ms: Optional[float] = None
        # packet id -> (sent_at, window epoch at send time)
        self._sent_times: Dict[int, Tuple[float, int]] = {}

    def series(self, name: str = "windowed") -> TrafficSeries:
        if name == "windowed":
            return self.windowed
        if name == "cumulative":
            return self.cumulative
        raise ValueError(f"unknown metrics series: {name!r}")

    # -------- Recording --------

    def record_send(self, packet_id: int, now: float = 0.0):
        self._sent_times[packet_id] = (now, self.window_epoch)
        self.cumulative.tx += 1
        self.windowed.tx += 1

    def record_receive(self):
        self.cumulative.rx += 1
        self.windowed.rx += 1

    def record_round_trip(self, packet_id: int, elapsed_ms: float) -> bool:
        """Fold one RTT sample in; unknown or already consumed ids are ignored"""
        entry = self._sent_times.pop(packet_id, None)
        if entry is None:
            return False
        _sent_at, epoch = entry
        self.last_rtt_ms = elapsed_ms
        self.cumulative.add_rtt(elapsed_ms)
        # echoes of probes sent before the last reset_window count only cumulatively
        if epoch == self.window_epoch:
            self.windowed.add_rtt(elapsed_ms)
        return True

    def reset_window(self):
        self.windowed = TrafficSeries()
        self.window_epoch += 1

    # -------- Queries --------

    def loss_rate(self, series: str = "windowed") -> float:
        return self.series(series).loss_rate()

    def average_rtt(self, series: str = "windowed") -> float:
        return self.series(series).avg_rtt_ms
