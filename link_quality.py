"""
Log-distance path loss estimate used as the relay decision signal
"""

import math
import random
from typing import Any, Dict, Optional


def path_loss_signal(distance: float, tx_power_dbm: float = 20.0,
                     path_loss_exp: float = 2.5, ref_distance: float = 1.0) -> float:
    """Noise-free signal estimate in dBm.

    Distances below the reference distance are clamped to it, so the result
    is defined for any input and strictly decreasing above ref_distance.
    """
    d = max(distance, ref_distance)
    return tx_power_dbm - 10.0 * path_loss_exp * math.log10(d / ref_distance)


class LinkQualityEstimator:
    """Distance -> signal strength, with a configurable noise draw per call"""

    def __init__(self, cfg: Dict[str, Any], rng: Optional[random.Random] = None):
        self.tx_power_dbm = cfg["tx_power_dbm"]
        self.path_loss_exp = cfg["path_loss_exp"]
        self.ref_distance = cfg["ref_distance_m"]
        self.noise_dist = cfg["noise_dist"]
        self.noise_mean = cfg["noise_mean_db"]
        self.noise_spread = cfg["noise_spread_db"]
        self.rng = rng or random.Random(cfg["seed"])

    def noise(self) -> float:
        if self.noise_dist == "gaussian":
            return self.rng.gauss(self.noise_mean, self.noise_spread)
        if self.noise_dist == "uniform":
            return self.rng.uniform(self.noise_mean - self.noise_spread,
                                    self.noise_mean + self.noise_spread)
        return 0.0

    def estimate(self, distance: float) -> float:
        """signal = txPower - 10 n log10(d / d0) - noise"""
        base = path_loss_signal(distance, self.tx_power_dbm, self.path_loss_exp, self.ref_distance)
        return base - self.noise()
