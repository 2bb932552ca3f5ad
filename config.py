"""
Configuration for the Drone Relay Chain simulation
"""

import copy
from typing import Any, Dict

PLACEMENT_MODES = ("even", "clustered-near-source", "staged-for-deployment")
PLACEMENT_ALIASES = {
    "even": "even",
    "cluster": "clustered-near-source",
    "deploy": "staged-for-deployment",
}
NOISE_DISTS = ("gaussian", "uniform", "none")
BALANCE_METRICS = ("distance", "signal")
DEPLOY_CRITERIA = ("weakest-hop", "direct-path")
METRIC_SERIES = ("windowed", "cumulative")

SIM_CONFIG = {
    # roster & placement
    "num_drones": 2,
    "drone_init_mode": "staged-for-deployment",
    "total_distance_m": 120.0,     # source/destination separation used by placement
    "user_start_x_m": 0.0,
    "ap_x_m": 0.0,
    "user_speed_mps": 2.5,
    "drone_height_m": 10.0,        # constant altitude for relays
    "cluster_offset_m": 5.0,
    "cluster_spacing_m": 1.0,
    "staging_spacing_m": 1.0,      # staged relays line up behind the AP

    # deployment thresholds
    "loss_threshold_pct": 30.0,
    "rtt_threshold_ms": 150.0,
    "signal_threshold_dbm": -75.0,
    "max_hop_distance_m": 40.0,
    "deploy_criterion": "weakest-hop",
    "deploy_metrics_series": "windowed",

    # balancing & separation
    "balance_metric": "distance",
    "move_threshold": 3.0,         # metres (distance metric) or dB (signal metric)
    "move_speed_mps": 3.0,
    "min_separation_m": 2.0,
    "balance_clamp": True,
    "balance_clamp_margin_m": 0.1,

    # link quality estimate
    "tx_power_dbm": 20.0,
    "path_loss_exp": 2.5,
    "ref_distance_m": 1.0,
    "noise_dist": "gaussian",
    "noise_mean_db": 0.0,
    "noise_spread_db": 1.0,        # std-dev (gaussian) or half-width (uniform)

    # periodic tasks
    "monitor_period_s": 2.0,
    "balance_period_s": 1.0,
    "mobility_step_s": 0.2,
    "sim_time_s": 60.0,

    # echo traffic over the chain
    "echo_start_s": 2.0,
    "echo_interval_s": 0.5,
    "echo_max_packets": 1000,
    "rx_sensitivity_dbm": -85.0,
    "rx_slope_db": 2.0,
    "channel_base_delay_s": 0.001,
    "channel_jitter_s": (0.002, 0.020),
    "proc_delay_s": 0.002,

    # output
    "ascii_step_m": 10.0,
    "viz_frame_s": 0.1,            # simulated seconds advanced per animation frame
    "seed": 42,
}


def _check_choice(cfg: Dict[str, Any], key: str, choices) -> None:
    if cfg[key] not in choices:
        raise ValueError(f"{key}={cfg[key]!r}, expected one of {', '.join(choices)}")


def make_config(**overrides: Any) -> Dict[str, Any]:
    """Copy SIM_CONFIG and apply overrides.

    Unknown keys raise KeyError; enumerated values are validated, and the
    short placement aliases (even | cluster | deploy) are normalised. In even
    mode the AccessPoint sits total_distance_m past the User unless ap_x_m is
    given.
    """
    cfg = copy.deepcopy(SIM_CONFIG)
    for key, value in overrides.items():
        if key not in cfg:
            raise KeyError(f"unknown config key: {key}")
        cfg[key] = value

    cfg["drone_init_mode"] = PLACEMENT_ALIASES.get(cfg["drone_init_mode"], cfg["drone_init_mode"])
    _check_choice(cfg, "drone_init_mode", PLACEMENT_MODES)
    if cfg["drone_init_mode"] == "even" and "ap_x_m" not in overrides:
        cfg["ap_x_m"] = cfg["user_start_x_m"] + cfg["total_distance_m"]
    _check_choice(cfg, "noise_dist", NOISE_DISTS)
    _check_choice(cfg, "balance_metric", BALANCE_METRICS)
    _check_choice(cfg, "deploy_criterion", DEPLOY_CRITERIA)
    _check_choice(cfg, "deploy_metrics_series", METRIC_SERIES)
    if cfg["num_drones"] < 0:
        raise ValueError("num_drones must be >= 0")
    return cfg
