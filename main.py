#!/usr/bin/env python3
"""
Drone Relay Chain Simulator - Main Entry Point

A mobile User walks away from a fixed AccessPoint while a pool of relay drones
keeps the link alive.

Features:
- simpy discrete-event clock with separate monitor and balance periods
- dynamic deployment of staged relays into the widest chain gap
- neighbour-distance (or signal) balancing with minimum separation
- UDP-echo style probes over the active chain for loss/RTT
- ASCII chain map per monitor tick, live Matplotlib strip view

Run:
    python main.py --num-drones 3 --drone-init-mode deploy --no-viz
"""

import argparse
import logging
from typing import List, Optional

from config import PLACEMENT_ALIASES, PLACEMENT_MODES, make_config
from simulation import Simulation

log = logging.getLogger(__name__)


def setup_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Drone relay chain simulation")
    p.add_argument("--num-drones", type=int, default=2, help="Number of relay slots (0 = none)")
    p.add_argument("--drone-init-mode", default="deploy",
                   choices=sorted(set(PLACEMENT_MODES) | set(PLACEMENT_ALIASES)),
                   help="Placement: even | cluster | deploy")
    p.add_argument("--total-distance", type=float, default=120.0,
                   help="Metres between User and AccessPoint for placement")
    p.add_argument("--user-speed", type=float, default=2.5, help="User movement speed (m/s)")
    p.add_argument("--ap-x", type=float, default=None,
                   help="AccessPoint x (default: total distance in even mode, else 0)")
    p.add_argument("--balance-metric", default="distance", choices=["distance", "signal"])
    p.add_argument("--deploy-criterion", default="weakest-hop", choices=["weakest-hop", "direct-path"])
    p.add_argument("--sim-time", type=float, default=60.0)
    p.add_argument("--seed", type=int, default=42)
    p.add_argument("--no-viz", action="store_true", help="Run headless and print the report")
    p.add_argument("--log-level", default="INFO")
    return p.parse_args(argv)


def config_from_args(args: argparse.Namespace):
    overrides = {} if args.ap_x is None else {"ap_x_m": args.ap_x}
    return make_config(
        num_drones=args.num_drones,
        drone_init_mode=args.drone_init_mode,
        total_distance_m=args.total_distance,
        user_speed_mps=args.user_speed,
        balance_metric=args.balance_metric,
        deploy_criterion=args.deploy_criterion,
        sim_time_s=args.sim_time,
        seed=args.seed,
        **overrides,
    )


def main(argv: Optional[List[str]] = None):
    """Main entry point for the drone relay chain simulation"""
    args = parse_args(argv)
    setup_logging(args.log_level)
    cfg = config_from_args(args)

    sim = Simulation(cfg)
    sim.build()
    if args.no_viz:
        log.info("Starting headless simulation (%.0f s)...", cfg["sim_time_s"])
        sim.run()
        sim.report()
        return sim

    from visualization import run_live_viz
    log.info("Starting simulation with live visualization...")
    run_live_viz(sim)
    return sim


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
