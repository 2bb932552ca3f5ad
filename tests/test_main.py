from __future__ import annotations

from main import config_from_args, main, parse_args


def test_cli_aliases_and_even_mode_ap():
    cfg = config_from_args(parse_args(["--drone-init-mode", "even", "--num-drones", "3",
                                       "--total-distance", "120"]))
    assert cfg["drone_init_mode"] == "even"
    assert cfg["ap_x_m"] == 120.0

    cfg = config_from_args(parse_args(["--drone-init-mode", "cluster"]))
    assert cfg["drone_init_mode"] == "clustered-near-source"
    assert cfg["ap_x_m"] == 0.0


def test_headless_run(capsys):
    sim = main(["--no-viz", "--sim-time", "24", "--num-drones", "1", "--log-level", "WARNING"])
    assert sim.finished
    assert sim.controller.active_count() == 1
    assert "=== Simulation Summary ===" in capsys.readouterr().out


def test_explicit_ap_x_wins_in_even_mode():
    cfg = config_from_args(parse_args(["--drone-init-mode", "even", "--ap-x", "80"]))
    assert cfg["ap_x_m"] == 80.0
