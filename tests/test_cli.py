"""CLI workflow tests for asset-twin.

Tests the simulate command end to end against the project config and the
bundled spares dataset.
"""

import json
from pathlib import Path

import pandas as pd

from asset_twin import simulate
from asset_twin.run import main


class TestSimulateCommand:
    """Tests for the simulate command."""

    def test_simulate_exports_results(self, config_dir: Path, tmp_path: Path):
        summary, out = simulate(
            config_dir=str(config_dir),
            cycles=3,
            output_dir=str(tmp_path),
            seed=7,
        )

        assert out == tmp_path
        assert summary["cycles"] == 3
        assert summary["machines"]["total"] == 4
        assert summary["spares"]["total"] == 14

        for name in ("machines", "spares", "alerts", "maintenance"):
            files = list(tmp_path.glob(f"{name}_*.csv"))
            assert len(files) == 1, name

        machines = pd.read_csv(next(tmp_path.glob("machines_*.csv")))
        assert len(machines) == 4
        assert "remaining_life" in machines.columns

        summary_file = next(tmp_path.glob("summary_*.json"))
        with open(summary_file) as f:
            saved = json.load(f)
        assert saved["random_seed"] == 7

    def test_low_life_machine_raises_unsent_alerts(self, config_dir: Path):
        """CNC-Lathe-03 starts at 18% so it alerts; no channel means unsent."""
        summary, out = simulate(
            config_dir=str(config_dir), cycles=2, export=False, seed=1
        )

        assert out is None
        assert summary["machines"]["critical"] >= 1
        assert summary["alerts"]["critical"] >= 3
        assert summary["alerts"]["sent_via_whatsapp"] == 0

    def test_same_seed_same_summary(self, config_dir: Path):
        first, _ = simulate(config_dir=str(config_dir), cycles=5, export=False, seed=3)
        second, _ = simulate(config_dir=str(config_dir), cycles=5, export=False, seed=3)

        assert first == second


class TestMain:
    """Tests for the argparse entry point."""

    def test_simulate_subcommand(self, config_dir: Path, capsys):
        main(
            [
                "--log-level",
                "WARNING",
                "simulate",
                "--config",
                str(config_dir),
                "--cycles",
                "1",
                "--seed",
                "5",
                "--no-export",
            ]
        )

        captured = capsys.readouterr()
        assert "FLEET SUMMARY" in captured.out
        assert "Machines: 4" in captured.out

    def test_no_command_prints_help(self, capsys):
        main([])

        assert "simulate" in capsys.readouterr().out
