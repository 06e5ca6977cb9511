"""Tests for the CLI run flow."""

from __future__ import annotations

import json

import pytest

from cli.main import run_cli


def _config(tmp_path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        """
simulation: idle_chase
params:
  chaser_count: 4
  milestone_interval: 20
session:
  random_seed: 7
  tick_seconds: 0.05
  auto_start: true
logging:
  log_level: warning
  snapshot_interval: 5
  session_name: cli_test
""".strip()
        + "\n",
        encoding="utf-8",
    )
    return config_path


def test_cli_run_prints_summary_and_persists_high_score(tmp_path, capsys) -> None:
    store_path = tmp_path / "scores.json"

    assert run_cli(["run", "--config", str(_config(tmp_path)), "--steps", "200", "--store", str(store_path)]) == 0

    summary = json.loads(capsys.readouterr().out)
    assert summary["session_name"] == "cli_test"
    assert summary["seed"] == 7
    assert summary["steps"] == 200
    assert summary["score"] > 0
    assert summary["high_score"] == summary["score"]
    assert summary["messages"]
    assert json.loads(store_path.read_text(encoding="utf-8"))["idle_high_score"] == summary["high_score"]


def test_cli_second_run_keeps_previous_best(tmp_path, capsys) -> None:
    store_path = tmp_path / "scores.json"
    store_path.write_text(json.dumps({"idle_high_score": 99999}), encoding="utf-8")

    assert run_cli(["run", "--config", str(_config(tmp_path)), "--steps", "20", "--store", str(store_path)]) == 0

    summary = json.loads(capsys.readouterr().out)
    assert summary["high_score"] == 99999
    assert summary["score"] < 99999


def test_cli_requires_a_command() -> None:
    with pytest.raises(SystemExit):
        run_cli([])
