from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from speeddns.config import get_settings
from speeddns.main import app

runner = CliRunner()


@pytest.fixture
def cli_data_dir(monkeypatch, tmp_path: Path):
    data = tmp_path / "data"
    monkeypatch.setenv("DATA_DIR", str(data))
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    get_settings.cache_clear()
    root = logging.getLogger()
    before, level = set(root.handlers), root.level
    yield data
    for handler in list(root.handlers):
        if handler not in before:
            root.removeHandler(handler)
    root.setLevel(level)
    get_settings.cache_clear()


def test_configure_then_info_masks_key(cli_data_dir: Path) -> None:
    result = runner.invoke(
        app,
        ["configure", "--zone-id", "zone-1", "--api-key", "secret-api-key", "--domains", "a.example.com", "--colo", "hkg"],
    )
    assert result.exit_code == 0, result.output
    assert "Saved api_key, colo, domains, zone_id." in result.output

    stored = json.loads((cli_data_dir / "config.json").read_text(encoding="utf-8"))
    assert stored["colo"] == "HKG"

    result = runner.invoke(app, ["info"])
    assert result.exit_code == 0, result.output
    assert "secr****" in result.output
    assert "secret-api-key" not in result.output


def test_configure_rejects_unknown_ip_type(cli_data_dir: Path) -> None:
    result = runner.invoke(app, ["configure", "--ip-type", "v5"])

    assert result.exit_code == 2
    assert not (cli_data_dir / "config.json").exists()


def test_configure_without_options_changes_nothing(cli_data_dir: Path) -> None:
    result = runner.invoke(app, ["configure"])

    assert result.exit_code == 0
    assert "Nothing to change." in result.output


def test_run_without_cfst_exits_nonzero(cli_data_dir: Path) -> None:
    runner.invoke(app, ["configure", "--domains", "a.example.com"])

    result = runner.invoke(app, ["run"])

    assert result.exit_code == 1
    assert "failed" in result.output


def test_logs_read_and_clear(cli_data_dir: Path) -> None:
    runner.invoke(app, ["run"])

    result = runner.invoke(app, ["logs"])
    assert result.exit_code == 0
    assert "[RUN FAILED]" in result.output

    result = runner.invoke(app, ["logs", "--clear"])
    assert result.exit_code == 0
    assert (cli_data_dir / "app.log").read_text(encoding="utf-8").strip().endswith("=== logs cleared ===")
