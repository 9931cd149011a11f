from pathlib import Path

import pytest

from app.config import Settings


def test_defaults(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("LEAD_SHEET_PATH", raising=False)

    current = Settings(_env_file=None)

    assert current.log_level == "INFO"
    assert current.lead_sheet_path is None
    assert current.lead_output_dir == Path("output")


def test_env_file_values_are_loaded(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("LEAD_SHEET_PATH", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("LOG_LEVEL=DEBUG\nLEAD_SHEET_PATH=sheets/leads.csv\nUNRELATED=1\n", encoding="utf-8")

    current = Settings(_env_file=env_file)

    assert current.log_level == "DEBUG"
    assert current.lead_sheet_path == Path("sheets/leads.csv")


def test_environment_overrides_env_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    env_file = tmp_path / ".env"
    env_file.write_text("LOG_LEVEL=DEBUG\n", encoding="utf-8")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")

    assert Settings(_env_file=env_file).log_level == "WARNING"
