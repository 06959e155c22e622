from pathlib import Path

import pytest

from license_finder.errors import ConfigError
from license_finder.settings import Settings, default_settings, load_settings


def test_default_settings_read_environment(monkeypatch):
    monkeypatch.setenv("LICENSE_FINDER_SUMMARY", "Detail")
    monkeypatch.setenv("LICENSE_FINDER_FORMAT", "json")

    settings = default_settings()
    assert settings.summary_mode == "detail"
    assert settings.fmt == "json"


def test_load_settings_overlays_yaml(tmp_path: Path):
    config = tmp_path / "license-finder.yml"
    config.write_text("summary: simple\nformat: csv\ndepth: 2\nproduction: true\n")

    settings = load_settings(config, Settings())
    assert settings.as_dict() == {
        "summary_mode": "simple",
        "fmt": "csv",
        "depth": 2,
        "production_only": True,
    }


def test_load_settings_accepts_bare_off(tmp_path: Path):
    config = tmp_path / "license-finder.yml"
    config.write_text("summary: off\n")
    assert load_settings(config, Settings(summary_mode="detail")).summary_mode == "off"


def test_invalid_settings_raise_config_error(tmp_path: Path):
    config = tmp_path / "license-finder.yml"
    config.write_text("format: html\n")
    with pytest.raises(ConfigError):
        load_settings(config, Settings())

    with pytest.raises(ConfigError):
        Settings(depth=-1)


def test_merge_ignores_missing_overrides():
    settings = Settings(summary_mode="simple").merge(summary_mode=None, depth=3)
    assert settings.summary_mode == "simple"
    assert settings.depth == 3
