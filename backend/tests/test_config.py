"""Tests for config file bootstrap, layering and credential checks."""
from __future__ import annotations

from pathlib import Path

import pytest

from shared.config import CONFIG_FILENAME, DEFAULT_TIDE_ABBREVIATIONS, Environment, load_settings
from shared.errors import ConfigurationError

FILLED = """\
google_api_key = "g-key"

[statink]
username = "someone"
identity_cookie = "cookie"

[summary.tide_abbreviations]
low = "LT"
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("VL_GOOGLE_API_KEY", "VL_STATINK__USERNAME", "VL_ENVIRONMENT", "VL_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def test_missing_config_creates_template(tmp_path: Path) -> None:
    config_dir = tmp_path / "vodlinker"
    with pytest.raises(ConfigurationError) as excinfo:
        load_settings(config_dir)
    assert (config_dir / CONFIG_FILENAME).exists()
    assert str(config_dir / CONFIG_FILENAME) in excinfo.value.hint


def test_template_loads_but_lacks_credentials(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_settings(tmp_path)
    settings = load_settings(tmp_path)
    assert settings.summary.tide_abbreviations == DEFAULT_TIDE_ABBREVIATIONS
    with pytest.raises(ConfigurationError) as excinfo:
        settings.require_credentials()
    assert "statink.identity_cookie" in excinfo.value.message


def test_filled_config(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text(FILLED, encoding="utf-8")
    settings = load_settings(tmp_path)
    settings.require_credentials()
    assert settings.google_api_key == "g-key"
    assert settings.statink.username == "someone"
    assert settings.summary.tide_abbreviations == {"low": "LT"}
    assert settings.environment == Environment.DEV


def test_environment_overrides_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / CONFIG_FILENAME).write_text(FILLED, encoding="utf-8")
    monkeypatch.setenv("VL_STATINK__USERNAME", "other")
    monkeypatch.setenv("VL_ENVIRONMENT", "production")
    settings = load_settings(tmp_path)
    assert settings.statink.username == "other"
    assert settings.statink.identity_cookie == "cookie"
    assert settings.environment == Environment.PRODUCTION


def test_invalid_toml(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("google_api_key = ", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_settings(tmp_path)


def test_secrets_hidden_from_repr(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text(FILLED, encoding="utf-8")
    text = repr(load_settings(tmp_path))
    assert "cookie'" not in text
    assert "g-key" not in text


def test_wrong_value_types_are_configuration_errors(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text(
        'google_api_key = 5\nenvironment = "staging"\n', encoding="utf-8"
    )
    with pytest.raises(ConfigurationError) as excinfo:
        load_settings(tmp_path)
    assert "environment" in excinfo.value.message
    assert "google_api_key" in excinfo.value.message
    assert str(tmp_path / CONFIG_FILENAME) in excinfo.value.hint


def test_bad_environment_variable_is_configuration_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / CONFIG_FILENAME).write_text(FILLED, encoding="utf-8")
    monkeypatch.setenv("VL_ENVIRONMENT", "staging")
    with pytest.raises(ConfigurationError) as excinfo:
        load_settings(tmp_path)
    assert "environment" in excinfo.value.message


def test_unreadable_config_file(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).mkdir()
    with pytest.raises(ConfigurationError) as excinfo:
        load_settings(tmp_path)
    assert "Could not read" in excinfo.value.message
