"""
Central configuration for vodlinker.
Uses pydantic-settings for env-based config with validation, layered over
the user's TOML config file.
"""
from __future__ import annotations

import os
import tomllib
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    SettingsError,
)

from shared.errors import ConfigurationError

APP_NAME = "vodlinker"
CONFIG_FILENAME = "config.toml"

DEFAULT_TIDE_ABBREVIATIONS: dict[str, str] = {
    "low": "Low",
    "normal": "Mid",
    "high": "High",
}

# Written on first run so the user has something to fill in.
CONFIG_TEMPLATE = """\
google_api_key = ""

[statink]
username = ""
identity_cookie = ""

[summary.tide_abbreviations]
low = "Low"
normal = "Mid"
high = "High"
"""


class Environment(str, Enum):
    DEV = "dev"
    PRODUCTION = "production"


class StatInkSettings(BaseModel):
    username: str = ""
    identity_cookie: str = Field(default="", repr=False)


class HTTPSettings(BaseModel):
    request_timeout_s: float = 15.0
    user_agent: str = f"Mozilla/5.0 (compatible; {APP_NAME}/0.3.0)"


class SummarySettings(BaseModel):
    tide_abbreviations: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_TIDE_ABBREVIATIONS)
    )


class Settings(BaseSettings):
    """Root settings; env vars override the config file."""

    model_config = SettingsConfigDict(
        env_prefix="VL_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── General ──────────────────────────────────────────────
    environment: Environment = Environment.DEV
    log_level: str = "INFO"

    # ── Credentials ──────────────────────────────────────────
    google_api_key: str = Field(default="", repr=False)
    statink: StatInkSettings = Field(default_factory=StatInkSettings)

    # ── HTTP ─────────────────────────────────────────────────
    http: HTTPSettings = Field(default_factory=HTTPSettings)

    # ── Summary ──────────────────────────────────────────────
    summary: SummarySettings = Field(default_factory=SummarySettings)

    # ── Observability ────────────────────────────────────────
    metrics_file: Optional[Path] = Field(
        default=None, description="Write Prometheus text metrics here after each run"
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # File values arrive as init kwargs; the environment wins over them.
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    def require_credentials(self) -> None:
        """Raise ConfigurationError naming every credential that is still empty."""
        missing = []
        if not self.google_api_key:
            missing.append("google_api_key")
        if not self.statink.username:
            missing.append("statink.username")
        if not self.statink.identity_cookie:
            missing.append("statink.identity_cookie")
        if missing:
            raise ConfigurationError(
                f"Missing configuration values: {', '.join(missing)}",
                hint="Fill them in your config file or set the matching VL_ environment variables.",
            )


def default_config_dir() -> Path:
    """$XDG_CONFIG_HOME/vodlinker, falling back to ~/.config/vodlinker."""
    base = os.environ.get("XDG_CONFIG_HOME")
    root = Path(base) if base else Path.home() / ".config"
    return root / APP_NAME


def read_config_file(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(
            f"Could not parse configuration file {path}: {exc}",
            hint="Fix the TOML syntax or delete the file to regenerate the template.",
        ) from exc
    except OSError as exc:
        raise ConfigurationError(
            f"Could not read configuration file {path}: {exc.strerror or exc}",
            hint=f"Make sure {path} is a readable file.",
        ) from exc


def _describe_errors(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc']) or '<root>'}: {err['msg']}"
        for err in exc.errors()
    )


def load_settings(config_dir: Path | None = None) -> Settings:
    """
    Load settings from <config_dir>/config.toml plus the environment.

    A missing config directory is created together with a template file and
    reported as a ConfigurationError so the user can fill it in. Values of the
    wrong type, from the file or a VL_ variable, are ConfigurationErrors too.
    """
    config_dir = config_dir or default_config_dir()
    config_file = config_dir / CONFIG_FILENAME

    if not config_file.exists():
        config_dir.mkdir(parents=True, exist_ok=True)
        config_file.write_text(CONFIG_TEMPLATE, encoding="utf-8")
        raise ConfigurationError(
            f"No configuration file found, created a template at {config_file}",
            hint=f"Please fill in your config file at {config_file}!",
        )

    try:
        return Settings(**read_config_file(config_file))
    except ValidationError as exc:
        raise ConfigurationError(
            f"Invalid configuration values: {_describe_errors(exc)}",
            hint=f"Correct them in {config_file} or in the matching VL_ environment variables.",
        ) from exc
    except SettingsError as exc:
        raise ConfigurationError(
            f"Could not read settings from the environment: {exc}",
            hint="Check the VL_ environment variables; nested values must be valid JSON.",
        ) from exc
