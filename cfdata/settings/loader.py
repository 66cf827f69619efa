"""Helpers for loading configuration."""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

DEFAULT_CONFIG_NAME = "config.toml"
CONFIG_ENV_VAR = "CFDATA_CONFIG"
ENVIRONMENT_ENV_VAR = "CONTENTFUL_ENVIRONMENT_ID"

DEFAULT_ENVIRONMENT_ID = "master"
DEFAULT_BASE_URL = "https://api.contentful.com"
DEFAULT_UPLOAD_URL = "https://upload.contentful.com"
DEFAULT_LOG_FILE = "cfdata.log"

# Three items per run and a single bulk publish of at most 200 links.
MAX_SETUP_COUNT = 66


class ConfigError(ValueError):
    """Raised when the configuration file cannot be used."""


@dataclass(slots=True)
class ContentfulSettings:
    environment_id: str = DEFAULT_ENVIRONMENT_ID
    base_url: str = DEFAULT_BASE_URL
    upload_url: str = DEFAULT_UPLOAD_URL
    max_workers: int = 8


@dataclass(slots=True)
class HttpSettings:
    timeout: float = 30.0
    max_attempts: int = 5
    backoff_factor: float = 1.5


@dataclass(slots=True)
class ProcessingSettings:
    """Polling limits for asset processing and bulk actions."""

    poll_interval: float = 2.0
    max_polls: int = 10


@dataclass(slots=True)
class SetupSettings:
    count: int = 10
    image_width: int = 400
    image_height: int = 225
    faker_locale: str = "en_GB"
    seed: int | None = None


@dataclass(slots=True)
class LoggingSettings:
    file: Path = Path(DEFAULT_LOG_FILE)
    level: int = logging.INFO
    console_level: int = logging.DEBUG


@dataclass(slots=True)
class AppConfig:
    contentful: ContentfulSettings
    http: HttpSettings
    processing: ProcessingSettings
    setup: SetupSettings
    logging: LoggingSettings
    source: Path | None = None


def _to_path(value: str | os.PathLike[str]) -> Path:
    """Resolve ``value`` against the current working directory."""
    candidate = Path(value)
    return candidate if candidate.is_absolute() else Path.cwd() / candidate


def _config_path(explicit: str | os.PathLike[str] | None, env: Mapping[str, str]) -> Path | None:
    if explicit:
        candidate = Path(explicit)
    else:
        env_value = env.get(CONFIG_ENV_VAR)
        if not env_value:
            default = _to_path(DEFAULT_CONFIG_NAME)
            return default if default.exists() else None
        candidate = Path(env_value)
    candidate = _to_path(candidate)
    if not candidate.exists():
        raise ConfigError(f"Config file not found: {candidate}")
    return candidate


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as fp:
            return tomllib.load(fp)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = data.get(name, {})
    if not isinstance(value, Mapping):
        raise ConfigError(f"Section [{name}] must be a table")
    return value


def _positive_int(
    section: Mapping[str, Any], key: str, default: int, *, maximum: int | None = None
) -> int:
    raw = section.get(key, default)
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"'{key}' must be an integer, got {raw!r}") from exc
    if value < 1:
        raise ConfigError(f"'{key}' must be at least 1, got {value}")
    if maximum is not None and value > maximum:
        raise ConfigError(f"'{key}' must be at most {maximum}, got {value}")
    return value


def _level(value: Any, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, int):
        return value
    resolved = logging.getLevelName(str(value).upper())
    if not isinstance(resolved, int):
        raise ConfigError(f"Unknown log level: {value!r}")
    return resolved


def load_config(
    config_path: str | os.PathLike[str] | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> AppConfig:
    """Build the application config from an optional TOML file plus environment."""

    env = env if env is not None else os.environ
    path = _config_path(config_path, env)
    data = _load_toml(path) if path is not None else {}

    contentful_section = _section(data, "contentful")
    http_section = _section(data, "http")
    processing_section = _section(data, "processing")
    setup_section = _section(data, "setup")
    logging_section = _section(data, "logging")

    environment_id = (
        env.get(ENVIRONMENT_ENV_VAR)
        or contentful_section.get("environment_id")
        or DEFAULT_ENVIRONMENT_ID
    )
    contentful = ContentfulSettings(
        environment_id=str(environment_id),
        base_url=str(contentful_section.get("base_url", DEFAULT_BASE_URL)).rstrip("/"),
        upload_url=str(contentful_section.get("upload_url", DEFAULT_UPLOAD_URL)).rstrip("/"),
        max_workers=_positive_int(contentful_section, "max_workers", 8),
    )

    http_settings = HttpSettings(
        timeout=float(http_section.get("timeout", 30)),
        max_attempts=_positive_int(http_section, "max_attempts", 5),
        backoff_factor=float(http_section.get("backoff_factor", 1.5)),
    )

    processing = ProcessingSettings(
        poll_interval=float(processing_section.get("poll_interval", 2.0)),
        max_polls=_positive_int(processing_section, "max_polls", 10),
    )

    seed_raw = setup_section.get("seed")
    setup = SetupSettings(
        count=_positive_int(setup_section, "count", 10, maximum=MAX_SETUP_COUNT),
        image_width=_positive_int(setup_section, "image_width", 400),
        image_height=_positive_int(setup_section, "image_height", 225),
        faker_locale=str(setup_section.get("faker_locale", "en_GB")),
        seed=int(seed_raw) if seed_raw is not None else None,
    )

    logging_settings = LoggingSettings(
        file=_to_path(logging_section.get("file") or DEFAULT_LOG_FILE),
        level=_level(logging_section.get("level"), logging.INFO),
        console_level=_level(logging_section.get("console_level"), logging.DEBUG),
    )

    return AppConfig(
        contentful=contentful,
        http=http_settings,
        processing=processing,
        setup=setup,
        logging=logging_settings,
        source=path,
    )

