"""Configuration management for the employee directory."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

import yaml

from .database import resolve_database_path

_ENV_PREFIX = "DIRECTORY_"

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

_ENV_KEYS = {
    "database_path": "DB_PATH",
    "host": "HOST",
    "port": "PORT",
    "api_url": "API_URL",
    "session_secret": "SESSION_SECRET",
    "cors_origins": "CORS_ORIGINS",
    "request_timeout": "REQUEST_TIMEOUT",
    "status_message_seconds": "STATUS_SECONDS",
    "log_level": "LOG_LEVEL",
}


def _split_origins(value: object) -> Tuple[str, ...]:
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = [str(item) for item in value]
    else:
        raise ValueError("cors_origins must be a string or a list of strings")
    return tuple(item.strip() for item in items if item.strip())


def _resolve_path(raw: object, base_path: Path | None) -> Path:
    candidate = Path(str(raw)).expanduser()
    if not candidate.is_absolute() and base_path is not None:
        candidate = base_path / candidate
    return candidate.resolve(strict=False)


def _as_positive_float(key: str, value: object) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{key} must be a number") from exc
    if number <= 0:
        raise ValueError(f"{key} must be greater than zero")
    return number


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the directory service and its web UI."""

    database_path: Path
    host: str = "0.0.0.0"
    port: int = 5000
    api_url: Optional[str] = None
    session_secret: Optional[str] = None
    cors_origins: Tuple[str, ...] = ("*",)
    request_timeout: float = 10.0
    status_message_seconds: float = 3.0
    log_level: str = "INFO"

    @staticmethod
    def from_dict(data: Mapping[str, object], base_path: Path | None = None) -> "Settings":
        """Create :class:`Settings` from raw dictionary data."""
        unknown = set(data.keys()) - set(_ENV_KEYS)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        raw_db_path = data.get("database_path")
        if raw_db_path:
            database_path = _resolve_path(raw_db_path, base_path)
        else:
            database_path = resolve_database_path(None)

        try:
            port = int(data.get("port", 5000))  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise ValueError("port must be an integer") from exc
        if not 0 < port < 65536:
            raise ValueError("port must be between 1 and 65535")

        api_url = data.get("api_url")
        cleaned_api_url = str(api_url).strip().rstrip("/") if api_url else None

        secret = data.get("session_secret")

        log_level = str(data.get("log_level", "INFO")).strip().upper()
        if log_level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {', '.join(_LOG_LEVELS)}")

        origins = data.get("cors_origins")
        cors_origins = _split_origins(origins) if origins is not None else ("*",)

        return Settings(
            database_path=database_path,
            host=str(data.get("host", "0.0.0.0")),
            port=port,
            api_url=cleaned_api_url or None,
            session_secret=str(secret) if secret else None,
            cors_origins=cors_origins,
            request_timeout=_as_positive_float("request_timeout", data.get("request_timeout", 10.0)),
            status_message_seconds=_as_positive_float(
                "status_message_seconds", data.get("status_message_seconds", 3.0)
            ),
            log_level=log_level,
        )

    def with_overrides(self, **changes: object) -> "Settings":
        return replace(self, **changes)  # type: ignore[arg-type]


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the optional YAML configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "directory.yaml").resolve(strict=False)
    return candidate


def _environment_values(environ: Mapping[str, str]) -> Dict[str, object]:
    values: Dict[str, object] = {}
    for key, suffix in _ENV_KEYS.items():
        raw = environ.get(_ENV_PREFIX + suffix)
        if raw is not None and raw.strip():
            values[key] = raw.strip()
    return values


def load_settings(
    config_path: Optional[Path] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Load settings from YAML (when present) and apply environment overrides."""
    if environ is None:
        environ = os.environ
    if config_path is None:
        config_path = resolve_config_path(environ.get(_ENV_PREFIX + "CONFIG"))

    raw: Dict[str, object] = {}
    base_path: Path | None = None
    if config_path.exists():
        with config_path.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle) or {}
        if not isinstance(loaded, dict):
            raise ValueError("Configuration file must contain a mapping of settings")
        raw.update(loaded)
        base_path = config_path.parent

    env_values = _environment_values(environ)
    if "database_path" in env_values:
        # Environment paths are relative to the working directory, not the config file.
        env_values["database_path"] = str(resolve_database_path(str(env_values["database_path"])))
    raw.update(env_values)

    return Settings.from_dict(raw, base_path=base_path)


__all__ = ["Settings", "load_settings", "resolve_config_path"]
