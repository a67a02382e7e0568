from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from openapi_tooldefs.errors import ConfigurationError

__all__ = ["Settings", "ENV_PREFIX"]

ENV_PREFIX = "OPENAPI_TOOLDEFS_"


def _env_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}", key=key) from None
    if value <= 0:
        raise ConfigurationError(f"{key} must be positive, got {raw!r}", key=key)
    return value


def _env_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}", key=key) from None
    if value < 8:
        raise ConfigurationError(f"{key} must be at least 8, got {raw!r}", key=key)
    return value


@dataclass(frozen=True)
class Settings:
    """Runtime settings, read from ``OPENAPI_TOOLDEFS_*`` environment variables.

    CLI options take precedence over these values.
    """

    log_level: str = "INFO"
    log_format: str = "human"
    fetch_timeout: float = 30.0
    cookie: Optional[str] = None
    max_name_length: int = 64

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        log_format = env.get(f"{ENV_PREFIX}LOG_FORMAT", "human").lower()
        if log_format not in ("human", "json"):
            raise ConfigurationError(
                f"Unknown log format {log_format!r}",
                key=f"{ENV_PREFIX}LOG_FORMAT",
                hint="Use 'human' or 'json'",
            )
        return cls(
            log_level=env.get(f"{ENV_PREFIX}LOG_LEVEL", "INFO").upper(),
            log_format=log_format,
            fetch_timeout=_env_float(env, f"{ENV_PREFIX}FETCH_TIMEOUT", 30.0),
            cookie=env.get(f"{ENV_PREFIX}COOKIE") or None,
            max_name_length=_env_int(env, f"{ENV_PREFIX}MAX_NAME_LENGTH", 64),
        )
