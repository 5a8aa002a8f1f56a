"""Environment variable loaders for configuration."""

from __future__ import annotations

import os

from .errors import ConfigurationError


def env_text(name: str) -> str | None:
    """Return the stripped value of ``name``; unset and blank both read as ``None``."""

    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def env_positive_int(name: str, default: int) -> int:
    """Read a positive integer from the environment, falling back to ``default`` when unset."""

    raw = env_text(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return value


def env_positive_float(name: str, default: float) -> float:
    raw = env_text(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return value
