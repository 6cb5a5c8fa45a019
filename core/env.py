"""Environment variable helpers."""

from __future__ import annotations

import os
from typing import Optional

from core.logging import get_logger

logger = get_logger(__name__)

_TRUTHY = {"1", "true", "yes", "y", "on"}
_FALSY = {"0", "false", "no", "n", "off"}


def env_str(key: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(key)
    if value is None or not value.strip():
        logger.debug("Environment variable %s not set. Using default=%s.", key, default)
        return default
    return value.strip()


def env_first(*keys: str, default: Optional[str] = None) -> Optional[str]:
    """Return the first non-empty value among ``keys`` (synonymous variables)."""
    for key in keys:
        value = env_str(key)
        if value:
            return value
    return default


def env_url(*keys: str, default: str) -> str:
    """Resolve a base URL from ``keys`` and drop any trailing slash."""
    value = env_first(*keys, default=default) or default
    return value.rstrip("/")


def env_int(key: str, default: int, *, minimum: Optional[int] = None) -> int:
    raw = os.getenv(key)
    if raw is None:
        return default
    try:
        value = int(raw)
        if minimum is not None and value < minimum:
            raise ValueError
        return value
    except ValueError:
        logger.warning("Invalid %s value '%s'. Falling back to %d.", key, raw, default)
        return default


def env_float(key: str, default: float, *, minimum: Optional[float] = None) -> float:
    raw = os.getenv(key)
    if raw is None:
        return default
    try:
        value = float(raw)
        if minimum is not None and value < minimum:
            raise ValueError
        return value
    except ValueError:
        logger.warning("Invalid %s value '%s'. Falling back to %.2f.", key, raw, default)
        return default


def env_bool(key: str, default: bool) -> bool:
    raw = os.getenv(key)
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    logger.warning("Invalid boolean env %s='%s'. Using default=%s.", key, raw, default)
    return default
