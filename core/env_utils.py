"""Helpers for loading optional .env files."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv  # type: ignore

from core.logging import get_logger

logger = get_logger(__name__)

# `.env.local` wins over `.env`; neither overrides real process variables.
_DEFAULT_ENV_FILES: Sequence[str] = (".env.local", ".env")


def load_dotenv_if_available(path: Optional[Path] = None) -> None:
    """Load environment variables from the first existing .env file."""

    candidates = [path] if path is not None else [Path(name) for name in _DEFAULT_ENV_FILES]
    for env_path in candidates:
        try:
            if env_path.exists():
                load_dotenv(dotenv_path=env_path, override=False)
                logger.debug("Loaded environment variables from %s", env_path)
        except Exception as exc:  # pragma: no cover - best effort
            logger.warning("Failed to load .env file %s: %s", env_path, exc)


__all__ = ["load_dotenv_if_available"]
