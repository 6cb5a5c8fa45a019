"""Small JSON-list state files kept on disk with an in-memory cache."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence


class JsonStateStore:
    """Persist a list of JSON objects under ``{root_key: [...]}``."""

    def __init__(self, path: Path, root_key: str, *, logger: Optional[logging.Logger] = None) -> None:
        self._path = Path(path)
        self._root_key = root_key
        self._cache: Optional[List[Dict[str, Any]]] = None
        self._cache_path: Optional[Path] = None
        self._logger = logger or logging.getLogger(__name__)

    @property
    def path(self) -> Path:
        return self._path

    def load(self, *, reload: bool = False) -> List[Dict[str, Any]]:
        """Return a copy of the stored items; unreadable files load as empty."""

        if reload or self._cache is None or self._cache_path != self._path:
            try:
                payload = json.loads(self._path.read_text(encoding="utf-8"))
                items = payload.get(self._root_key, []) if isinstance(payload, Mapping) else None
                if not isinstance(items, list):
                    raise ValueError("root is not a list")
            except FileNotFoundError:
                items = []
            except (OSError, json.JSONDecodeError, ValueError) as exc:
                self._logger.warning("Failed to load state from %s: %s", self._path, exc)
                items = []
            self._cache = [dict(item) for item in items if isinstance(item, Mapping)]
            self._cache_path = self._path

        return [dict(item) for item in self._cache]

    def store(self, items: Sequence[Mapping[str, Any]]) -> None:
        """Replace the file contents with ``items`` (written via a temp file)."""

        rows = [dict(item) for item in items]
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps({self._root_key: rows}, ensure_ascii=False, indent=2), encoding="utf-8")
        os.replace(tmp_path, self._path)
        self._cache = rows
        self._cache_path = self._path

    def append(self, item: Mapping[str, Any]) -> None:
        items = self.load(reload=True)
        items.append(dict(item))
        self.store(items)

    def reset(self, *, path: Optional[Path] = None) -> None:
        """Clear cached state and optionally repoint the underlying file."""

        if path is not None:
            self._path = Path(path)
        self._cache = None
        self._cache_path = None


__all__ = ["JsonStateStore"]
