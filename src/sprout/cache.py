from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

from .logging import get_logger


log = get_logger("sprout.cache")


class SeederCache(Protocol):
    """Key-value store used by cached steps.

    ``get`` returns ``default`` for a missing key, so a stored ``None`` can be
    told apart from an absent one by passing a sentinel.
    """

    async def get(self, key: str, default: Any = None) -> Any: ...

    async def set(self, key: str, value: Any) -> None: ...


class MemoryCache:
    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    async def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def clear(self) -> None:
        self._data.clear()


class JsonFileCache:
    """Cache persisted as a single JSON document.

    The file is read on first access and rewritten atomically on every
    ``set``. Values must be JSON serializable.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._data: dict[str, Any] | None = None

    def _load(self) -> dict[str, Any]:
        if self._data is None:
            try:
                self._data = json.loads(self.path.read_text(encoding="utf-8"))
            except FileNotFoundError:
                self._data = {}
            except json.JSONDecodeError:
                log.warning("Ignoring unreadable cache file %s", self.path)
                self._data = {}
        return self._data

    def _write(self, data: dict[str, Any]) -> None:
        # Serialize first so an unserializable value leaves the file untouched
        payload = json.dumps(data, indent=2, sort_keys=True)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=self.path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    async def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    async def set(self, key: str, value: Any) -> None:
        data = dict(self._load())
        data[key] = value
        self._write(data)
        self._data = data
        log.debug("Cached %s in %s", key, self.path)
