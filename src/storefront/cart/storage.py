"""Durable local storage for the cart.

Storage is a flat string key/value store, the server-side analogue of browser
local storage: the cart serializes itself to one JSON string under one key.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)


class CartStorage(ABC):
    """Abstract key/value storage for serialized carts."""

    @abstractmethod
    def read(self, key: str) -> str | None:
        """Return the value stored under ``key``, or None when absent."""
        ...

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...


class MemoryCartStorage(CartStorage):
    """Process-local storage, lost on exit."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(initial or {})
        self.writes = 0

    def read(self, key: str) -> str | None:
        return self.values.get(key)

    def write(self, key: str, value: str) -> None:
        self.values[key] = value
        self.writes += 1


class FileCartStorage(CartStorage):
    """Storage kept in a single JSON object file of key -> string value.

    A missing or unreadable file reads as empty. Writes go to a temporary
    sibling first and are moved into place, so a crash mid-write leaves the
    previous contents intact.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            logger.warning("Cart storage file unreadable", path=str(self.path), error=str(exc))
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Cart storage file is not valid JSON", path=str(self.path), error=str(exc))
            return {}

        return data if isinstance(data, dict) else {}

    def read(self, key: str) -> str | None:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def write(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(json.dumps(data), encoding="utf-8")
        tmp_path.replace(self.path)
