"""
Durable key-value store interface and implementations.

The filter store persists its model through an async, string-keyed
get/set/remove store. This module defines that interface as a Protocol and
provides two implementations:

- InMemoryKeyValueStore: dict-backed, for tests and ephemeral servers
- FileKeyValueStore: one file per key under a root directory

Backends raise PersistenceError on failure; callers decide how to degrade.
"""

import asyncio
import re
from pathlib import Path
from typing import Optional, Protocol, Union, runtime_checkable

from crypto_filters.exceptions import PersistenceError


@runtime_checkable
class KeyValueStore(Protocol):
    """
    Protocol defining the durable key-value store interface.

    All methods are coroutines; values are strings (the caller serializes).

    Methods:
        get_item: Return the stored value, or None if the key is absent
        set_item: Store a value, replacing any previous one
        remove_item: Delete a key (absent keys are not an error)
    """

    async def get_item(self, key: str) -> Optional[str]:
        ...

    async def set_item(self, key: str, value: str) -> None:
        ...

    async def remove_item(self, key: str) -> None:
        ...


class InMemoryKeyValueStore:
    """
    Dict-backed key-value store.

    Data is lost on restart. Tracks call counts so tests can assert how
    many writes a mutation triggered.

    Attributes:
        items: Stored values by key (exposed for tests to seed/corrupt)
        call_counts: Number of calls per method
    """

    def __init__(self, items: Optional[dict[str, str]] = None) -> None:
        self.items: dict[str, str] = dict(items or {})
        self.call_counts = {
            "get_item": 0,
            "set_item": 0,
            "remove_item": 0,
        }

    async def get_item(self, key: str) -> Optional[str]:
        self.call_counts["get_item"] += 1
        return self.items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self.call_counts["set_item"] += 1
        self.items[key] = value

    async def remove_item(self, key: str) -> None:
        self.call_counts["remove_item"] += 1
        self.items.pop(key, None)


# Characters outside this set are replaced when mapping keys to filenames
_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class FileKeyValueStore:
    """
    Local filesystem key-value store: one UTF-8 file per key.

    Blocking file I/O runs in a worker thread so the event loop never
    stalls on disk. OSErrors are wrapped as PersistenceError.
    """

    def __init__(self, root: Union[Path, str]) -> None:
        self.root = Path(root).resolve()

    def _resolve(self, key: str) -> Path:
        if not key:
            raise PersistenceError(key, "resolve", ValueError("empty key"))
        filename = _UNSAFE_KEY_CHARS.sub("_", key).lstrip(".") or "_"
        full_path = (self.root / f"{filename}.json").resolve()
        # Prevent path traversal
        if full_path.parent != self.root:
            raise PersistenceError(key, "resolve", ValueError(f"Access denied: {key}"))
        return full_path

    def _read(self, key: str) -> Optional[str]:
        path = self._resolve(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(key, "get", e) from e

    def _write(self, key: str, value: str) -> None:
        path = self._resolve(key)
        tmp_path = path.with_suffix(".tmp")
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(value, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            raise PersistenceError(key, "set", e) from e

    def _remove(self, key: str) -> None:
        path = self._resolve(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(key, "remove", e) from e

    async def get_item(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._read, key)

    async def set_item(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, key, value)

    async def remove_item(self, key: str) -> None:
        await asyncio.to_thread(self._remove, key)
