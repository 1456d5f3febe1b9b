"""
In-process key-value store.

Keeps serialized JSON strings in a dict so values behave exactly like the
durable backends (no shared mutable references between reads).
"""

from typing import Dict, List, Optional

from .base import KeyValueStore


class MemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed store for tests and ephemeral sessions."""

    backend_name = "memory"

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def _read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def _write(self, key: str, raw: str) -> None:
        self._data[key] = raw

    async def _delete(self, keys: List[str]) -> None:
        for key in keys:
            self._data.pop(key, None)

    async def _list_keys(self) -> List[str]:
        return list(self._data.keys())
