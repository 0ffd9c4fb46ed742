"""Simple memory-backed preferences backend.

This backend keeps values in memory as a data structure `[<store>][<key>]`.
Nothing persists across process restarts, which makes it the backend of
choice for unit tests.
"""
from threading import RLock
from typing import Any, Dict, Mapping, Optional

from prefs_lib.values import ValueKind, copy_value
from .base import PreferencesBackend, store_label


class InMemoryPreferencesBackend(PreferencesBackend):
    name = "memory"

    def __init__(self, stores: Optional[Mapping[str, Mapping[str, Any]]] = None):
        self._lock = RLock()
        self._stores: Dict[str, Dict[str, Any]] = {}
        for store, values in (stores or {}).items():
            self._stores[store] = {k: copy_value(v) for k, v in values.items()}

    @classmethod
    def empty(cls) -> "InMemoryPreferencesBackend":
        return cls()

    @classmethod
    def with_data(cls, data: Mapping[str, Any], store_name: Optional[str] = None) -> "InMemoryPreferencesBackend":
        """Create a backend whose store `store_name` holds a copy of `data`."""
        return cls({store_label(store_name): data})

    def _store(self, store_name: Optional[str]) -> Dict[str, Any]:
        return self._stores.setdefault(store_label(store_name), {})

    async def get_all(self, store_name: Optional[str] = None) -> Dict[str, Any]:
        with self._lock:
            return {k: copy_value(v) for k, v in self._store(store_name).items()}

    async def set_value(self, kind: ValueKind, key: str, value: Any, store_name: Optional[str] = None) -> bool:
        with self._lock:
            self._store(store_name)[key] = copy_value(value)
        return True

    async def remove(self, key: str, store_name: Optional[str] = None) -> bool:
        with self._lock:
            self._store(store_name).pop(key, None)
        return True

    async def clear(self, store_name: Optional[str] = None) -> bool:
        with self._lock:
            self._store(store_name).clear()
        return True
