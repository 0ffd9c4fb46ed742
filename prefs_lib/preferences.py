"""Preferences cache and loader.

`PreferencesManager` hands out a `Preferences` cache handle for the
currently selected store. The first `get_instance` call for a store name
starts a single backend load that every concurrent caller shares; once it
resolves, reads are served synchronously from the in-memory cache.

Writes are optimistic: the cache is updated before the backend write is
issued and is never rolled back if that write fails. Use `reload` to
resynchronize with the backend.
"""
from __future__ import annotations
import asyncio
import logging
from typing import Any, Awaitable, Dict, Iterator, List, Mapping, Optional, Set

from prefs_lib.exceptions import BackendError, InvalidArgument
from prefs_lib.storage.base import PreferencesBackend, check_store_name, store_label
from prefs_lib.storage.memory_backend import InMemoryPreferencesBackend
from prefs_lib.values import ValueKind, coerce_value, copy_value, is_string_sequence

logger = logging.getLogger(__name__)


def _check_key(key: Any) -> str:
    if not isinstance(key, str) or not key:
        raise InvalidArgument("key must be a non-empty string")
    return key


class Preferences:
    """Cache handle over one preferences store.

    Instances are created by `PreferencesManager.get_instance`; do not
    construct them directly. A handle stays bound to the backend and store
    it was loaded from.
    """

    def __init__(self, backend: PreferencesBackend, store_name: Optional[str], values: Mapping[str, Any]) -> None:
        self._backend = backend
        self._store_name = store_name
        # NOT guaranteed to stay in sync with the backend: writes are applied
        # here first and the backend write may still fail.
        self._cache: Dict[str, Any] = dict(values)

    @property
    def store_name(self) -> Optional[str]:
        return self._store_name

    def __repr__(self) -> str:
        return f"Preferences(store={store_label(self._store_name)!r}, keys={len(self._cache)})"

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, key: object) -> bool:
        return key in self._cache

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._cache))

    # Reads -----------------------------------------------------------------

    def get_keys(self) -> Set[str]:
        """Return all keys currently in the cache."""
        return set(self._cache)

    def as_dict(self) -> Dict[str, Any]:
        """Return a snapshot copy of the cache."""
        return {k: copy_value(v) for k, v in self._cache.items()}

    def get(self, key: str) -> Any:
        """Read a value of any kind, or None if the key is missing."""
        return copy_value(self._cache.get(key))

    def get_bool(self, key: str) -> Optional[bool]:
        value = self._cache.get(key)
        return value if isinstance(value, bool) else None

    def get_int(self, key: str) -> Optional[int]:
        value = self._cache.get(key)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return None

    def get_double(self, key: str) -> Optional[float]:
        value = self._cache.get(key)
        return value if isinstance(value, float) else None

    def get_string(self, key: str) -> Optional[str]:
        value = self._cache.get(key)
        return value if isinstance(value, str) else None

    def contains_key(self, key: str) -> bool:
        return key in self._cache

    def get_string_list(self, key: str) -> Optional[List[str]]:
        """Read a list of strings, or None if missing or not a string list.

        A loosely typed sequence (a tuple, a list subclass) is normalized to a
        plain list in the cache the first time it is read. The returned list
        is always a copy.
        """
        value = self._cache.get(key)
        if not is_string_sequence(value):
            return None
        if type(value) is not list:
            value = list(value)
            self._cache[key] = value
        return list(value)

    # Writes ----------------------------------------------------------------

    def set_bool(self, key: str, value: bool) -> asyncio.Task[bool]:
        """Save a boolean in the cache and persist it in the background."""
        return self._set_value(ValueKind.BOOL, key, value)

    def set_int(self, key: str, value: int) -> asyncio.Task[bool]:
        """Save a 64-bit integer in the cache and persist it in the background."""
        return self._set_value(ValueKind.INT, key, value)

    def set_double(self, key: str, value: float) -> asyncio.Task[bool]:
        """Save a float in the cache and persist it in the background.

        Integral numbers are stored as floats.
        """
        return self._set_value(ValueKind.DOUBLE, key, value)

    def set_string(self, key: str, value: str) -> asyncio.Task[bool]:
        return self._set_value(ValueKind.STRING, key, value)

    def set_string_list(self, key: str, value: List[str]) -> asyncio.Task[bool]:
        """Save a copy of a string list; later mutations of `value` do not leak in."""
        return self._set_value(ValueKind.STRING_LIST, key, value)

    def remove(self, key: str) -> asyncio.Task[bool]:
        """Remove `key` from the cache and from the backend."""
        loop = asyncio.get_running_loop()
        self._cache.pop(key, None)
        return self._schedule(loop, f"remove {key!r}", self._backend.remove(key, store_name=self._store_name))

    def clear(self) -> asyncio.Task[bool]:
        """Empty the cache and the backing store."""
        loop = asyncio.get_running_loop()
        self._cache.clear()
        return self._schedule(loop, "clear", self._backend.clear(store_name=self._store_name))

    async def reload(self) -> None:
        """Fetch the latest values from the backend, replacing the cache.

        Use this to observe changes made outside this process while it is
        running. Keys absent from the backend are dropped from the cache.
        On failure the cache is left untouched and `BackendError` is raised.
        """
        try:
            values = await self._backend.get_all(self._store_name)
        except BackendError:
            raise
        except Exception as exc:
            raise BackendError(f"Failed to reload preferences: {exc}") from exc
        self._cache.clear()
        self._cache.update(values)
        logger.debug("Reloaded %d preferences for store %s", len(values), store_label(self._store_name))

    def _set_value(self, kind: ValueKind, key: str, value: Any) -> asyncio.Task[bool]:
        _check_key(key)
        stored = coerce_value(kind, value)
        loop = asyncio.get_running_loop()
        self._cache[key] = stored
        # Pass the backend its own copy; the cache keeps `stored`.
        write = self._backend.set_value(kind, key, copy_value(stored), store_name=self._store_name)
        return self._schedule(loop, f"set {key!r}", write)

    def _schedule(self, loop: asyncio.AbstractEventLoop, what: str, operation: Awaitable[bool]) -> asyncio.Task[bool]:
        task = loop.create_task(self._complete(what, operation))
        task.add_done_callback(self._log_failure)
        return task

    async def _complete(self, what: str, operation: Awaitable[bool]) -> bool:
        try:
            return await operation
        except BackendError:
            raise
        except Exception as exc:
            raise BackendError(f"Backend failed to {what}: {exc}") from exc

    def _log_failure(self, task: asyncio.Task[bool]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("Background preference write failed for store %s: %s",
                           store_label(self._store_name), exc)


class PreferencesManager:
    """Owns the cache handle for the currently selected preferences store.

    Create one per application (in the composition root) and share it.
    Only one store is active at a time: asking for a different store name
    discards the current handle and loads the new store.
    """

    def __init__(self, backend: PreferencesBackend) -> None:
        self._backend = backend
        self._store_name: Optional[str] = None
        self._pending: Optional[asyncio.Task[Preferences]] = None

    @property
    def backend(self) -> PreferencesBackend:
        return self._backend

    @property
    def store_name(self) -> Optional[str]:
        """Name of the currently selected store (None for the default store)."""
        return self._store_name

    async def get_instance(self, store_name: Optional[str] = None) -> Preferences:
        """Return the cache handle for `store_name`, loading it if needed.

        Concurrent callers share one backend load and receive the same
        handle. If the load fails, every waiter gets the same `BackendError`
        and the next call starts a fresh load.

        Args:
            store_name: Store to open; None selects the default store.

        Returns:
            The loaded `Preferences` handle.

        Raises:
            InvalidArgument: `store_name` is not a usable store name.
            BackendError: the backend failed to load the store.
        """
        check_store_name(store_name)
        if store_name != self._store_name:
            logger.info("Switching preferences store from %s to %s",
                        store_label(self._store_name), store_label(store_name))
            self._store_name = store_name
            self._pending = None

        if self._pending is None:
            loop = asyncio.get_running_loop()
            self._pending = loop.create_task(self._load(store_name))

        # A cancelled waiter must not cancel the load other callers share.
        return await asyncio.shield(self._pending)

    async def _load(self, store_name: Optional[str]) -> Preferences:
        backend = self._backend
        logger.debug("Loading preferences store %s", store_label(store_name))
        try:
            values = await backend.get_all(store_name)
        except BaseException as exc:
            if self._pending is asyncio.current_task():
                self._pending = None
            if isinstance(exc, Exception):
                logger.warning("Loading preferences store %s failed: %s", store_label(store_name), exc)
                if not isinstance(exc, BackendError):
                    raise BackendError(f"Failed to load preferences: {exc}") from exc
            raise
        logger.debug("Loaded %d preferences for store %s", len(values), store_label(store_name))
        return Preferences(backend, store_name, values)

    def set_mock_initial_values(self, values: Mapping[str, Any], store_name: Optional[str] = None) -> None:
        """Replace the backend with an in-memory store holding `values`.

        Resets the loader, so the next `get_instance` loads from the new
        backend. Intended for tests.
        """
        self._backend = InMemoryPreferencesBackend.with_data(values, store_name=store_name)
        self._store_name = store_name
        self._pending = None
