import asyncio
from typing import Any, Dict, List, Optional

from prefs_lib.exceptions import BackendError
from prefs_lib.storage.base import DEFAULT_STORE_NAME
from prefs_lib.storage.memory_backend import InMemoryPreferencesBackend
from prefs_lib.values import ValueKind


class CountingBackend(InMemoryPreferencesBackend):
    """In-memory backend recording every call it receives.

    `gate` (an asyncio.Event created lazily inside the running loop) holds
    `get_all` until `release()` is called, when `block_get_all` is set.
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None, block_get_all: bool = False,
                 stores: Optional[Dict[str, Dict[str, Any]]] = None):
        super().__init__({DEFAULT_STORE_NAME: data or {}, **(stores or {})})
        self.calls: List[tuple] = []
        self.block_get_all = block_get_all
        self._gate: Optional[asyncio.Event] = None

    @property
    def gate(self) -> asyncio.Event:
        if self._gate is None:
            self._gate = asyncio.Event()
        return self._gate

    def release(self) -> None:
        self.gate.set()

    def get_all_calls(self) -> List[Optional[str]]:
        return [c[1] for c in self.calls if c[0] == 'get_all']

    async def get_all(self, store_name=None):
        self.calls.append(('get_all', store_name))
        if self.block_get_all:
            await self.gate.wait()
        return await super().get_all(store_name)

    async def set_value(self, kind: ValueKind, key, value, store_name=None):
        self.calls.append(('set_value', kind, key, value, store_name))
        return await super().set_value(kind, key, value, store_name)

    async def remove(self, key, store_name=None):
        self.calls.append(('remove', key, store_name))
        return await super().remove(key, store_name)

    async def clear(self, store_name=None):
        self.calls.append(('clear', store_name))
        return await super().clear(store_name)


class FailingBackend(CountingBackend):
    """Backend whose operations fail while the matching flag is set."""

    def __init__(self, data=None, fail_get_all: bool = False, fail_writes: bool = False, block_get_all: bool = False):
        super().__init__(data, block_get_all=block_get_all)
        self.fail_get_all = fail_get_all
        self.fail_writes = fail_writes

    async def get_all(self, store_name=None):
        result = await super().get_all(store_name)
        if self.fail_get_all:
            raise BackendError('disk unavailable')
        return result

    async def set_value(self, kind, key, value, store_name=None):
        self.calls.append(('set_value', kind, key, value, store_name))
        if self.fail_writes:
            raise BackendError('read-only store')
        return True

    async def remove(self, key, store_name=None):
        self.calls.append(('remove', key, store_name))
        if self.fail_writes:
            raise RuntimeError('permission denied')
        return True


class HangingBackend(CountingBackend):
    """Backend whose writes never complete."""

    async def set_value(self, kind, key, value, store_name=None):
        self.calls.append(('set_value', kind, key, value, store_name))
        await asyncio.Event().wait()
        return True
