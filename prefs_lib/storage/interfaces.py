from typing import Any, Dict, Optional, Protocol, runtime_checkable

from prefs_lib.values import ValueKind


@runtime_checkable
class PreferencesBackendProtocol(Protocol):
    """Backend protocol mirroring `prefs_lib.storage.PreferencesBackend`.

    Implementations should follow the semantics documented on the abstract
    base class in `prefs_lib.storage.base` (fresh snapshots from `get_all`,
    idempotent `remove`, `BackendError` on failure).
    """

    async def get_all(self, store_name: Optional[str] = None) -> Dict[str, Any]: ...

    async def set_value(self, kind: ValueKind, key: str, value: Any, store_name: Optional[str] = None) -> bool: ...

    async def remove(self, key: str, store_name: Optional[str] = None) -> bool: ...

    async def clear(self, store_name: Optional[str] = None) -> bool: ...
