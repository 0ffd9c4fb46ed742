"""Host side of the method channel.

Receives named method calls (`getAll`, `setBool`, ..., `remove`, `clear`)
with an argument mapping and dispatches them to a platform backend. The
argument names (`key`, `value`, `fileName`) are part of the wire format.
"""
from __future__ import annotations
import logging
from typing import Any, Mapping, Optional

from prefs_lib.exceptions import InvalidArgument, MethodNotImplemented
from prefs_lib.storage.base import PreferencesBackend, check_store_name
from prefs_lib.values import ValueKind, coerce_value

logger = logging.getLogger(__name__)

GET_ALL = "getAll"
REMOVE = "remove"
CLEAR = "clear"
SET_PREFIX = "set"


def set_method(kind: ValueKind) -> str:
    """Wire name of the write method for `kind`, e.g. ``setStringList``."""
    return SET_PREFIX + kind.value


def _require_key(arguments: Mapping[str, Any]) -> str:
    key = arguments.get("key")
    if not isinstance(key, str) or not key:
        raise InvalidArgument("argument 'key' must be a non-empty string")
    return key


class MethodCallHandler:
    def __init__(self, backend: PreferencesBackend) -> None:
        self.backend = backend

    async def handle(self, method: str, arguments: Optional[Mapping[str, Any]] = None) -> Any:
        args = dict(arguments or {})
        try:
            store_name = check_store_name(args.get("fileName"))
        except InvalidArgument as exc:
            raise InvalidArgument(f"argument 'fileName': {exc}") from None
        logger.debug("Channel call %s (store=%r)", method, store_name)

        if method == GET_ALL:
            return await self.backend.get_all(store_name)
        if method == REMOVE:
            return await self.backend.remove(_require_key(args), store_name)
        if method == CLEAR:
            return await self.backend.clear(store_name)
        if method.startswith(SET_PREFIX):
            try:
                kind = ValueKind(method[len(SET_PREFIX):])
            except ValueError:
                raise MethodNotImplemented(method) from None
            key = _require_key(args)
            value = coerce_value(kind, args.get("value"))
            return await self.backend.set_value(kind, key, value, store_name)
        raise MethodNotImplemented(method)
