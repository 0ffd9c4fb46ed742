"""Live preferences backend forwarding every operation over a method channel."""
from __future__ import annotations
from typing import Any, Dict, Optional

from prefs_lib.exceptions import BackendError
from prefs_lib.storage.base import PreferencesBackend
from prefs_lib.values import ValueKind
from .handler import CLEAR, GET_ALL, REMOVE, set_method
from .method_channel import MethodChannel


class ChannelPreferencesBackend(PreferencesBackend):
    name = "channel"

    def __init__(self, channel: MethodChannel) -> None:
        self.channel = channel

    async def _invoke_bool(self, method: str, arguments: Dict[str, Any]) -> bool:
        result = await self.channel.invoke_method(method, arguments)
        if result is None:
            raise BackendError(f"Channel call {method} returned no result")
        return bool(result)

    async def get_all(self, store_name: Optional[str] = None) -> Dict[str, Any]:
        result = await self.channel.invoke_method(GET_ALL, {"fileName": store_name})
        if result is None:
            return {}
        if not isinstance(result, dict):
            raise BackendError(f"Channel call {GET_ALL} returned {type(result).__name__}, expected a mapping")
        return dict(result)

    async def set_value(self, kind: ValueKind, key: str, value: Any, store_name: Optional[str] = None) -> bool:
        return await self._invoke_bool(set_method(kind), {"key": key, "value": value, "fileName": store_name})

    async def remove(self, key: str, store_name: Optional[str] = None) -> bool:
        return await self._invoke_bool(REMOVE, {"key": key, "fileName": store_name})

    async def clear(self, store_name: Optional[str] = None) -> bool:
        return await self._invoke_bool(CLEAR, {"fileName": store_name})
