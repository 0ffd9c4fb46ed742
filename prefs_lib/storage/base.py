"""Preferences backend interface definitions.

Defines the PreferencesBackend abstract class the cache manager talks to.
A backend owns one or more named stores; `None` as store name selects the
default store. Implementations translate values to whatever format the
underlying platform store uses.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from prefs_lib.exceptions import InvalidArgument
from prefs_lib.values import ValueKind

DEFAULT_STORE_NAME = "default_preferences"


def check_store_name(store_name: Any) -> Optional[str]:
    """Validate a store name; None selects the default store.

    The default store's own label is reserved so a named store can never
    alias it.
    """
    if store_name is None:
        return None
    if not isinstance(store_name, str) or not store_name:
        raise InvalidArgument("store name must be a non-empty string")
    if store_name == DEFAULT_STORE_NAME:
        raise InvalidArgument(f"store name {store_name!r} is reserved")
    return store_name


def store_label(store_name: Optional[str]) -> str:
    """Return the storage name for `store_name` (also used in logs)."""
    check_store_name(store_name)
    return store_name if store_name is not None else DEFAULT_STORE_NAME


class PreferencesBackend(ABC):
    """Abstract preferences backend.

    All operations are coroutines and raise `BackendError` on failure.
    """

    #: Short name reported by health checks and logs.
    name: str = "abstract"

    @abstractmethod
    async def get_all(self, store_name: Optional[str] = None) -> Dict[str, Any]:
        """Return every key/value pair persisted in the store.

        The returned dict must be a fresh copy: mutating it must not change
        the backend state.
        """

    @abstractmethod
    async def set_value(self, kind: ValueKind, key: str, value: Any, store_name: Optional[str] = None) -> bool:
        """Persist `value` under `key`.

        `kind` tells heterogeneous serializers how to encode the value.
        Returns True on success.
        """

    @abstractmethod
    async def remove(self, key: str, store_name: Optional[str] = None) -> bool:
        """Delete `key`. Returns True whether or not the key existed."""

    @abstractmethod
    async def clear(self, store_name: Optional[str] = None) -> bool:
        """Delete every key in the store."""
