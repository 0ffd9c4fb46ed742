"""Key-value preferences with a synchronous in-memory cache over async backends."""

from .exceptions import BackendError, InvalidArgument, MethodNotImplemented, PreferencesError
from .preferences import Preferences, PreferencesManager
from .values import ValueKind

__all__ = [
    "Preferences",
    "PreferencesManager",
    "ValueKind",
    "PreferencesError",
    "BackendError",
    "InvalidArgument",
    "MethodNotImplemented",
]
