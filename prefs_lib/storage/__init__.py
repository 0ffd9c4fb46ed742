"""Preferences backend package."""
from __future__ import annotations
from pathlib import Path
from typing import Any, Optional

from .base import PreferencesBackend, DEFAULT_STORE_NAME
from .interfaces import PreferencesBackendProtocol
from .memory_backend import InMemoryPreferencesBackend
from .file_backend import FilePreferencesBackend
from .keyfile_backend import KeyFilePreferencesBackend
from .serializer import get_serializer

KEYFILE_NAME = "preferences.keyfile"


def create_backend(
    backend: str = "file",
    serializer: str = "yaml",
    data_dir: str | Path = "data",
    password: Optional[str] = None,
    channel: Any = None,
) -> PreferencesBackend:
    """Factory to create a preferences backend.

    - backend: 'memory' | 'file' | 'keyfile' | 'channel'
    - serializer: serializer name for the file backend ('yaml', 'json',
      'pickle', 'plist', 'encrypted')
    - password: required by the 'encrypted' serializer
    - channel: a `MethodChannel`, required by the 'channel' backend
    """
    if backend == "memory":
        return InMemoryPreferencesBackend.empty()
    if backend == "file":
        return FilePreferencesBackend(data_dir=data_dir, serializer=get_serializer(serializer, password=password))
    if backend == "keyfile":
        return KeyFilePreferencesBackend(Path(data_dir) / KEYFILE_NAME)
    if backend == "channel":
        if channel is None:
            raise ValueError("The 'channel' backend requires a method channel")
        from prefs_lib.channel.backend import ChannelPreferencesBackend
        return ChannelPreferencesBackend(channel)
    raise ValueError(f"Unknown backend: {backend}")


__all__ = [
    "PreferencesBackend",
    "PreferencesBackendProtocol",
    "DEFAULT_STORE_NAME",
    "InMemoryPreferencesBackend",
    "FilePreferencesBackend",
    "KeyFilePreferencesBackend",
    "create_backend",
]
