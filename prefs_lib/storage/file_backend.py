"""File-backed preferences backend.

Each store lives in its own file under `data_dir`, named after the store
(`<store>.<ext>`, the extension coming from the serializer). The whole
mapping is rewritten on every change; writes go to a temporary file that
is fsynced and then renamed over the target so readers never see a torn
file.
"""
from __future__ import annotations
import asyncio
import logging
import os
from pathlib import Path
from threading import RLock
from typing import Any, Dict, Optional

from prefs_lib.exceptions import BackendError
from prefs_lib.values import ValueKind, coerce_value
from .base import PreferencesBackend, store_label
from .serializer import Serializer, YAMLSerializer

logger = logging.getLogger(__name__)


class FilePreferencesBackend(PreferencesBackend):
    name = "file"

    def __init__(self, data_dir: str | Path = "./data", serializer: Optional[Serializer] = None) -> None:
        self.data_dir = Path(data_dir)
        self.serializer: Serializer = serializer or YAMLSerializer()
        self._lock = RLock()

    def path_for(self, store_name: Optional[str]) -> Path:
        safe_name = store_label(store_name).replace("/", "_")
        return self.data_dir / f"{safe_name}{self.serializer.extension}"

    def _read(self, store_name: Optional[str]) -> Dict[str, Any]:
        path = self.path_for(store_name)
        if not path.exists():
            return {}
        try:
            with open(path, "rb") as f:
                data = self.serializer.load(f.read())
        except Exception as exc:
            raise BackendError(f"Failed to read preferences from {path}: {exc}") from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise BackendError(f"Preferences file {path} does not contain a mapping")
        logger.debug("Loaded %d preferences from %s", len(data), path)
        return data

    def _write(self, store_name: Optional[str], values: Dict[str, Any]) -> None:
        path = self.path_for(store_name)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            payload = self.serializer.dump(values)
            with open(tmp, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            tmp.replace(path)
        except Exception as exc:
            raise BackendError(f"Failed to write preferences to {path}: {exc}") from exc

    def _update(self, store_name: Optional[str], mutate) -> bool:
        with self._lock:
            values = self._read(store_name)
            if mutate(values) is False:
                return True
            self._write(store_name, values)
        return True

    async def get_all(self, store_name: Optional[str] = None) -> Dict[str, Any]:
        def read() -> Dict[str, Any]:
            with self._lock:
                return self._read(store_name)
        return await asyncio.to_thread(read)

    async def set_value(self, kind: ValueKind, key: str, value: Any, store_name: Optional[str] = None) -> bool:
        stored = coerce_value(kind, value)

        def mutate(values: Dict[str, Any]) -> None:
            values[key] = stored
        return await asyncio.to_thread(self._update, store_name, mutate)

    async def remove(self, key: str, store_name: Optional[str] = None) -> bool:
        def mutate(values: Dict[str, Any]) -> bool:
            if key not in values:
                return False
            del values[key]
            return True
        return await asyncio.to_thread(self._update, store_name, mutate)

    async def clear(self, store_name: Optional[str] = None) -> bool:
        def wipe() -> bool:
            path = self.path_for(store_name)
            with self._lock:
                try:
                    path.unlink(missing_ok=True)
                except OSError as exc:
                    raise BackendError(f"Failed to clear preferences at {path}: {exc}") from exc
            logger.debug("Cleared preferences store %s", path)
            return True
        return await asyncio.to_thread(wipe)
