"""Key-file preferences backend.

All stores share one INI-style key file; each store is a section. Keys
are percent-encoded so any string is a legal option name, and values are
written as JSON text so the value kind survives the round trip (`true`,
`5`, `5.0`, `"5"` and `["5"]` all decode differently).
"""
from __future__ import annotations
import asyncio
import configparser
import json
import logging
import os
from pathlib import Path
from threading import RLock
from typing import Any, Dict, Optional
from urllib.parse import quote, unquote

from prefs_lib.exceptions import BackendError, InvalidArgument
from prefs_lib.values import ValueKind, coerce_value
from .base import PreferencesBackend, check_store_name

logger = logging.getLogger(__name__)

DEFAULT_SECTION = "preferences"
# configparser treats its default section specially; keep it out of the way.
_PARSER_DEFAULTS = "__parser_defaults__"


def encode_entry(kind: ValueKind, value: Any) -> str:
    """Encode a value as JSON text; `kind` decides how numbers are written."""
    return json.dumps(coerce_value(kind, value), ensure_ascii=False)


def decode_entry(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        # Hand-edited files may hold bare strings.
        return raw


class KeyFilePreferencesBackend(PreferencesBackend):
    name = "keyfile"

    def __init__(self, file_path: str | Path) -> None:
        self.file_path = Path(file_path)
        self._lock = RLock()

    @staticmethod
    def section_for(store_name: Optional[str]) -> str:
        if check_store_name(store_name) is None:
            return DEFAULT_SECTION
        if store_name in (DEFAULT_SECTION, _PARSER_DEFAULTS):
            raise InvalidArgument(f"store name {store_name!r} is reserved by the key file")
        return store_name

    def _parser(self) -> configparser.ConfigParser:
        parser = configparser.ConfigParser(
            interpolation=None,
            delimiters=("=",),
            default_section=_PARSER_DEFAULTS,
        )
        parser.optionxform = str  # type: ignore[assignment]
        return parser

    def _read(self) -> configparser.ConfigParser:
        parser = self._parser()
        if not self.file_path.exists():
            return parser
        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                parser.read_file(f)
        except (OSError, configparser.Error) as exc:
            raise BackendError(f"Failed to read key file {self.file_path}: {exc}") from exc
        return parser

    def _write(self, parser: configparser.ConfigParser) -> None:
        tmp = self.file_path.with_suffix(self.file_path.suffix + ".tmp")
        try:
            if not self.file_path.parent.exists():
                os.makedirs(self.file_path.parent, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                parser.write(f)
                f.flush()
                os.fsync(f.fileno())
            tmp.replace(self.file_path)
        except OSError as exc:
            raise BackendError(f"Failed to write key file {self.file_path}: {exc}") from exc

    def _get_all(self, store_name: Optional[str]) -> Dict[str, Any]:
        with self._lock:
            parser = self._read()
        section = self.section_for(store_name)
        if not parser.has_section(section):
            return {}
        return {unquote(opt): decode_entry(raw) for opt, raw in parser.items(section)}

    def _set(self, store_name: Optional[str], key: str, encoded: str) -> bool:
        section = self.section_for(store_name)
        with self._lock:
            parser = self._read()
            if not parser.has_section(section):
                parser.add_section(section)
            parser.set(section, quote(key, safe=""), encoded)
            self._write(parser)
        return True

    def _remove(self, store_name: Optional[str], key: str) -> bool:
        section = self.section_for(store_name)
        with self._lock:
            parser = self._read()
            if parser.has_section(section) and parser.remove_option(section, quote(key, safe="")):
                self._write(parser)
        return True

    def _clear(self, store_name: Optional[str]) -> bool:
        section = self.section_for(store_name)
        with self._lock:
            parser = self._read()
            if parser.remove_section(section):
                self._write(parser)
        logger.debug("Cleared section [%s] of %s", section, self.file_path)
        return True

    async def get_all(self, store_name: Optional[str] = None) -> Dict[str, Any]:
        return await asyncio.to_thread(self._get_all, store_name)

    async def set_value(self, kind: ValueKind, key: str, value: Any, store_name: Optional[str] = None) -> bool:
        encoded = encode_entry(kind, value)
        return await asyncio.to_thread(self._set, store_name, key, encoded)

    async def remove(self, key: str, store_name: Optional[str] = None) -> bool:
        return await asyncio.to_thread(self._remove, store_name, key)

    async def clear(self, store_name: Optional[str] = None) -> bool:
        return await asyncio.to_thread(self._clear, store_name)
