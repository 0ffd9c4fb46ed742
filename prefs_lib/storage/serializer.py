"""Serializers turning a preferences mapping into bytes and back.

Used by the file backend; every serializer must round-trip the five value
kinds (bool, int, float, str, list of str) without changing their type.
"""
from typing import Any, Dict, Protocol
import json
import pickle
import plistlib

import yaml


class Serializer(Protocol):
    """Serialize/deserialize a preferences mapping for byte-oriented stores.

    Implementations should be symmetric: `dump` -> bytes, `load` <- bytes.
    `extension` is the file suffix used by the file backend.
    """

    extension: str

    def dump(self, value: Dict[str, Any]) -> bytes: ...

    def load(self, data: bytes) -> Any: ...


class YAMLSerializer:
    """Serializer using YAML (text). The default: human-editable files."""

    extension = ".yml"

    def dump(self, value: Dict[str, Any]) -> bytes:
        return yaml.safe_dump(value, allow_unicode=True, sort_keys=True).encode("utf-8")

    def load(self, data: bytes) -> Any:
        return yaml.safe_load(data.decode("utf-8"))


class JSONSerializer:
    """Serializer using JSON (text)."""

    extension = ".json"

    def dump(self, value: Dict[str, Any]) -> bytes:
        return json.dumps(value, ensure_ascii=False, sort_keys=True, indent=2).encode("utf-8")

    def load(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"))


class PickleSerializer:
    """Binary serializer using pickle. Only load files you wrote yourself."""

    extension = ".pkl"

    def dump(self, value: Dict[str, Any]) -> bytes:
        return pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)

    def load(self, data: bytes) -> Any:
        return pickle.loads(data)


class PlistSerializer:
    """Property list serializer (XML format), as used by macOS user defaults.

    Plist integers are limited to 64 bits, matching the `Int` value kind.
    """

    extension = ".plist"

    def dump(self, value: Dict[str, Any]) -> bytes:
        return plistlib.dumps(value, fmt=plistlib.FMT_XML, sort_keys=True)

    def load(self, data: bytes) -> Any:
        return plistlib.loads(data)


class EncryptedSerializer:
    """Serializer that encrypts payloads using Fernet (symmetric, authenticated).

    Notes:
    - Fernet is an authenticated symmetric cipher from the cryptography
        library. Tampered or foreign files fail to decrypt and surface as
        errors from `load`.
    - Provide either `key` (a Fernet key) or `password`. In password mode
        each payload carries its own random salt and PBKDF2 parameters so
        the key can be derived again on load.
    - `base_serializer` defaults to JSON and is set inside `__init__`.
    """

    extension = ".enc"

    def __init__(
        self,
        *,
        key: bytes | None = None,
        password: str | None = None,
        iterations: int = 390000,
        base_serializer: Serializer | None = None,
    ) -> None:
        if key is None and password is None:
            raise ValueError("EncryptedSerializer requires either `key` or `password`")
        self._key = key
        self._password = password
        self._iterations = iterations
        self.base_serializer = base_serializer or JSONSerializer()

    def _derive_key(self, password: str, salt: bytes, iterations: int) -> bytes:
        import base64
        from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
        from cryptography.hazmat.primitives import hashes

        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt,
            iterations=iterations,
        )
        return base64.urlsafe_b64encode(kdf.derive(password.encode("utf-8")))

    def dump(self, value: Dict[str, Any]) -> bytes:
        """Serialize and encrypt value, returning a framed JSON blob."""
        import os
        import base64
        from cryptography.fernet import Fernet
        inner = self.base_serializer.dump(value)

        if self._password is not None:
            salt = os.urandom(16)
            f = Fernet(self._derive_key(self._password, salt, self._iterations))
            frame = {
                "v": 1,
                "mode": "password",
                "kdf": "pbkdf2",
                "iterations": self._iterations,
                "salt": base64.urlsafe_b64encode(salt).decode("ascii"),
                "ct": base64.urlsafe_b64encode(f.encrypt(inner)).decode("ascii"),
            }
            return json.dumps(frame).encode("utf-8")

        f = Fernet(self._key)
        frame = {"v": 1, "mode": "key", "ct": base64.urlsafe_b64encode(f.encrypt(inner)).decode("ascii")}
        return json.dumps(frame).encode("utf-8")

    def load(self, data: bytes) -> Any:
        """Parse framed blob, derive key if needed, decrypt and deserialize."""
        import base64
        from cryptography.fernet import Fernet

        frame = json.loads(data.decode("utf-8"))
        mode = frame.get("mode")
        if mode == "password":
            if self._password is None:
                raise ValueError("serializer was not configured with a password")
            salt = base64.urlsafe_b64decode(frame["salt"].encode("ascii"))
            iterations = frame.get("iterations", self._iterations)
            f = Fernet(self._derive_key(self._password, salt, iterations))
        elif mode == "key":
            if self._key is None:
                raise ValueError("serializer was not configured with a key")
            f = Fernet(self._key)
        else:
            raise ValueError("unknown frame format")
        ct = base64.urlsafe_b64decode(frame["ct"].encode("ascii"))
        return self.base_serializer.load(f.decrypt(ct))


def get_serializer(name: str, *, password: str | None = None, key: bytes | None = None) -> Serializer:
    """Return a serializer by name: yaml, json, pickle, plist or encrypted."""
    name = (name or "yaml").lower()
    if name == "yaml":
        return YAMLSerializer()
    if name == "json":
        return JSONSerializer()
    if name == "pickle":
        return PickleSerializer()
    if name == "plist":
        return PlistSerializer()
    if name == "encrypted":
        return EncryptedSerializer(key=key, password=password)
    raise ValueError(f"Unknown serializer: {name}")
