from __future__ import annotations
from functools import lru_cache
from typing import Any, Optional, Protocol
import base64
import json
import os

import yaml
from pydantic import TypeAdapter, ValidationError
from pydantic_core import to_json, to_jsonable_python

from docstore_lib.errors import ConfigurationError, DecodeError


class Codec(Protocol):
    """Encode typed values to bytes and decode them back.

    Implementations should be symmetric: `decode(encode(v), type(v)) == v`.
    `decode` raises DecodeError on malformed input.
    """

    media_type: str

    def encode(self, value: Any) -> bytes: ...

    def decode(self, data: bytes, type: Any = None) -> Any: ...


@lru_cache(maxsize=128)
def _adapter(tp: Any) -> TypeAdapter:
    return TypeAdapter(tp)


def _fallback(o: Any) -> Any:
    return o.__dict__


def _validate(data: Any, type: Any) -> Any:
    if type is None or type is Any:
        return data
    try:
        return _adapter(type).validate_python(data)
    except ValidationError as e:
        raise DecodeError(f"Content does not match {getattr(type, '__name__', type)}", cause=e) from e


class JSONCodec:
    """Codec using JSON (text) with pydantic for typed values.

    Pydantic models, dataclasses and plain containers round-trip; other
    objects are encoded from their `__dict__`.
    """

    media_type = "application/json"

    def encode(self, value: Any) -> bytes:
        return to_json(value, fallback=_fallback)

    def decode(self, data: bytes, type: Any = None) -> Any:
        if type is None or type is Any:
            try:
                return json.loads(data.decode("utf-8"))
            except (UnicodeDecodeError, ValueError) as e:
                raise DecodeError("Content is not valid JSON", cause=e) from e
        try:
            return _adapter(type).validate_json(data)
        except ValidationError as e:
            raise DecodeError(f"Content does not match {getattr(type, '__name__', type)}", cause=e) from e


class YAMLCodec:
    """Codec using YAML (text). Values go through their JSON-compatible form."""

    media_type = "application/yaml"

    def encode(self, value: Any) -> bytes:
        return yaml.safe_dump(to_jsonable_python(value, fallback=_fallback), sort_keys=False).encode("utf-8")

    def decode(self, data: bytes, type: Any = None) -> Any:
        try:
            loaded = yaml.safe_load(data.decode("utf-8"))
        except (UnicodeDecodeError, yaml.YAMLError) as e:
            raise DecodeError("Content is not valid YAML", cause=e) from e
        return _validate(loaded, type)


class EncryptedCodec:
    """Codec that encrypts payloads using Fernet (symmetric, authenticated).

    Provide either `key` (a Fernet key) or `password`. In password mode each
    payload carries a random salt and the PBKDF2 iteration count so the key
    can be derived again on decode. `base_codec` defaults to JSON.
    """

    media_type = "application/octet-stream"

    def __init__(
        self,
        *,
        key: bytes | None = None,
        password: str | None = None,
        iterations: int = 390000,
        base_codec: Codec | None = None,
    ) -> None:
        if key is None and password is None:
            raise ConfigurationError("EncryptedCodec requires either `key` or `password`")
        self._key = key
        self._password = password
        self._iterations = iterations
        self.base_codec = base_codec or JSONCodec()

    def _derive_key(self, password: str, salt: bytes, iterations: int) -> bytes:
        from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
        from cryptography.hazmat.primitives import hashes

        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt,
            iterations=iterations,
        )
        return base64.urlsafe_b64encode(kdf.derive(password.encode("utf-8")))

    def encode(self, value: Any) -> bytes:
        """Encode and encrypt `value`, returning a framed JSON blob."""
        from cryptography.fernet import Fernet

        inner = self.base_codec.encode(value)
        if self._password is not None:
            salt = os.urandom(16)
            key = self._derive_key(self._password, salt, self._iterations)
            frame = {
                "v": 1,
                "mode": "password",
                "kdf": "pbkdf2",
                "iterations": self._iterations,
                "salt": base64.urlsafe_b64encode(salt).decode("ascii"),
                "ct": base64.urlsafe_b64encode(Fernet(key).encrypt(inner)).decode("ascii"),
            }
        else:
            assert self._key is not None
            ct = Fernet(self._key).encrypt(inner)
            frame = {"v": 1, "mode": "key", "ct": base64.urlsafe_b64encode(ct).decode("ascii")}
        return json.dumps(frame).encode("utf-8")

    def decode(self, data: bytes, type: Any = None) -> Any:
        """Parse the frame, derive the key if needed, decrypt and decode."""
        from cryptography.fernet import Fernet, InvalidToken

        try:
            frame = json.loads(data.decode("utf-8"))
            mode = frame.get("mode")
            ct = base64.urlsafe_b64decode(frame["ct"].encode("ascii"))
        except (UnicodeDecodeError, ValueError, KeyError, AttributeError) as e:
            raise DecodeError("Encrypted frame is malformed", cause=e) from e

        if mode == "password":
            if self._password is None:
                raise DecodeError("Codec was not configured with a password")
            try:
                salt = base64.urlsafe_b64decode(frame["salt"].encode("ascii"))
            except (KeyError, ValueError, AttributeError) as e:
                raise DecodeError("Encrypted frame is missing its salt", cause=e) from e
            key = self._derive_key(self._password, salt, int(frame.get("iterations", self._iterations)))
        elif mode == "key":
            if self._key is None:
                raise DecodeError("Codec was not configured with a key")
            key = self._key
        else:
            raise DecodeError(f"Unknown frame mode {mode!r}")

        try:
            plain = Fernet(key).decrypt(ct)
        except InvalidToken as e:
            raise DecodeError("Could not decrypt content", cause=e) from e
        return self.base_codec.decode(plain, type)


def get_codec(name: Optional[str] = "json", **options) -> Codec:
    """Build a codec by name: `json`, `yaml` or `encrypted`.

    `encrypted` accepts `key`/`password` and falls back to the
    DOCSTORE_CODEC_PASSWORD environment variable.
    """
    name = (name or "json").lower()
    if name == "json":
        return JSONCodec()
    if name == "yaml":
        return YAMLCodec()
    if name == "encrypted":
        key = options.get("key")
        password = options.get("password") or os.environ.get("DOCSTORE_CODEC_PASSWORD")
        return EncryptedCodec(key=key, password=password if key is None else None)
    raise ConfigurationError(f"Unknown codec: {name}")
