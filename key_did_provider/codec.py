"""Byte, text and JSON encodings used across the provider.

All helpers are pure. Malformed input raises ``SerializationError``.
"""

import base64
import binascii
import hashlib
import json
from typing import Any, Mapping

import base58
import canonicaljson

from key_did_provider.errors import SerializationError


def bytes_to_hex(data: bytes) -> str:
    """Lowercase hex, no prefix."""
    return bytes(data).hex()


def hex_to_bytes(value: str) -> bytes:
    """Decode hex, tolerating an optional ``0x`` prefix and uppercase digits."""
    text = value[2:] if value.startswith("0x") else value
    if len(text) % 2:
        raise SerializationError(f"hex string has odd length {len(text)}")
    try:
        return bytes.fromhex(text.lower())
    except ValueError as exc:
        raise SerializationError(f"invalid hex: {exc}") from exc


def base64url_encode(data: bytes) -> str:
    """Base64url without padding."""
    return base64.urlsafe_b64encode(bytes(data)).rstrip(b"=").decode("ascii")


def base64url_decode(value: str) -> bytes:
    """Decode base64url, also accepting standard base64 and padded input.

    Raises:
        SerializationError: On characters outside the base64 alphabets or a
            bad length.
    """
    normalized = value.replace("+", "-").replace("/", "_").replace("=", "")
    padded = normalized + "=" * (-len(normalized) % 4)
    try:
        return base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise SerializationError(f"invalid base64url: {exc}") from exc


def encode_base64url(text: str) -> str:
    """UTF-8 encode ``text`` and return it as base64url."""
    return base64url_encode(text.encode("utf-8"))


def leftpad(data: str, size: int = 64) -> str:
    """Left-pad a hex string with zeros to ``size`` characters.

    Raises:
        SerializationError: If ``data`` is already longer than ``size``.
    """
    if len(data) > size:
        raise SerializationError(f"cannot pad {len(data)} characters to {size}")
    return data.rjust(size, "0")


def canonicalize(value: Any) -> str:
    """Serialize ``value`` as compact JSON with recursively sorted keys."""
    try:
        return canonicaljson.encode_canonical_json(value).decode("utf-8")
    except Exception as exc:
        raise SerializationError(f"JSON canonicalization failed: {exc}") from exc


def to_stable_object(value: Mapping[str, Any]) -> dict[str, Any]:
    """Return a plain dict whose keys are in canonical order at every level."""
    return json.loads(canonicalize(value))


def base58btc_encode(data: bytes) -> str:
    return base58.b58encode(bytes(data)).decode("ascii")


def base58btc_decode(value: str) -> bytes:
    try:
        return base58.b58decode(value)
    except ValueError as exc:
        raise SerializationError(f"invalid base58 encoding: {exc}") from exc


def sha256(data: bytes | str) -> bytes:
    """SHA-256 digest; strings are hashed as UTF-8."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).digest()
