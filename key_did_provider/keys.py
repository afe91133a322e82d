"""secp256k1 key material.

Security:
- Keys use ECDSA over secp256k1 via python-ecdsa
- Debug representations only show public info (DID), not secrets
- Secret bytes live in a bytearray that ``zeroize()`` overwrites
"""

import hashlib
from typing import Self

from ecdsa import SECP256k1, MalformedPointError, SigningKey, VerifyingKey
from ecdsa.util import sigencode_string

from key_did_provider.codec import hex_to_bytes, leftpad
from key_did_provider.did import Did
from key_did_provider.errors import BadKeyFormatError, InvalidDIDError
from key_did_provider.jose import EcdsaSignature

SECRET_KEY_LENGTH = 32


def _sigencode_ints(r: int, s: int, order: int) -> tuple[int, int]:
    return r, s


class Secp256k1Key:
    """A secp256k1 signing key and the did:key identity it defines."""

    __slots__ = ("_secret", "_signing_key", "_verifying_key", "_public_key", "_did")

    def __init__(self, secret: bytes) -> None:
        if len(secret) != SECRET_KEY_LENGTH:
            raise BadKeyFormatError(
                f"Invalid private key format. Expecting 32 bytes, but got {len(secret)}"
            )
        self._secret = bytearray(secret)
        try:
            self._signing_key = SigningKey.from_string(
                bytes(self._secret), curve=SECP256k1, hashfunc=hashlib.sha256
            )
        except MalformedPointError as exc:
            raise BadKeyFormatError(f"Invalid private key: {exc}") from exc
        self._verifying_key = self._signing_key.get_verifying_key()
        self._public_key = self._verifying_key.to_string("compressed")
        self._did = Did.from_public_key(self._public_key)

    @classmethod
    def generate(cls) -> Self:
        """Generate a new random key."""
        signing_key = SigningKey.generate(curve=SECP256k1)
        return cls(signing_key.to_string())

    @classmethod
    def from_bytes(cls, key_bytes: bytes) -> Self:
        """Create from raw 32-byte private key bytes."""
        return cls(key_bytes)

    @classmethod
    def from_hex(cls, key_hex: str) -> Self:
        """Create from a hex-encoded private key (``0x`` prefix allowed)."""
        return cls(hex_to_bytes(key_hex))

    @property
    def public_key(self) -> bytes:
        """The 33-byte compressed public key."""
        return self._public_key

    @property
    def did(self) -> Did:
        return self._did

    @property
    def verifying_key(self) -> VerifyingKey:
        return self._verifying_key

    def sign_digest(self, digest: bytes) -> EcdsaSignature:
        """Sign a 32-byte digest with RFC 6979 deterministic ECDSA.

        ``r`` and ``s`` are returned as 64-character hex strings together
        with the recovery id of the signing public key.

        Raises:
            BadKeyFormatError: If the key has been zeroized.
        """
        if self._signing_key is None:
            raise BadKeyFormatError("key has been zeroized")
        r, s = self._signing_key.sign_digest_deterministic(
            digest, hashfunc=hashlib.sha256, sigencode=_sigencode_ints
        )
        return EcdsaSignature(
            r=leftpad(f"{r:x}"),
            s=leftpad(f"{s:x}"),
            recovery_param=self._recovery_param(digest, sigencode_string(r, s, SECP256k1.order)),
        )

    def _recovery_param(self, digest: bytes, signature: bytes) -> int:
        # candidates come back ordered by the parity of R.y, which is the recovery id
        candidates = VerifyingKey.from_public_key_recovery_with_digest(
            signature, digest, SECP256k1, hashfunc=hashlib.sha256
        )
        own = self._verifying_key.to_string()
        for index, candidate in enumerate(candidates):
            if candidate.to_string() == own:
                return index
        raise BadKeyFormatError("signature does not recover to the signing key")

    def to_bytes(self) -> bytes:
        """Export the secret key bytes.

        Warning: Handle with care. Zeroize when done.
        """
        return bytes(self._secret)

    def zeroize(self) -> None:
        """Overwrite the held secret bytes and stop signing with this key."""
        self._signing_key = None
        for index in range(len(self._secret)):
            self._secret[index] = 0

    def __repr__(self) -> str:
        return f"Secp256k1Key(did={self._did})"


def compress_public_key(public_key: bytes | str) -> bytes:
    """Return the 33-byte compressed form of a secp256k1 public key.

    Accepts raw (64 bytes), uncompressed (65 bytes, ``0x04`` prefix) or
    compressed (33 bytes) encodings, as bytes or hex.

    Raises:
        InvalidDIDError: If the input is not a point on secp256k1.
    """
    data = hex_to_bytes(public_key) if isinstance(public_key, str) else bytes(public_key)
    try:
        verifying_key = VerifyingKey.from_string(data, curve=SECP256k1)
    except MalformedPointError as exc:
        raise InvalidDIDError(f"invalid secp256k1 public key: {exc}") from exc
    return verifying_key.to_string("compressed")

