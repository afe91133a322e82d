"""did:key identifiers for secp256k1 keys.

Format: did:key:z<base58btc(multicodec_prefix + compressed_public_key)>

- Multicodec prefix: 0xe701 (secp256k1-pub, varint-encoded 0xe7)
- Multibase prefix: z (base58btc)
- Public key: 33-byte compressed SEC1 point
"""

from dataclasses import dataclass

from key_did_provider.codec import base58btc_decode, base58btc_encode
from key_did_provider.errors import InvalidDIDError, SerializationError

# 0xe7 needs two bytes as a varint: 0xe7 with the continuation bit, then 0x01
SECP256K1_MULTICODEC = bytes([0xE7, 0x01])

BASE58BTC_PREFIX = "z"

DID_KEY_PREFIX = "did:key:"

COMPRESSED_PUBLIC_KEY_LENGTH = 33


@dataclass(frozen=True, slots=True)
class Did:
    """A parsed did:key identifier.

    Attributes:
        public_key: The 33-byte compressed secp256k1 public key.
    """

    public_key: bytes

    def __post_init__(self) -> None:
        if len(self.public_key) != COMPRESSED_PUBLIC_KEY_LENGTH:
            raise InvalidDIDError(
                f"public key must be {COMPRESSED_PUBLIC_KEY_LENGTH} bytes "
                f"(compressed), got {len(self.public_key)}"
            )
        if self.public_key[0] not in (0x02, 0x03):
            raise InvalidDIDError("public key is not a compressed SEC1 point")

    @classmethod
    def from_public_key(cls, public_key: bytes) -> "Did":
        return cls(public_key=bytes(public_key))

    @classmethod
    def parse(cls, did_string: str) -> "Did":
        """Parse a did:key string.

        Args:
            did_string: A did:key identifier, optionally with a ``#fragment``.

        Raises:
            InvalidDIDError: If the format is invalid.
        """
        did_string = strip_fragment(did_string)
        if not did_string.startswith(DID_KEY_PREFIX):
            raise InvalidDIDError("must start with 'did:key:'")

        key_part = did_string[len(DID_KEY_PREFIX) :]
        if not key_part.startswith(BASE58BTC_PREFIX):
            raise InvalidDIDError("must use base58btc encoding (z prefix)")

        try:
            decoded = base58btc_decode(key_part[1:])
        except SerializationError as exc:
            raise InvalidDIDError(str(exc)) from exc

        expected = len(SECP256K1_MULTICODEC) + COMPRESSED_PUBLIC_KEY_LENGTH
        if len(decoded) != expected:
            raise InvalidDIDError(f"expected {expected} bytes, got {len(decoded)}")
        if decoded[:2] != SECP256K1_MULTICODEC:
            raise InvalidDIDError("unsupported key type (expected secp256k1 multicodec 0xe701)")

        return cls(public_key=decoded[2:])

    @property
    def fragment(self) -> str:
        """The multibase-encoded key portion (without the did:key: prefix)."""
        encoded = base58btc_encode(SECP256K1_MULTICODEC + self.public_key)
        return f"{BASE58BTC_PREFIX}{encoded}"

    @property
    def key_id(self) -> str:
        """Verification method id, ``<did>#<fragment>``."""
        return f"{self}#{self.fragment}"

    def __str__(self) -> str:
        return f"{DID_KEY_PREFIX}{self.fragment}"

    def __repr__(self) -> str:
        return f"Did({self})"


def encode_did(public_key: bytes) -> str:
    """Derive the did:key string of a compressed secp256k1 public key.

    Raises:
        InvalidDIDError: If ``public_key`` is not a 33-byte compressed key.
    """
    return str(Did.from_public_key(public_key))


def decode_did(did_string: str) -> bytes:
    """Return the compressed public key encoded in a did:key string."""
    return Did.parse(did_string).public_key


def strip_fragment(did_url: str) -> str:
    """Drop any ``#fragment`` from a DID URL."""
    return did_url.split("#", 1)[0]


def did_key_id(did: str) -> str:
    """Build the ``kid`` for a DID: the DID followed by its method-specific id."""
    parts = did.split(":")
    if len(parts) < 3:
        raise InvalidDIDError(f"cannot derive key id from {did!r}")
    return f"{did}#{parts[2]}"
