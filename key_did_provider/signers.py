"""Signer backends.

A signer turns a JWS signing input into a signature. It returns either a
structured ``EcdsaSignature`` or an already JOSE-encoded base64url string;
the JWS layer handles both.

Two backends exist:

- ``LocalSigner`` signs with a 32-byte secret key held in memory.
- ``RemoteSigner`` sends the SHA-256 digest to an injected
  ``RemoteSigningClient`` (for example a threshold signing network) and maps
  the returned ``(r, s, recid)`` onto an ``EcdsaSignature``.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Protocol, runtime_checkable

from key_did_provider.codec import sha256
from key_did_provider.did import encode_did
from key_did_provider.errors import InvalidDIDError
from key_did_provider.jose import EcdsaSignature, normalize_recovery_param
from key_did_provider.keys import Secp256k1Key, compress_public_key

logger = logging.getLogger(__name__)

SignerOutput = EcdsaSignature | str


@runtime_checkable
class Signer(Protocol):
    """Anything that can sign a JWS signing input."""

    def sign(self, data: bytes | str) -> SignerOutput:
        ...


class LocalSigner:
    """Signs with an in-memory secp256k1 secret key.

    Raises:
        BadKeyFormatError: If the secret key is not 32 bytes.
    """

    __slots__ = ("_key",)

    def __init__(self, secret_key: bytes | Secp256k1Key) -> None:
        self._key = secret_key if isinstance(secret_key, Secp256k1Key) else Secp256k1Key(secret_key)

    @property
    def public_key(self) -> bytes:
        return self._key.public_key

    def sign(self, data: bytes | str) -> EcdsaSignature:
        return self._key.sign_digest(sha256(data))

    def zeroize(self) -> None:
        """Wipe the held secret key; later ``sign`` calls raise."""
        self._key.zeroize()

    def __repr__(self) -> str:
        return f"LocalSigner(did={self._key.did})"


@dataclass(frozen=True, slots=True)
class RemoteSignature:
    """Signature components returned by a remote signing service."""

    r: str
    s: str
    recid: int | None = None
    public_key: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RemoteSignature":
        """Parse the ``{r, s, recid, publicKey}`` response shape."""
        return cls(
            r=data["r"],
            s=data["s"],
            recid=data.get("recid"),
            public_key=data.get("publicKey"),
        )


class RemoteSigningClient(Protocol):
    """Client for an external signing service.

    Implementations own connection, authentication and session handling.
    Errors raised here propagate unchanged to the caller of ``sign``.
    """

    def request_signature(self, digest: bytes) -> RemoteSignature:
        ...


class RemoteSigner:
    """Delegates ECDSA signing to a ``RemoteSigningClient``.

    Each ``sign`` call makes exactly one blocking client request; there is
    no retry, timeout or fallback.
    """

    __slots__ = ("_client",)

    def __init__(self, client: RemoteSigningClient) -> None:
        self._client = client

    def sign(self, data: bytes | str) -> EcdsaSignature:
        digest = sha256(data)
        logger.debug("Requesting remote signature")
        response = self._client.request_signature(digest)
        recovery_param = None
        if response.recid is not None:
            recovery_param = normalize_recovery_param(response.recid)
        return EcdsaSignature(r=response.r, s=response.s, recovery_param=recovery_param)

    def __repr__(self) -> str:
        return f"RemoteSigner(client={type(self._client).__name__})"


def did_from_remote_signer(client: RemoteSigningClient) -> str:
    """Derive the did:key of the key held by a remote signing service.

    The service is asked to sign an empty message; the public key it reports
    alongside the signature is compressed and encoded as a DID.

    Raises:
        InvalidDIDError: If the service reports no usable public key.
    """
    response = client.request_signature(sha256(b""))
    if not response.public_key:
        raise InvalidDIDError("remote signer did not return a public key")
    did = encode_did(compress_public_key(response.public_key))
    logger.info("Derived DID %s from remote signer", did)
    return did
