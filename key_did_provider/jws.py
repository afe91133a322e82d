"""Compact JWS construction and decomposition.

A compact JWS is ``base64url(header).payload.base64url(signature)``. Headers
and object payloads are serialized as canonical JSON so that equal values
always produce the same signing input.
"""

import json
import logging
from enum import Enum
from typing import Any, Mapping

from ecdsa import SECP256k1, BadSignatureError, MalformedPointError, VerifyingKey
from ecdsa.util import sigdecode_string

from key_did_provider.codec import base64url_decode, canonicalize, encode_base64url, sha256
from key_did_provider.errors import (
    MalformedJWSError,
    NotSupportedError,
    ProviderError,
    SerializationError,
    UnsupportedAlgorithmError,
)
from key_did_provider.jose import EcdsaSignature, from_jose, to_jose, to_jose_string
from key_did_provider.models import GeneralJWS, JWSSignature
from key_did_provider.signers import Signer

logger = logging.getLogger(__name__)


class Algorithm(str, Enum):
    """JWS algorithms this package can sign with."""

    ES256K = "ES256K"


DEFAULT_ALGORITHM = Algorithm.ES256K


class ES256KSignerAlgorithm:
    """ES256K over a ``Signer``.

    Args:
        recoverable: Append the recovery byte to the JOSE signature.
    """

    __slots__ = ("recoverable",)

    def __init__(self, recoverable: bool = False) -> None:
        self.recoverable = recoverable

    def __call__(self, signing_input: str, signer: Signer) -> str:
        signature = signer.sign(signing_input)
        if isinstance(signature, EcdsaSignature):
            return to_jose_string(signature, self.recoverable)
        if self.recoverable and from_jose(signature).recovery_param is None:
            raise NotSupportedError(
                "ES256K-R not supported when signer doesn't provide a recovery param"
            )
        return signature


def signer_algorithm(alg: str) -> ES256KSignerAlgorithm:
    """Resolve the signing implementation for a header ``alg``.

    Raises:
        UnsupportedAlgorithmError: For any name other than ``ES256K``.
    """
    try:
        algorithm = Algorithm(alg)
    except ValueError as exc:
        raise UnsupportedAlgorithmError(alg) from exc
    if algorithm is Algorithm.ES256K:
        return ES256KSignerAlgorithm()
    raise UnsupportedAlgorithmError(alg)


def encode_section(data: Any) -> str:
    """Canonical JSON, base64url encoded."""
    return encode_base64url(canonicalize(data))


def create_jws(
    payload: Any,
    signer: Signer,
    header: Mapping[str, Any] | None = None,
) -> str:
    """Create a compact JWS.

    Args:
        payload: A JSON value is canonicalized and base64url encoded; a
            string is used verbatim as the payload segment.
        signer: The signer producing the signature.
        header: Protected header. ``alg`` defaults to ``ES256K``.

    Returns:
        ``<header>.<payload>.<signature>``
    """
    protected = dict(header or {})
    if not protected.get("alg"):
        protected["alg"] = DEFAULT_ALGORITHM.value
    encoded_payload = payload if isinstance(payload, str) else encode_section(payload)
    signing_input = ".".join([encode_section(protected), encoded_payload])

    algorithm = signer_algorithm(protected["alg"])
    signature = algorithm(signing_input, signer)
    logger.debug("Created JWS with alg=%s kid=%s", protected["alg"], protected.get("kid"))
    return ".".join([signing_input, signature])


def to_general_jws(jws: str) -> GeneralJWS:
    """Split a compact JWS into its general-serialization form.

    Raises:
        MalformedJWSError: Unless the string has exactly three parts.
    """
    parts = jws.split(".")
    if len(parts) != 3:
        raise MalformedJWSError(f"expected 3 parts, got {len(parts)}")
    protected, payload, signature = parts
    return GeneralJWS(
        payload=payload,
        signatures=[JWSSignature(protected=protected, signature=signature)],
    )


def decode_protected_header(jws: str) -> dict[str, Any]:
    """Decode the protected header of a compact JWS (or a bare header segment)."""
    segment = jws.split(".", 1)[0]
    try:
        return json.loads(base64url_decode(segment))
    except (ValueError, SerializationError) as exc:
        raise MalformedJWSError(f"protected header is not JSON: {exc}") from exc


def verify_jws(jws: str, public_key: bytes) -> bool:
    """Verify an ES256K compact JWS against a secp256k1 public key.

    Returns:
        True if the signature is valid, False otherwise.
    """
    parts = jws.split(".")
    if len(parts) != 3:
        return False
    try:
        signature = to_jose(from_jose(parts[2]))
        verifying_key = VerifyingKey.from_string(public_key, curve=SECP256k1)
        digest = sha256(".".join(parts[:2]))
        return verifying_key.verify_digest(signature, digest, sigdecode=sigdecode_string)
    except (BadSignatureError, MalformedPointError, ProviderError):
        return False
