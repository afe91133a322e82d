"""Conversion between ECDSA ``(r, s, recoveryParam)`` and JOSE signature bytes.

A JOSE ES256K signature is ``r || s`` (64 bytes), optionally followed by a
single recovery byte (65 bytes) for recoverable signatures.
"""

from dataclasses import dataclass

from key_did_provider.codec import (
    base64url_decode,
    base64url_encode,
    bytes_to_hex,
    hex_to_bytes,
    leftpad,
)
from key_did_provider.errors import (
    InvalidSignatureLengthError,
    MissingRecoveryParamError,
    NotSupportedError,
)

SIGNATURE_LENGTH = 64
RECOVERABLE_SIGNATURE_LENGTH = 65

# Ethereum-style recovery ids start at 27
_ETHEREUM_RECOVERY_OFFSET = 27


@dataclass(frozen=True, slots=True)
class EcdsaSignature:
    """An ECDSA signature.

    Attributes:
        r: Big-endian hex of the ``r`` component.
        s: Big-endian hex of the ``s`` component.
        recovery_param: Optional public key recovery id.
    """

    r: str
    s: str
    recovery_param: int | None = None


def normalize_recovery_param(value: int) -> int:
    """Map Ethereum-style recovery ids (27, 28, ...) onto 0/1."""
    if value >= _ETHEREUM_RECOVERY_OFFSET:
        return value - _ETHEREUM_RECOVERY_OFFSET
    return value


def to_jose(signature: EcdsaSignature, recoverable: bool = False) -> bytes:
    """Encode a signature as 64 (or 65 when ``recoverable``) JOSE bytes.

    ``r`` and ``s`` are zero-padded to 32 bytes each, so components with
    leading zero bytes keep their fixed width.

    Raises:
        MissingRecoveryParamError: If ``recoverable`` and the signature has
            no recovery param.
        NotSupportedError: If the recovery param does not map onto 0 or 1.
    """
    jose = bytearray(RECOVERABLE_SIGNATURE_LENGTH if recoverable else SIGNATURE_LENGTH)
    jose[0:32] = hex_to_bytes(leftpad(_strip_prefix(signature.r)))
    jose[32:64] = hex_to_bytes(leftpad(_strip_prefix(signature.s)))
    if recoverable:
        if signature.recovery_param is None:
            raise MissingRecoveryParamError()
        recovery_param = normalize_recovery_param(signature.recovery_param)
        if recovery_param not in (0, 1):
            raise NotSupportedError(f"recovery param {signature.recovery_param} is out of range")
        jose[64] = recovery_param
    return bytes(jose)


def to_jose_string(signature: EcdsaSignature, recoverable: bool = False) -> str:
    """``to_jose`` followed by base64url encoding."""
    return base64url_encode(to_jose(signature, recoverable))


def from_jose(signature: bytes | str) -> EcdsaSignature:
    """Decode JOSE signature bytes (or their base64url form).

    Raises:
        InvalidSignatureLengthError: Unless the decoded length is 64 or 65.
    """
    data = base64url_decode(signature) if isinstance(signature, str) else bytes(signature)
    if len(data) not in (SIGNATURE_LENGTH, RECOVERABLE_SIGNATURE_LENGTH):
        raise InvalidSignatureLengthError(len(data))
    recovery_param = data[64] if len(data) == RECOVERABLE_SIGNATURE_LENGTH else None
    return EcdsaSignature(
        r=bytes_to_hex(data[0:32]),
        s=bytes_to_hex(data[32:64]),
        recovery_param=recovery_param,
    )


def _strip_prefix(value: str) -> str:
    return value[2:] if value.startswith("0x") else value
