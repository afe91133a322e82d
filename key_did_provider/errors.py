"""Error types for key-did-provider.

Every failure raised by the package derives from ``ProviderError``.
RPC-level failures carry a numeric JSON-RPC error code.
"""

from typing import Any


class ProviderError(Exception):
    """Base exception for key-did-provider operations."""


class BadKeyFormatError(ProviderError):
    """Secret key material has the wrong shape."""

    def __init__(self, message: str) -> None:
        super().__init__(f"bad_key: {message}")


class UnsupportedAlgorithmError(ProviderError):
    """The JWS header names an algorithm with no implementation."""

    def __init__(self, alg: str) -> None:
        super().__init__(f"not_supported: Unsupported algorithm {alg}")
        self.alg = alg


class NotSupportedError(ProviderError):
    """The signer cannot produce what the algorithm requires."""

    def __init__(self, message: str) -> None:
        super().__init__(f"not_supported: {message}")


class MissingRecoveryParamError(ProviderError):
    """A recoverable signature was requested but no recovery param exists."""

    def __init__(self, message: str = "Signer did not return a recoveryParam") -> None:
        super().__init__(message)


class InvalidSignatureLengthError(ProviderError):
    """JOSE signature bytes are not 64 or 65 bytes long."""

    def __init__(self, length: int) -> None:
        super().__init__(
            f"Wrong size for signature. Expected 64 or 65 bytes, but got {length}"
        )
        self.length = length


class MalformedJWSError(ProviderError):
    """Compact JWS does not have exactly three parts."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Malformed JWS: {message}")


class InvalidDIDError(ProviderError):
    """DID format is invalid."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Invalid DID format: {message}")


class SerializationError(ProviderError):
    """Encoding, decoding or canonicalization failed."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Serialization error: {message}")


class RPCError(ProviderError):
    """An error reported to the RPC caller with a JSON-RPC error code."""

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def to_dict(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


class UnknownDIDError(RPCError):
    """The request addressed a DID this provider does not control."""

    CODE = 4100

    def __init__(self, did: str) -> None:
        super().__init__(self.CODE, f"Unknown DID: {did}")
        self.did = did
