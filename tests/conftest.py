"""Shared fixtures."""

import pytest

from key_did_provider import RemoteSignature, Secp256k1Key

SECRET_KEY = bytes([1] * 32)

# did:key of SECRET_KEY; compressed public key 031b84c5...dd078f
SECRET_KEY_DID = "did:key:zQ3shgVXZLaMzm5S5x7XzGUG6YFHFLtoEMiv9ao2Bqa7hGyg2"

SECRET_KEY_PUBLIC_HEX = "031b84c5567b126440995d3ed5aaba0565d71e1834604819ff9c17f5e9d5dd078f"


class FakeRemoteClient:
    """Signs like a remote service would, with a key it keeps to itself."""

    def __init__(self, key: Secp256k1Key, strip_leading_zeros: bool = False) -> None:
        self.key = key
        self.strip_leading_zeros = strip_leading_zeros
        self.digests: list[bytes] = []

    def request_signature(self, digest: bytes) -> RemoteSignature:
        self.digests.append(digest)
        signature = self.key.sign_digest(digest)
        r, s = signature.r, signature.s
        if self.strip_leading_zeros:
            r, s = r.lstrip("0"), s.lstrip("0")
        return RemoteSignature(
            r=r,
            s=s,
            recid=signature.recovery_param,
            public_key="04" + self.key.verifying_key.to_string().hex(),
        )


class FailingRemoteClient:
    """Remote client whose network is down."""

    def request_signature(self, digest: bytes) -> RemoteSignature:
        raise ConnectionError("signing node unreachable")


@pytest.fixture
def secret_key() -> bytes:
    return SECRET_KEY


@pytest.fixture
def key() -> Secp256k1Key:
    return Secp256k1Key(SECRET_KEY)


@pytest.fixture
def remote_client(key: Secp256k1Key) -> FakeRemoteClient:
    return FakeRemoteClient(key)
