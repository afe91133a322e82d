"""Tests for the DID providers."""

import json
import time

import pytest

from key_did_provider import (
    BadKeyFormatError,
    LocalSigner,
    ProviderConfig,
    RemoteSigner,
    RemoteSecp256k1Provider,
    Secp256k1Key,
    Secp256k1Provider,
    UnknownDIDError,
    decode_protected_header,
    verify_jws,
)
from key_did_provider.codec import base64url_decode
from key_did_provider.provider import (
    KEY_AGNOSTIC_METHODS,
    KEY_METHODS,
    DIDProvider,
    ProviderContext,
    sign,
)
from key_did_provider.rpc import INTERNAL_ERROR, INVALID_PARAMS, INVALID_REQUEST, METHOD_NOT_FOUND

from conftest import SECRET_KEY, SECRET_KEY_DID, FailingRemoteClient, FakeRemoteClient

KID = f"{SECRET_KEY_DID}#{SECRET_KEY_DID[len('did:key:'):]}"


def request(method: str, params: dict | None = None, request_id: int = 1) -> dict:
    msg = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        msg["params"] = params
    return msg


def compact(general: dict) -> str:
    signature = general["signatures"][0]
    return ".".join([signature["protected"], general["payload"], signature["signature"]])


def decode_payload(general: dict) -> dict:
    return json.loads(base64url_decode(general["payload"]))


@pytest.fixture
def provider() -> Secp256k1Provider:
    return Secp256k1Provider(SECRET_KEY)


@pytest.fixture
def remote_provider(remote_client: FakeRemoteClient) -> RemoteSecp256k1Provider:
    return RemoteSecp256k1Provider(SECRET_KEY_DID, remote_client)


AUTH_PARAMS = {"aud": ["https://app.example"], "nonce": "abc123", "paths": ["/"]}


class TestSecp256k1Provider:
    def test_did(self, provider: Secp256k1Provider) -> None:
        assert provider.did == SECRET_KEY_DID
        assert provider.is_did_provider

    def test_methods(self, provider: Secp256k1Provider) -> None:
        assert provider.methods == {"did_authenticate", "did_createJWS", "did_decryptJWE"}
        assert provider.methods == frozenset(KEY_METHODS)

    def test_bad_key(self) -> None:
        with pytest.raises(BadKeyFormatError):
            Secp256k1Provider(b"\x01" * 16)

    def test_repr_no_secrets(self, provider: Secp256k1Provider) -> None:
        assert SECRET_KEY.hex() not in repr(provider)
        assert SECRET_KEY_DID in repr(provider)

    @pytest.mark.parametrize("msg", [["not", "a", "mapping"], "did_authenticate", 42, None])
    def test_non_mapping_message(self, provider: Secp256k1Provider, msg) -> None:
        response = provider.send(msg)

        assert response["id"] is None
        assert response["error"]["code"] == INVALID_REQUEST

    def test_zeroize(self, provider: Secp256k1Provider) -> None:
        """After zeroize the provider keeps its DID but can no longer sign."""
        provider.zeroize()

        response = provider.send(request("did_authenticate", AUTH_PARAMS))

        assert provider.did == SECRET_KEY_DID
        assert response["error"]["code"] == INTERNAL_ERROR
        assert "zeroized" in response["error"]["message"]


class TestAuthenticate:
    def test_payload(self, provider: Secp256k1Provider) -> None:
        before = int(time.time())
        response = provider.send(request("did_authenticate", AUTH_PARAMS))
        general = response["result"]

        payload = decode_payload(general)
        assert payload["did"] == SECRET_KEY_DID
        assert payload["aud"] == ["https://app.example"]
        assert payload["nonce"] == "abc123"
        assert payload["paths"] == ["/"]
        assert before + 600 <= payload["exp"] <= int(time.time()) + 600

    def test_header(self, provider: Secp256k1Provider) -> None:
        general = provider.send(request("did_authenticate", AUTH_PARAMS))["result"]

        header = decode_protected_header(general["signatures"][0]["protected"])
        assert header == {"alg": "ES256K", "kid": KID}

    def test_signature_verifies(self, provider: Secp256k1Provider, key: Secp256k1Key) -> None:
        general = provider.send(request("did_authenticate", AUTH_PARAMS))["result"]

        assert verify_jws(compact(general), key.public_key)

    def test_missing_fields_dropped(self, provider: Secp256k1Provider) -> None:
        general = provider.send(request("did_authenticate", {"nonce": "n"}))["result"]

        assert set(decode_payload(general)) == {"did", "nonce", "exp"}

    def test_configured_expiry(self) -> None:
        provider = Secp256k1Provider(SECRET_KEY, ProviderConfig(auth_expiry_seconds=60))
        before = int(time.time())

        general = provider.send(request("did_authenticate", AUTH_PARAMS))["result"]

        assert before + 60 <= decode_payload(general)["exp"] <= int(time.time()) + 60

    def test_missing_nonce(self, provider: Secp256k1Provider) -> None:
        response = provider.send(request("did_authenticate", {"aud": ["x"]}))

        assert response["error"]["code"] == INVALID_PARAMS


class TestCreateJWS:
    def test_create(self, provider: Secp256k1Provider, key: Secp256k1Key) -> None:
        params = {"did": KID, "payload": {"b": 1, "a": 2}}

        result = provider.send(request("did_createJWS", params))["result"]

        general = result["jws"]
        assert decode_payload(general) == {"a": 2, "b": 1}
        assert verify_jws(compact(general), key.public_key)

    def test_protected_overrides_merged(self, provider: Secp256k1Provider) -> None:
        """Extra protected fields are kept, kid and alg are forced."""
        params = {
            "did": SECRET_KEY_DID,
            "payload": {"a": 1},
            "protected": {"typ": "JWT", "kid": "attacker#key", "alg": "none"},
        }

        general = provider.send(request("did_createJWS", params))["result"]["jws"]

        header = decode_protected_header(general["signatures"][0]["protected"])
        assert header == {"alg": "ES256K", "kid": KID, "typ": "JWT"}

    @pytest.mark.parametrize("payload", [[1, 2, 3], 42, True, None, [{"b": 1, "a": 2}]])
    def test_non_object_payload(self, provider: Secp256k1Provider, key: Secp256k1Key, payload) -> None:
        """Any JSON value can be signed, not only objects."""
        params = {"did": SECRET_KEY_DID, "payload": payload}

        general = provider.send(request("did_createJWS", params))["result"]["jws"]

        assert decode_payload(general) == payload
        assert verify_jws(compact(general), key.public_key)

    def test_string_payload(self, provider: Secp256k1Provider) -> None:
        params = {"did": SECRET_KEY_DID, "payload": "eyJhIjoxfQ"}

        general = provider.send(request("did_createJWS", params))["result"]["jws"]

        assert general["payload"] == "eyJhIjoxfQ"

    def test_unknown_did(self, provider: Secp256k1Provider) -> None:
        params = {"did": "did:key:zABC#zABC", "payload": {"a": 1}}

        response = provider.send(request("did_createJWS", params, request_id=7))

        assert response["id"] == 7
        assert response["error"]["code"] == UnknownDIDError.CODE == 4100
        assert "did:key:zABC" in response["error"]["message"]

    def test_unknown_did_other_context(self, remote_client: FakeRemoteClient) -> None:
        """A request DID that differs from the context DID is refused."""
        provider = DIDProvider(
            ProviderContext(did="did:key:zXYZ", signer=RemoteSigner(remote_client)),
            KEY_METHODS,
        )

        response = provider.send(request("did_createJWS", {"did": "did:key:zABC#zABC", "payload": {}}))

        assert response["error"]["code"] == 4100
        assert remote_client.digests == []


class TestDecryptJWE:
    def test_always_empty(self, provider: Secp256k1Provider) -> None:
        response = provider.send(request("did_decryptJWE", {"jwe": {"ciphertext": "x"}}))

        assert response["result"] == {"cleartext": ""}

    def test_without_params(self, provider: Secp256k1Provider) -> None:
        assert provider.send(request("did_decryptJWE"))["result"] == {"cleartext": ""}


class TestRemoteSecp256k1Provider:
    def test_methods(self, remote_provider: RemoteSecp256k1Provider) -> None:
        assert remote_provider.methods == frozenset(KEY_AGNOSTIC_METHODS) == {"did_authenticate"}

    def test_authenticate(
        self,
        remote_provider: RemoteSecp256k1Provider,
        remote_client: FakeRemoteClient,
        key: Secp256k1Key,
    ) -> None:
        general = remote_provider.send(request("did_authenticate", AUTH_PARAMS))["result"]

        assert decode_payload(general)["did"] == SECRET_KEY_DID
        assert verify_jws(compact(general), key.public_key)
        assert len(remote_client.digests) == 1

    def test_same_jws_as_local(self, remote_client: FakeRemoteClient) -> None:
        """Both backends produce byte-identical JWS for the same key and input."""
        local = ProviderContext(did=SECRET_KEY_DID, signer=LocalSigner(SECRET_KEY))
        remote = ProviderContext(did=SECRET_KEY_DID, signer=RemoteSigner(remote_client))

        assert sign(remote, {"a": 1}) == sign(local, {"a": 1})

    @pytest.mark.parametrize("method", ["did_createJWS", "did_decryptJWE"])
    def test_local_only_methods(self, remote_provider, method: str) -> None:
        response = remote_provider.send(request(method, {"did": SECRET_KEY_DID, "payload": {}}))

        assert response["error"]["code"] == METHOD_NOT_FOUND

    def test_signing_failure(self) -> None:
        provider = RemoteSecp256k1Provider(SECRET_KEY_DID, FailingRemoteClient())

        response = provider.send(request("did_authenticate", AUTH_PARAMS))

        assert response["error"]["code"] == INTERNAL_ERROR
        assert "unreachable" in response["error"]["message"]
