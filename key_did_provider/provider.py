"""DID provider: the RPC method table and the providers that serve it.

Two providers share one method implementation:

- ``Secp256k1Provider`` holds a secret key and answers ``did_authenticate``,
  ``did_createJWS`` and ``did_decryptJWE``.
- ``RemoteSecp256k1Provider`` holds only a DID and a remote signing client
  and answers ``did_authenticate``.

Example:
    >>> provider = Secp256k1Provider(bytes([1] * 32))
    >>> response = provider.send({
    ...     "jsonrpc": "2.0", "id": 1,
    ...     "method": "did_authenticate",
    ...     "params": {"nonce": "n", "aud": ["https://app.example"], "paths": []},
    ... })
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from key_did_provider.codec import canonicalize, to_stable_object
from key_did_provider.config import ProviderConfig
from key_did_provider.did import did_key_id, strip_fragment
from key_did_provider.errors import UnknownDIDError
from key_did_provider.jws import DEFAULT_ALGORITHM, create_jws, to_general_jws
from key_did_provider.keys import Secp256k1Key
from key_did_provider.models import (
    AuthParams,
    CreateJWSParams,
    CreateJWSResult,
    DecryptJWEResult,
    GeneralJWS,
)
from key_did_provider.rpc import HandlerMethods, create_handler
from key_did_provider.signers import LocalSigner, RemoteSigner, RemoteSigningClient, Signer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderContext:
    """Fixed identity a provider signs as."""

    did: str
    signer: Signer = field(repr=False)
    config: ProviderConfig = field(default_factory=ProviderConfig)


def sign(
    context: ProviderContext,
    payload: Any,
    protected_header: Optional[Mapping[str, Any]] = None,
) -> str:
    """Sign ``payload`` as the context DID and return a compact JWS.

    A string payload is used as-is; any other JSON value is canonicalized.
    Caller-supplied ``kid`` and ``alg`` in ``protected_header`` are replaced.
    """
    header = dict(protected_header or {})
    header.update({"kid": did_key_id(context.did), "alg": DEFAULT_ALGORITHM.value})
    body = payload if isinstance(payload, str) else json.loads(canonicalize(payload))
    return create_jws(body, context.signer, to_stable_object(header))


def did_authenticate(context: ProviderContext, params: Any) -> GeneralJWS:
    request = AuthParams.model_validate(params or {})
    payload = {
        "did": context.did,
        "aud": request.aud,
        "nonce": request.nonce,
        "paths": request.paths,
        "exp": int(time.time()) + context.config.auth_expiry_seconds,
    }
    payload = {key: value for key, value in payload.items() if value is not None}
    return to_general_jws(sign(context, payload))


def did_create_jws(context: ProviderContext, params: Any) -> CreateJWSResult:
    request = CreateJWSParams.model_validate(params or {})
    if strip_fragment(request.did) != context.did:
        raise UnknownDIDError(request.did)
    jws = sign(context, request.payload, request.protected)
    return CreateJWSResult(jws=to_general_jws(jws))


def did_decrypt_jwe(context: ProviderContext, params: Any) -> DecryptJWEResult:
    # JWE decryption is not implemented; the result is always empty
    return DecryptJWEResult(cleartext="")


KEY_METHODS: HandlerMethods = {
    "did_authenticate": did_authenticate,
    "did_createJWS": did_create_jws,
    "did_decryptJWE": did_decrypt_jwe,
}

KEY_AGNOSTIC_METHODS: HandlerMethods = {
    "did_authenticate": did_authenticate,
}


class DIDProvider:
    """Serves a method table for a fixed ``ProviderContext``."""

    def __init__(self, context: ProviderContext, methods: HandlerMethods) -> None:
        self._context = context
        self._methods = methods
        self._handle = create_handler(methods)

    @property
    def did(self) -> str:
        return self._context.did

    @property
    def is_did_provider(self) -> bool:
        return True

    @property
    def methods(self) -> frozenset[str]:
        """Names of the RPC methods this provider answers."""
        return frozenset(self._methods)

    def send(self, msg: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        """Handle one JSON-RPC message and return its response."""
        method = msg.get("method") if isinstance(msg, Mapping) else None
        logger.debug("Handling %s for %s", method, self._context.did)
        return self._handle(self._context, msg)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(did={self._context.did})"


class Secp256k1Provider(DIDProvider):
    """Provider backed by an in-memory secp256k1 secret key.

    Raises:
        BadKeyFormatError: If ``secret_key`` is not a valid 32-byte key.
    """

    def __init__(self, secret_key: bytes, config: Optional[ProviderConfig] = None) -> None:
        key = Secp256k1Key(secret_key)
        self._signer = LocalSigner(key)
        context = ProviderContext(
            did=str(key.did),
            signer=self._signer,
            config=config or ProviderConfig(),
        )
        super().__init__(context, KEY_METHODS)
        logger.info("Created provider for %s", context.did)

    def zeroize(self) -> None:
        """Wipe the secret key. Signing methods fail afterwards."""
        self._signer.zeroize()
        logger.info("Zeroized key for %s", self.did)


class RemoteSecp256k1Provider(DIDProvider):
    """Provider whose key lives behind a remote signing service.

    Args:
        did: The did:key of the remote key, derived out of band (for
            example with ``did_from_remote_signer``).
        client: Client for the remote signing service.
    """

    def __init__(
        self,
        did: str,
        client: RemoteSigningClient,
        config: Optional[ProviderConfig] = None,
    ) -> None:
        context = ProviderContext(
            did=did,
            signer=RemoteSigner(client),
            config=config or ProviderConfig(),
        )
        super().__init__(context, KEY_AGNOSTIC_METHODS)
        logger.info("Created remote provider for %s", did)
