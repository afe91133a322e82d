"""did:key provider for secp256k1 keys.

Answers DID provider RPC calls (``did_authenticate``, ``did_createJWS``,
``did_decryptJWE``) with ES256K JSON Web Signatures, signing either with a
local secret key or through a remote signing service.

Example:
    >>> from key_did_provider import Secp256k1Provider
    >>> provider = Secp256k1Provider(bytes([1] * 32))
    >>> print(provider.did)
    did:key:zQ3shgVXZLaMzm5S5x7XzGUG6YFHFLtoEMiv9ao2Bqa7hGyg2
"""

from key_did_provider.codec import (
    base58btc_encode,
    base64url_decode,
    base64url_encode,
    bytes_to_hex,
    canonicalize,
    hex_to_bytes,
    leftpad,
)
from key_did_provider.config import ProviderConfig, load_config
from key_did_provider.did import Did, decode_did, encode_did
from key_did_provider.errors import (
    BadKeyFormatError,
    InvalidDIDError,
    InvalidSignatureLengthError,
    MalformedJWSError,
    MissingRecoveryParamError,
    NotSupportedError,
    ProviderError,
    RPCError,
    SerializationError,
    UnknownDIDError,
    UnsupportedAlgorithmError,
)
from key_did_provider.jose import EcdsaSignature, from_jose, to_jose, to_jose_string
from key_did_provider.jws import (
    Algorithm,
    ES256KSignerAlgorithm,
    create_jws,
    decode_protected_header,
    to_general_jws,
    verify_jws,
)
from key_did_provider.keys import Secp256k1Key, compress_public_key
from key_did_provider.models import GeneralJWS, JWSSignature
from key_did_provider.provider import (
    DIDProvider,
    RemoteSecp256k1Provider,
    Secp256k1Provider,
)
from key_did_provider.signers import (
    LocalSigner,
    RemoteSignature,
    RemoteSigner,
    RemoteSigningClient,
    Signer,
    did_from_remote_signer,
)

__version__ = "0.1.0"

__all__ = [
    # Providers
    "DIDProvider",
    "RemoteSecp256k1Provider",
    "Secp256k1Provider",
    "ProviderConfig",
    "load_config",
    # Keys and DIDs
    "Did",
    "Secp256k1Key",
    "compress_public_key",
    "decode_did",
    "encode_did",
    # Signers
    "LocalSigner",
    "RemoteSignature",
    "RemoteSigner",
    "RemoteSigningClient",
    "Signer",
    "did_from_remote_signer",
    # JWS
    "Algorithm",
    "ES256KSignerAlgorithm",
    "EcdsaSignature",
    "GeneralJWS",
    "JWSSignature",
    "create_jws",
    "decode_protected_header",
    "from_jose",
    "to_general_jws",
    "to_jose",
    "to_jose_string",
    "verify_jws",
    # Codec
    "base58btc_encode",
    "base64url_decode",
    "base64url_encode",
    "bytes_to_hex",
    "canonicalize",
    "hex_to_bytes",
    "leftpad",
    # Errors
    "BadKeyFormatError",
    "InvalidDIDError",
    "InvalidSignatureLengthError",
    "MalformedJWSError",
    "MissingRecoveryParamError",
    "NotSupportedError",
    "ProviderError",
    "RPCError",
    "SerializationError",
    "UnknownDIDError",
    "UnsupportedAlgorithmError",
]
