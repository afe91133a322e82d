"""Pydantic models for provider RPC params and results."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict


class JWSSignature(BaseModel):
    """One signature entry of a general JWS."""

    protected: str
    signature: str


class GeneralJWS(BaseModel):
    """A JWS in general serialization with a single signature."""

    payload: str
    signatures: List[JWSSignature]


class AuthParams(BaseModel):
    """Params of ``did_authenticate``."""

    model_config = ConfigDict(extra="ignore")

    nonce: str
    aud: Optional[Union[str, List[str]]] = None
    paths: Optional[List[str]] = None


class CreateJWSParams(BaseModel):
    """Params of ``did_createJWS``."""

    model_config = ConfigDict(extra="ignore")

    did: str
    payload: Any
    protected: Optional[Dict[str, Any]] = None


class CreateJWSResult(BaseModel):
    jws: GeneralJWS


class DecryptJWEResult(BaseModel):
    cleartext: str = ""
