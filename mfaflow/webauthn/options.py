"""WebAuthn option and response payloads exchanged with the authority."""

from __future__ import annotations

import base64
import hashlib
import json
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator


def b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def b64url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


class RelyingPartyEntity(BaseModel):
    id: str
    name: str = ""


class UserEntity(BaseModel):
    id: str = Field(min_length=1)
    name: str
    displayName: str = ""


class PubKeyCredParam(BaseModel):
    type: Literal["public-key"] = "public-key"
    alg: int


class PublicKeyCredentialDescriptor(BaseModel):
    id: str
    type: Literal["public-key"] = "public-key"
    transports: List[str] = Field(default_factory=list)


class AuthenticatorSelectionCriteria(BaseModel):
    authenticatorAttachment: Optional[Literal["platform", "cross-platform"]] = None
    residentKey: Literal["required", "preferred", "discouraged"] = "discouraged"
    requireResidentKey: bool = False
    userVerification: Literal["required", "preferred", "discouraged"] = "preferred"


class CreationOptions(BaseModel):
    challenge: str
    rp: RelyingPartyEntity
    user: UserEntity
    pubKeyCredParams: List[PubKeyCredParam]
    timeout: int = 90_000
    attestation: Literal["none", "indirect", "direct", "enterprise"] = "none"
    authenticatorSelection: AuthenticatorSelectionCriteria = Field(
        default_factory=AuthenticatorSelectionCriteria
    )
    excludeCredentials: List[PublicKeyCredentialDescriptor] = Field(default_factory=list)

    @model_validator(mode="after")
    def ensure_algorithms(self) -> "CreationOptions":
        if not self.pubKeyCredParams:
            raise ValueError("pubKeyCredParams cannot be empty")
        return self


class RequestOptions(BaseModel):
    challenge: str
    rpId: str
    timeout: int = 90_000
    userVerification: Literal["required", "preferred", "discouraged"] = "preferred"
    allowCredentials: List[PublicKeyCredentialDescriptor] = Field(default_factory=list)


def unwrap_options(data: Dict[str, Any]) -> Dict[str, Any]:
    """Authorities may nest the options under ``publicKey`` as browsers expect."""
    inner = data.get("publicKey")
    return inner if isinstance(inner, dict) else data


class ClientData:
    """``clientDataJSON`` for one ceremony, serialized once so hash and payload agree."""

    def __init__(self, kind: str, challenge: str, origin: str) -> None:
        self.raw = json.dumps(
            {"type": kind, "challenge": challenge, "origin": origin},
            separators=(",", ":"),
        ).encode("utf-8")

    @property
    def hash(self) -> bytes:
        return hashlib.sha256(self.raw).digest()

    def encoded(self) -> str:
        return b64url_encode(self.raw)


def attestation_credential(
    credential_id: bytes,
    client_data: ClientData,
    attestation_object: bytes,
    auth_data: bytes,
    attachment: str,
) -> Dict[str, Any]:
    encoded_id = b64url_encode(credential_id)
    return {
        "id": encoded_id,
        "rawId": encoded_id,
        "type": "public-key",
        "authenticatorAttachment": attachment,
        "response": {
            "clientDataJSON": client_data.encoded(),
            "attestationObject": b64url_encode(attestation_object),
            "authenticatorData": b64url_encode(auth_data),
        },
    }


def assertion_credential(
    credential_id: bytes,
    client_data: ClientData,
    auth_data: bytes,
    signature: bytes,
    user_handle: Optional[bytes],
    attachment: str,
) -> Dict[str, Any]:
    encoded_id = b64url_encode(credential_id)
    return {
        "id": encoded_id,
        "rawId": encoded_id,
        "type": "public-key",
        "authenticatorAttachment": attachment,
        "response": {
            "clientDataJSON": client_data.encoded(),
            "authenticatorData": b64url_encode(auth_data),
            "signature": b64url_encode(signature),
            "userHandle": b64url_encode(user_handle) if user_handle else None,
        },
    }
