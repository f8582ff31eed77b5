"""Binary authenticator data and attestation objects for the platform authenticator."""

from __future__ import annotations

import hashlib
from typing import Optional

from fido2 import cbor

FLAG_UP = 0x01
FLAG_UV = 0x04
FLAG_AT = 0x40
AAGUID = bytes(16)

# COSE key type for algorithms without a registered kty; ML-DSA keys travel as OKP.
COSE_KTY_OKP = 1


def encode_cose_key(public_key: bytes, algorithm: int, family: str) -> bytes:
    return cbor.encode({1: COSE_KTY_OKP, 3: algorithm, -1: public_key, -70001: family})


def authenticator_data(
    rp_id: str,
    sign_count: int,
    credential_id: Optional[bytes] = None,
    cose_key: Optional[bytes] = None,
    user_verified: bool = True,
) -> bytes:
    attested = credential_id is not None and cose_key is not None
    flags = FLAG_UP
    if user_verified:
        flags |= FLAG_UV
    if attested:
        flags |= FLAG_AT

    data = bytearray(hashlib.sha256(rp_id.encode("idna")).digest())
    data.append(flags)
    data.extend(sign_count.to_bytes(4, "big"))
    if attested:
        data.extend(AAGUID)
        data.extend(len(credential_id).to_bytes(2, "big"))
        data.extend(credential_id)
        data.extend(cose_key)
    return bytes(data)


def attestation_object(auth_data: bytes, fmt: str = "none", att_stmt: Optional[dict] = None) -> bytes:
    return cbor.encode({"fmt": fmt, "authData": auth_data, "attStmt": att_stmt or {}})
