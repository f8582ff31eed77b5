from __future__ import annotations

import hashlib
import json
from io import BytesIO
from types import SimpleNamespace

import cbor2
import pytest

from mfaflow.errors import AuthenticationFailed
from mfaflow.models import ABANDONED, FlowContext
from mfaflow.strategies.webauthn import PlatformWebAuthnStrategy
from mfaflow.webauthn.authdata import attestation_object, authenticator_data, encode_cose_key
from mfaflow.webauthn.options import b64url_decode, b64url_encode
from mfaflow.webauthn.platform import PlatformAuthenticator
from mfaflow.webauthn.store import CredentialStore, CredentialStoreError, PlatformCredential
from mfaflow.webauthn.verification import NoopVerifier, UserVerificationCanceled, UserVerificationError

USER_HANDLE = b64url_encode(b"user-id")


class FakeSignatureSuite:
    family = "ml-dsa"

    def __init__(self, algorithm: int) -> None:
        self.algorithm = algorithm

    def generate_keypair(self) -> SimpleNamespace:
        return SimpleNamespace(
            public_key=f"public-{self.algorithm}".encode(),
            private_key=f"private-{self.algorithm}".encode(),
        )

    def sign(self, private_key: bytes, payload: bytes) -> bytes:
        return payload + b"::sig"


class ScriptedVerifier:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.prompts = []

    def is_available(self) -> bool:
        return True

    def verify_user(self, prompt: str) -> bool:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return True


@pytest.fixture
def store(temp_settings) -> CredentialStore:
    return CredentialStore(temp_settings.keyring_service, temp_settings.credential_index_path)


@pytest.fixture
def make_authenticator(monkeypatch, store, temp_settings):
    from mfaflow.webauthn import platform

    monkeypatch.setattr(platform, "SignatureSuite", FakeSignatureSuite)

    def factory(verifier=None) -> PlatformAuthenticator:
        return PlatformAuthenticator(store, verifier or NoopVerifier(), temp_settings.origin)

    return factory


def creation_options(exclude=()) -> dict:
    return {
        "challenge": "abc",
        "rp": {"id": "example.com", "name": "Example"},
        "user": {"id": USER_HANDLE, "name": "user", "displayName": "User"},
        "pubKeyCredParams": [{"type": "public-key", "alg": -7}, {"type": "public-key", "alg": -49}],
        "excludeCredentials": [{"id": cred, "type": "public-key"} for cred in exclude],
    }


def request_options(credential_id: str | None = None) -> dict:
    allow = [{"id": credential_id, "type": "public-key"}] if credential_id else []
    return {"challenge": "assertion-chal", "rpId": "example.com", "allowCredentials": allow}


def parse_auth_data(data: bytes) -> dict:
    flags = data[32]
    parsed = {"flags": flags, "sign_count": int.from_bytes(data[33:37], "big")}
    if flags & 0x40:
        cred_len = int.from_bytes(data[53:55], "big")
        parsed["credential_id"] = data[55 : 55 + cred_len]
        parsed["cose_key"] = cbor2.CBORDecoder(BytesIO(data[55 + cred_len :])).decode()
    return parsed


def test_make_credential_produces_attestation(make_authenticator):
    result = make_authenticator().make_credential(creation_options())

    assert result["type"] == "public-key"
    assert result["authenticatorAttachment"] == "platform"
    attestation = cbor2.loads(b64url_decode(result["response"]["attestationObject"]))
    assert attestation["fmt"] == "none"
    parsed = parse_auth_data(attestation["authData"])
    assert b64url_encode(parsed["credential_id"]) == result["id"]
    assert parsed["cose_key"][3] == -49
    assert parsed["cose_key"][-1] == b"public--49"
    client_data = json.loads(b64url_decode(result["response"]["clientDataJSON"]))
    assert client_data == {"type": "webauthn.create", "challenge": "abc", "origin": "https://example.com"}


def test_excluded_credential_blocks_duplicate(make_authenticator):
    authenticator = make_authenticator()
    first = authenticator.make_credential(creation_options())

    with pytest.raises(CredentialStoreError, match="excluded"):
        authenticator.make_credential(creation_options(exclude=[first["id"]]))


def test_get_assertion_signs_and_bumps_sign_count(make_authenticator, store):
    authenticator = make_authenticator()
    created = authenticator.make_credential(creation_options())

    assertion = authenticator.get_assertion(request_options(created["id"]))

    response = assertion["response"]
    auth_data = b64url_decode(response["authenticatorData"])
    assert parse_auth_data(auth_data)["sign_count"] == 1
    client_data_hash = hashlib.sha256(b64url_decode(response["clientDataJSON"])).digest()
    assert b64url_decode(response["signature"]) == auth_data + client_data_hash + b"::sig"
    assert response["userHandle"] == USER_HANDLE
    assert store.load(created["id"]).sign_count == 1


def test_get_assertion_falls_back_to_rp_credentials(make_authenticator):
    authenticator = make_authenticator()
    created = authenticator.make_credential(creation_options())

    assert authenticator.get_assertion(request_options())["id"] == created["id"]


def test_strategy_maps_touch_id_cancel_to_abandoned(make_authenticator):
    verifier = ScriptedVerifier(UserVerificationCanceled("Touch ID canceled"))
    strategy = PlatformWebAuthnStrategy(make_authenticator(verifier))

    assert strategy.prepare_registration({"publicKey": creation_options()}, FlowContext()) is ABANDONED
    assert verifier.prompts == ["Touch ID to register User"]


def test_strategy_maps_verification_failure(make_authenticator):
    strategy = PlatformWebAuthnStrategy(make_authenticator(ScriptedVerifier(UserVerificationError("no match"))))

    with pytest.raises(AuthenticationFailed, match="no match"):
        strategy.prepare_registration(creation_options(), FlowContext())


def test_strategy_reports_missing_credential(make_authenticator):
    strategy = PlatformWebAuthnStrategy(make_authenticator())

    with pytest.raises(AuthenticationFailed, match="No credential"):
        strategy.prepare_authentication(request_options("unknown"), FlowContext())


def test_unsupported_algorithms_fail(make_authenticator):
    options = creation_options()
    options["pubKeyCredParams"] = [{"type": "public-key", "alg": -7}]

    with pytest.raises(AuthenticationFailed, match="No supported algorithm"):
        PlatformWebAuthnStrategy(make_authenticator()).prepare_registration(options, FlowContext())


def test_availability_requires_liboqs(monkeypatch, make_authenticator):
    from mfaflow.webauthn import platform

    monkeypatch.setattr(platform, "oqs_installed", lambda: False)
    assert PlatformWebAuthnStrategy(make_authenticator()).is_available() is False


def test_store_round_trip(store):
    credential = PlatformCredential.new(
        user_handle="user-1",
        rp_id="example.com",
        algorithm=-49,
        public_key=b"public-key",
        private_key=b"private-key",
    )
    store.save(credential)

    assert store.load(credential.credential_id).rp_id == "example.com"
    assert [c.credential_id for c in store.find_by_rp("example.com")] == [credential.credential_id]

    store.delete(credential.credential_id)
    with pytest.raises(CredentialStoreError):
        store.load(credential.credential_id)
    assert store.find_by_rp("example.com") == []


def test_authenticator_data_flags_and_counter():
    data = authenticator_data(
        rp_id="example.com",
        sign_count=5,
        credential_id=b"abc",
        cose_key=encode_cose_key(b"pk", -49, "ml-dsa"),
    )
    assert data[:32] == hashlib.sha256(b"example.com").digest()
    assert data[32] & 0x01 and data[32] & 0x04 and data[32] & 0x40
    assert int.from_bytes(data[33:37], "big") == 5

    assertion = authenticator_data(rp_id="example.com", sign_count=1, user_verified=False)
    assert len(assertion) == 37
    assert assertion[32] == 0x01


def test_attestation_object_wraps_data():
    decoded = cbor2.loads(attestation_object(b"auth"))
    assert decoded == {"fmt": "none", "authData": b"auth", "attStmt": {}}
