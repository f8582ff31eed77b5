"""Software platform authenticator: keychain-held ML-DSA credentials behind Touch ID."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from .authdata import attestation_object, authenticator_data, encode_cose_key
from .options import (
    ClientData,
    CreationOptions,
    PublicKeyCredentialDescriptor,
    RequestOptions,
    assertion_credential,
    attestation_credential,
    b64url_decode,
)
from .pqcrypto import SignatureSuite, oqs_installed, select_algorithm
from .store import CredentialStore, CredentialStoreError, PlatformCredential
from .verification import UserVerifier

LOGGER = logging.getLogger(__name__)

ATTACHMENT = "platform"


class PlatformAuthenticator:
    """Mimics ``navigator.credentials`` create/get for the local device."""

    def __init__(self, store: CredentialStore, verifier: UserVerifier, origin: str) -> None:
        self.store = store
        self.verifier = verifier
        self.origin = origin

    def is_available(self) -> bool:
        return oqs_installed() and self.verifier.is_available()

    def make_credential(self, options_data: Dict[str, Any]) -> Dict[str, Any]:
        options = CreationOptions.model_validate(options_data)
        self._check_excluded(options.rp.id, options.excludeCredentials)
        alg = select_algorithm(param.alg for param in options.pubKeyCredParams)
        if alg is None:
            raise CredentialStoreError("No supported algorithm from pubKeyCredParams")

        self.verifier.verify_user(f"Touch ID to register {options.user.displayName or options.user.name}")

        suite = SignatureSuite(alg)
        keypair = suite.generate_keypair()
        credential = PlatformCredential.new(
            user_handle=options.user.id,
            rp_id=options.rp.id,
            algorithm=alg,
            public_key=keypair.public_key,
            private_key=keypair.private_key,
        )
        self.store.save(credential)

        credential_id = b64url_decode(credential.credential_id)
        auth_data = authenticator_data(
            rp_id=options.rp.id,
            sign_count=credential.sign_count,
            credential_id=credential_id,
            cose_key=encode_cose_key(keypair.public_key, alg, suite.family),
        )
        LOGGER.debug("Created platform credential %s for %s", credential.credential_id, options.rp.id)
        return attestation_credential(
            credential_id,
            ClientData("webauthn.create", options.challenge, self.origin),
            attestation_object(auth_data),
            auth_data,
            ATTACHMENT,
        )

    def get_assertion(self, options_data: Dict[str, Any]) -> Dict[str, Any]:
        options = RequestOptions.model_validate(options_data)
        credential = self._locate(options.allowCredentials, options.rpId)
        if credential is None:
            raise CredentialStoreError("No credential available for assertion")

        self.verifier.verify_user("Touch ID to continue sign-in")

        client_data = ClientData("webauthn.get", options.challenge, self.origin)
        credential.sign_count += 1
        auth_data = authenticator_data(rp_id=options.rpId, sign_count=credential.sign_count)
        signature = SignatureSuite(credential.algorithm).sign(
            b64url_decode(credential.private_key), auth_data + client_data.hash
        )
        self.store.save(credential)

        return assertion_credential(
            b64url_decode(credential.credential_id),
            client_data,
            auth_data,
            signature,
            b64url_decode(credential.user_handle),
            ATTACHMENT,
        )

    # Helpers -----------------------------------------------------------
    def _locate(
        self, allow: List[PublicKeyCredentialDescriptor], rp_id: str
    ) -> PlatformCredential | None:
        if allow:
            return self.store.find_first(descriptor.id for descriptor in allow)
        matches = self.store.find_by_rp(rp_id)
        return matches[0] if matches else None

    def _check_excluded(self, rp_id: str, exclude: List[PublicKeyCredentialDescriptor]) -> None:
        for descriptor in exclude:
            try:
                existing = self.store.load(descriptor.id)
            except CredentialStoreError:
                continue
            if existing.rp_id == rp_id:
                raise CredentialStoreError("Credential creation excluded by RP")
