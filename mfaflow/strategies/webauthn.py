"""Strategies wrapping the platform and portable WebAuthn authenticators."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from fido2.ctap import CtapError
from pydantic import ValidationError

from ..errors import AuthenticationFailed
from ..models import ABANDONED, AuthType, FlowContext, PrepareResult
from ..webauthn.options import unwrap_options
from ..webauthn.platform import PlatformAuthenticator
from ..webauthn.portable import PortableAuthenticator, SecurityKeyDismissed, SecurityKeyMissing
from ..webauthn.store import CredentialStoreError
from ..webauthn.verification import UserVerificationCanceled, UserVerificationError
from .base import Strategy

LOGGER = logging.getLogger(__name__)


class PlatformWebAuthnStrategy(Strategy):
    auth_type = AuthType.PLATFORM_BIOMETRIC

    def __init__(self, authenticator: PlatformAuthenticator) -> None:
        self.authenticator = authenticator

    def is_available(self) -> bool:
        return self.authenticator.is_available()

    def prepare_registration(self, data: Mapping[str, Any], context: FlowContext) -> PrepareResult:
        return self._ceremony(self.authenticator.make_credential, data)

    def prepare_authentication(self, data: Mapping[str, Any], context: FlowContext) -> PrepareResult:
        return self._ceremony(self.authenticator.get_assertion, data)

    @staticmethod
    def _ceremony(step, data: Mapping[str, Any]) -> PrepareResult:
        try:
            return step(unwrap_options(dict(data)))
        except UserVerificationCanceled:
            LOGGER.info("Platform authenticator dismissed by user")
            return ABANDONED
        except (UserVerificationError, CredentialStoreError, ValidationError) as exc:
            raise AuthenticationFailed(str(exc)) from exc


class PortableWebAuthnStrategy(Strategy):
    auth_type = AuthType.PORTABLE_SECURITY_KEY

    def __init__(self, authenticator: PortableAuthenticator) -> None:
        self.authenticator = authenticator

    def is_available(self) -> bool:
        return self.authenticator.is_available()

    def prepare_registration(self, data: Mapping[str, Any], context: FlowContext) -> PrepareResult:
        return self._ceremony(self.authenticator.make_credential, data)

    def prepare_authentication(self, data: Mapping[str, Any], context: FlowContext) -> PrepareResult:
        return self._ceremony(self.authenticator.get_assertion, data)

    @staticmethod
    def _ceremony(step, data: Mapping[str, Any]) -> PrepareResult:
        try:
            return step(unwrap_options(dict(data)))
        except SecurityKeyDismissed:
            LOGGER.info("Security key ceremony dismissed")
            return ABANDONED
        except (CtapError, SecurityKeyMissing, OSError, ValidationError) as exc:
            raise AuthenticationFailed(f"Security key error: {exc}") from exc
