"""WebAuthn ceremonies for platform and portable authenticators."""

from .platform import PlatformAuthenticator
from .portable import PortableAuthenticator, SecurityKeyDismissed, SecurityKeyMissing
from .store import CredentialStore, CredentialStoreError, PlatformCredential
from .verification import (
    NoopVerifier,
    TouchIDVerifier,
    UserVerificationCanceled,
    UserVerificationError,
    build_verifier,
)

__all__ = [
    "PlatformAuthenticator",
    "PortableAuthenticator",
    "SecurityKeyDismissed",
    "SecurityKeyMissing",
    "CredentialStore",
    "CredentialStoreError",
    "PlatformCredential",
    "NoopVerifier",
    "TouchIDVerifier",
    "UserVerificationCanceled",
    "UserVerificationError",
    "build_verifier",
]
