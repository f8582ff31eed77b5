"""Backend strategies, one per auth type, and the default wiring."""

from __future__ import annotations

from typing import Optional

from ..config import MFASettings
from ..prompt import ConsolePrompt, Prompt
from ..webauthn import CredentialStore, PlatformAuthenticator, PortableAuthenticator, build_verifier
from .base import Strategy, StrategySet
from .codes import EmailCodeStrategy, TOTPStrategy
from .openid import OpenIDStrategy
from .webauthn import PlatformWebAuthnStrategy, PortableWebAuthnStrategy


def default_strategies(
    settings: Optional[MFASettings] = None,
    prompt: Optional[Prompt] = None,
) -> StrategySet:
    settings = settings or MFASettings()
    prompt = prompt or ConsolePrompt()
    platform = PlatformAuthenticator(
        store=CredentialStore(settings.keyring_service, settings.credential_index_path),
        verifier=build_verifier(settings.user_verification, settings.touch_id_timeout),
        origin=settings.origin,
    )
    portable = PortableAuthenticator(origin=settings.origin, timeout=settings.portable_key_timeout)
    return StrategySet(
        [
            PlatformWebAuthnStrategy(platform),
            PortableWebAuthnStrategy(portable),
            EmailCodeStrategy(prompt),
            TOTPStrategy(prompt, issuer=settings.totp_issuer),
            OpenIDStrategy(
                redirect_url=settings.openid_redirect_url,
                enabled=settings.openid_enabled,
                headless=settings.openid_headless,
                timeout=settings.openid_timeout,
            ),
        ]
    )


__all__ = [
    "Strategy",
    "StrategySet",
    "EmailCodeStrategy",
    "TOTPStrategy",
    "OpenIDStrategy",
    "PlatformWebAuthnStrategy",
    "PortableWebAuthnStrategy",
    "default_strategies",
]
