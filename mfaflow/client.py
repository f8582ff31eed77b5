"""Facade bundling capability checks and both orchestration flows."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from .authentication import AuthenticationOrchestrator
from .authority import AuthorityClient, HttpAuthorityClient
from .capabilities import CapabilityRegistry
from .config import MFASettings
from .errors import NotSupported
from .models import AuthPurpose, AuthType, CapabilityReport, DeviceInfo
from .prompt import Prompt
from .registration import RegistrationOrchestrator
from .strategies import StrategySet, default_strategies


class MFAClient:
    """Entry point for registering authenticators and obtaining auth tokens.

    Account and device context is passed explicitly on each call rather
    than read from shared application state.
    """

    def __init__(
        self,
        settings: Optional[MFASettings] = None,
        authority: Optional[AuthorityClient] = None,
        strategies: Optional[StrategySet] = None,
        prompt: Optional[Prompt] = None,
    ) -> None:
        self.settings = settings or MFASettings()
        self._owns_authority = authority is None
        self.authority = authority or HttpAuthorityClient(self.settings)
        self.strategies = strategies or default_strategies(self.settings, prompt)
        self.capabilities = CapabilityRegistry(self.strategies, self.settings.platform_auth_type)
        self.registration = RegistrationOrchestrator(
            self.authority, self.strategies, self.capabilities, self.settings
        )
        self.authentication = AuthenticationOrchestrator(
            self.authority, self.strategies, self.capabilities
        )

    def close(self) -> None:
        """Closes the authority connection if this client created it."""
        if self._owns_authority:
            self.authority.close()

    def __enter__(self) -> "MFAClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # Capabilities ------------------------------------------------------
    def supports_auth_type(self, auth_type: AuthType) -> bool:
        return self.capabilities.supports(auth_type)

    def supports_platform_authenticator(self) -> bool:
        return self.capabilities.platform_auth_type() is not None

    def capability_report(self) -> CapabilityReport:
        return self.capabilities.report()

    # Flows -------------------------------------------------------------
    def register_authenticator(
        self,
        purposes: Iterable[AuthPurpose],
        auth_type: AuthType,
        *,
        data: Optional[Dict[str, Any]] = None,
        device: Optional[DeviceInfo] = None,
        email: Optional[str] = None,
    ) -> str:
        return self.registration.register(auth_type, purposes, data=data, device=device, email=email)

    def register_platform_authenticator(
        self,
        purposes: Iterable[AuthPurpose],
        *,
        device: Optional[DeviceInfo] = None,
        email: Optional[str] = None,
    ) -> str:
        platform_type = self.capabilities.platform_auth_type()
        if platform_type is None:
            raise NotSupported()
        return self.registration.register(
            platform_type,
            purposes,
            device=device or DeviceInfo.current(),
            email=email,
        )

    def get_auth_token(
        self,
        purpose: AuthPurpose,
        auth_type: Optional[AuthType] = None,
        *,
        email: Optional[str] = None,
        authenticator_id: Optional[str] = None,
        authenticator_index: Optional[int] = None,
        device: Optional[DeviceInfo] = None,
    ) -> str:
        return self.authentication.get_auth_token(
            purpose,
            auth_type,
            email=email,
            authenticator_id=authenticator_id,
            authenticator_index=authenticator_index,
            device=device,
        )
