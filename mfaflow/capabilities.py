"""Device capability checks over the registered strategies."""

from __future__ import annotations

import logging
from typing import Optional

from .models import AuthType, CapabilityReport
from .strategies.base import StrategySet

LOGGER = logging.getLogger(__name__)


class CapabilityRegistry:
    """Reports which auth types this device can act as.

    Every answer is computed from the current device state; nothing is
    cached because capabilities can change between calls (a key unplugged,
    a permission revoked).
    """

    def __init__(
        self,
        strategies: StrategySet,
        platform_type: Optional[AuthType] = AuthType.PLATFORM_BIOMETRIC,
    ) -> None:
        self.strategies = strategies
        self.platform_type = platform_type

    def _available(self, auth_type: AuthType) -> bool:
        if auth_type not in self.strategies:
            return False
        try:
            return bool(self.strategies.get(auth_type).is_available())
        except Exception as exc:
            LOGGER.warning("Capability probe for %s failed: %s", auth_type.value, exc)
            return False

    def supports_registration(self, auth_type: AuthType) -> bool:
        return self._available(auth_type) and self.strategies.registration(auth_type) is not None

    def supports_authentication(self, auth_type: AuthType) -> bool:
        return self._available(auth_type) and self.strategies.authentication(auth_type) is not None

    def supports(self, auth_type: AuthType) -> bool:
        return self.supports_registration(auth_type) or self.supports_authentication(auth_type)

    def platform_auth_type(self) -> Optional[AuthType]:
        if self.platform_type is None or not self.supports_registration(self.platform_type):
            return None
        return self.platform_type

    def report(self) -> CapabilityReport:
        return {auth_type: self.supports(auth_type) for auth_type in AuthType}
