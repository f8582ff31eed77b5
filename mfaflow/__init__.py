"""Authenticator orchestration for multi-factor registration and authentication."""

from .authentication import AuthenticationOrchestrator
from .authority import AuthorityClient, HttpAuthorityClient
from .capabilities import CapabilityRegistry
from .client import MFAClient
from .config import MFASettings
from .errors import (
    AuthenticationFailed,
    MFAError,
    NotSupported,
    RemoteUnavailable,
    StrategyConfigurationError,
)
from .models import ABANDONED, AuthPurpose, AuthType, DeviceInfo, FlowContext
from .prompt import ConsolePrompt, Prompt, PromptOptions
from .registration import RegistrationOrchestrator
from .strategies import Strategy, StrategySet, default_strategies

__all__ = [
    "ABANDONED",
    "AuthPurpose",
    "AuthType",
    "AuthenticationFailed",
    "AuthenticationOrchestrator",
    "AuthorityClient",
    "CapabilityRegistry",
    "ConsolePrompt",
    "DeviceInfo",
    "FlowContext",
    "HttpAuthorityClient",
    "MFAClient",
    "MFAError",
    "MFASettings",
    "NotSupported",
    "Prompt",
    "PromptOptions",
    "RegistrationOrchestrator",
    "RemoteUnavailable",
    "Strategy",
    "StrategyConfigurationError",
    "StrategySet",
    "default_strategies",
]
