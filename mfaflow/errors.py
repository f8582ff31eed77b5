"""Error taxonomy shared by the orchestrators and backends."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    NOT_SUPPORTED = "not_supported"
    AUTHENTICATION_FAILED = "authentication_failed"
    REMOTE_UNAVAILABLE = "remote_unavailable"


class MFAError(RuntimeError):
    """Base class for failures surfaced to callers of a flow."""

    code: ErrorCode = ErrorCode.AUTHENTICATION_FAILED
    default_message = "Authentication failed"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotSupported(MFAError):
    code = ErrorCode.NOT_SUPPORTED
    default_message = "Authentication type not supported!"


class AuthenticationFailed(MFAError):
    """Cancellation, remote rejection or ceremony error; the message tells them apart."""

    code = ErrorCode.AUTHENTICATION_FAILED


class RemoteUnavailable(MFAError):
    code = ErrorCode.REMOTE_UNAVAILABLE
    default_message = "Authentication authority unavailable"


class StrategyConfigurationError(ValueError):
    """Raised when the strategy table does not cover every auth type exactly once."""
