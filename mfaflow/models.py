"""Value types shared by the orchestrators, strategies and authority client."""

from __future__ import annotations

import locale
import platform
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AuthType(str, Enum):
    PLATFORM_BIOMETRIC = "webauthn_platform"
    PORTABLE_SECURITY_KEY = "webauthn_portable"
    EMAIL_CODE = "email"
    TOTP = "totp"
    FEDERATED_OPENID = "openid"


class AuthPurpose(str, Enum):
    SIGNUP = "signup"
    LOGIN = "login"
    RECOVER = "recover"
    GET_MFA_CODE = "get_mfa_code"
    ACCESS_KEY_STORE = "access_key_store"
    TEST_AUTHENTICATOR = "test_authenticator"
    ADMIN_LOGIN = "admin_login"


class Abandoned(Enum):
    """Marker returned by a strategy when the user walks away from a ceremony."""

    ABANDONED = "abandoned"


ABANDONED = Abandoned.ABANDONED

ClientResponseData = Mapping[str, Any]
PrepareResult = Union[ClientResponseData, Abandoned, None]
CapabilityReport = Dict[AuthType, bool]


def is_abandoned(result: PrepareResult) -> bool:
    return result is ABANDONED or not result


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DeviceInfo(WireModel):
    platform: str = ""
    os_version: str = ""
    id: str = ""
    app_version: str = ""
    manufacturer: str = ""
    model: str = ""
    browser: str = ""
    user_agent: str = ""
    locale: str = "en"
    description: str = ""

    @classmethod
    def current(cls, app_version: str = "") -> "DeviceInfo":
        system = platform.system().replace(" ", "")
        lang = locale.getlocale()[0] or "en"
        return cls(
            platform=system,
            os_version=platform.release().replace(" ", ""),
            app_version=app_version,
            model=platform.machine(),
            locale=lang.replace("_", "-"),
            description=f"{system or 'Unknown'} Device",
        )


@dataclass(frozen=True)
class FlowContext:
    """Explicit per-call context handed to strategies."""

    email: Optional[str] = None
    device: Optional[DeviceInfo] = None


class StartRegistrationParams(WireModel):
    type: AuthType
    purposes: List[AuthPurpose] = Field(min_length=1)
    data: Dict[str, Any] = Field(default_factory=dict)
    device: Optional[DeviceInfo] = None


class CompleteRegistrationParams(WireModel):
    id: str
    data: Dict[str, Any]


class StartAuthRequestParams(WireModel):
    purpose: AuthPurpose
    type: Optional[AuthType] = None
    email: Optional[str] = None
    authenticator_id: Optional[str] = None
    authenticator_index: Optional[int] = None


class CompleteAuthRequestParams(WireModel):
    id: str
    data: Dict[str, Any]
    email: Optional[str] = None


class PendingRegistration(WireModel):
    """Authority-owned pending authenticator, held only for one flow."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: AuthType
    purposes: List[AuthPurpose] = Field(default_factory=list)
    data: Dict[str, Any] = Field(default_factory=dict)


class PendingAuthRequest(WireModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: AuthType
    purpose: Optional[AuthPurpose] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    email: Optional[str] = None
