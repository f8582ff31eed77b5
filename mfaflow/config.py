"""Configuration for the MFA orchestration engine."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import AuthType


class MFASettings(BaseSettings):
    """Runtime settings, overridable through ``MFAFLOW_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="MFAFLOW_")

    authority_url: str = Field(
        default="http://localhost:3000",
        description="Base URL of the remote authentication authority",
    )
    request_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for each call to the authority",
    )
    orphan_policy: Literal["expire", "report"] = Field(
        default="expire",
        description=(
            "What to assume when rolling back a pending registration fails: "
            "'expire' relies on the authority reaping it, 'report' flags the "
            "orphaned id on the raised error"
        ),
    )
    platform_auth_type: Optional[AuthType] = Field(
        default=AuthType.PLATFORM_BIOMETRIC,
        description="Ambient biometric type used for frictionless registration",
    )
    totp_issuer: str = Field(
        default="mfaflow",
        description="Issuer label embedded in TOTP provisioning URIs",
    )
    keyring_service: str = Field(
        default="mfaflow-platform-authenticator",
        description="Service name used for keychain entries of platform credentials",
    )
    credential_index_path: str = Field(
        default=str(Path("~/.mfaflow/credential_index.json").expanduser()),
        description="Path to the platform credential index used for lookups",
    )
    origin: str = Field(
        default="http://localhost:3000",
        description="Origin reported in WebAuthn client data",
    )
    user_verification: Literal["auto", "touchid", "none"] = Field(
        default="auto",
        description="User verification used by the platform authenticator",
    )
    touch_id_timeout: int = Field(default=30, description="Seconds to wait for Touch ID")
    portable_key_timeout: float = Field(
        default=60.0,
        description="Seconds to wait for a touch on a portable security key",
    )
    openid_enabled: bool = Field(
        default=True,
        description="Whether federated OpenID login may be used on this device",
    )
    openid_redirect_url: str = Field(
        default="http://localhost:3000/oauth/callback",
        description="Redirect URL the federated login returns to",
    )
    openid_headless: bool = Field(default=False, description="Run the login browser headless")
    openid_timeout: float = Field(
        default=300.0,
        description="Seconds to wait for the federated login to finish",
    )
