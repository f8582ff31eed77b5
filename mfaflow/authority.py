"""Client for the remote authentication authority."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Protocol

import httpx
from pydantic import BaseModel, ValidationError

from .config import MFASettings
from .errors import AuthenticationFailed, ErrorCode, NotSupported, RemoteUnavailable
from .models import (
    CompleteAuthRequestParams,
    CompleteRegistrationParams,
    PendingAuthRequest,
    PendingRegistration,
    StartAuthRequestParams,
    StartRegistrationParams,
)

LOGGER = logging.getLogger(__name__)


class AuthorityClient(Protocol):
    def start_registration(self, params: StartRegistrationParams) -> PendingRegistration:
        ...

    def complete_registration(self, authenticator_id: str, data: Mapping[str, Any]) -> None:
        ...

    def delete_authenticator(self, authenticator_id: str) -> None:
        ...

    def start_auth_request(self, params: StartAuthRequestParams) -> PendingAuthRequest:
        ...

    def complete_auth_request(
        self,
        request_id: str,
        data: Mapping[str, Any],
        email: Optional[str] = None,
    ) -> str:
        ...


class AuthorityResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    code: Optional[str] = None
    data: Optional[dict] = None


class HttpAuthorityClient:
    """``AuthorityClient`` speaking JSON envelopes over HTTP."""

    def __init__(
        self,
        settings: Optional[MFASettings] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.settings = settings or MFASettings()
        self.http = client or httpx.Client(
            base_url=self.settings.authority_url,
            timeout=self.settings.request_timeout,
        )

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "HttpAuthorityClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    def start_registration(self, params: StartRegistrationParams) -> PendingRegistration:
        data = self._call("POST", "/authenticators/register/start", _dump(params))
        return self._parse(PendingRegistration, data)

    def complete_registration(self, authenticator_id: str, data: Mapping[str, Any]) -> None:
        params = CompleteRegistrationParams(id=authenticator_id, data=dict(data))
        self._call("POST", "/authenticators/register/complete", _dump(params))

    def delete_authenticator(self, authenticator_id: str) -> None:
        self._call("DELETE", f"/authenticators/{authenticator_id}")

    def start_auth_request(self, params: StartAuthRequestParams) -> PendingAuthRequest:
        data = self._call("POST", "/auth-requests/start", _dump(params))
        return self._parse(PendingAuthRequest, data)

    def complete_auth_request(
        self,
        request_id: str,
        data: Mapping[str, Any],
        email: Optional[str] = None,
    ) -> str:
        params = CompleteAuthRequestParams(id=request_id, data=dict(data), email=email)
        result = self._call("POST", "/auth-requests/complete", _dump(params))
        token = result.get("token")
        if not isinstance(token, str) or not token:
            raise RemoteUnavailable("Authority response did not include a token")
        return token

    # Helpers -----------------------------------------------------------
    def _call(self, method: str, path: str, payload: Optional[dict] = None) -> Dict[str, Any]:
        try:
            response = self.http.request(method, path, json=payload)
        except httpx.TransportError as exc:
            LOGGER.error("Authority request %s %s failed: %s", method, path, exc)
            raise RemoteUnavailable(f"Could not reach authentication authority: {exc}") from exc

        envelope = _envelope(response)
        if response.status_code >= 500:
            raise RemoteUnavailable(envelope.message or f"Authority error {response.status_code}")
        if response.status_code >= 400 or not envelope.success:
            message = envelope.message or f"Authority rejected request ({response.status_code})"
            if envelope.code == ErrorCode.NOT_SUPPORTED.value:
                raise NotSupported(message)
            raise AuthenticationFailed(message)
        return envelope.data or {}

    @staticmethod
    def _parse(model: type, data: Dict[str, Any]):
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise RemoteUnavailable(f"Malformed authority response: {exc.error_count()} errors") from exc


def _dump(params: BaseModel) -> dict:
    return params.model_dump(mode="json", by_alias=True, exclude_none=True)


def _envelope(response: httpx.Response) -> AuthorityResponse:
    if not response.content:
        return AuthorityResponse(success=response.is_success)
    try:
        return AuthorityResponse.model_validate(response.json())
    except (ValueError, ValidationError):
        return AuthorityResponse(success=response.is_success, message=response.text[:200] or None)
