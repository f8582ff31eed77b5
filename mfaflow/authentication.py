"""Authentication flow: satisfy a pending challenge and obtain a token."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from .authority import AuthorityClient
from .capabilities import CapabilityRegistry
from .errors import AuthenticationFailed, NotSupported
from .events import log_event, new_request_id
from .models import (
    AuthPurpose,
    AuthType,
    DeviceInfo,
    FlowContext,
    StartAuthRequestParams,
    is_abandoned,
)
from .strategies.base import StrategySet

REQUEST_CANCELED = "Request was canceled."


class AuthenticationState(str, Enum):
    IDLE = "idle"
    STARTED = "started"
    PREPARED = "prepared"
    COMPLETED = "completed"
    CANCELED = "canceled"


class AuthenticationOrchestrator:
    """Obtains an auth token for an existing (or authority-chosen) authenticator.

    An auth request provisions nothing durable, so failures never trigger a
    delete on the authority. Expired or rejected challenges are not retried;
    callers start a new flow to get a fresh challenge.
    """

    def __init__(
        self,
        authority: AuthorityClient,
        strategies: StrategySet,
        capabilities: CapabilityRegistry,
    ) -> None:
        self.authority = authority
        self.strategies = strategies
        self.capabilities = capabilities

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
        req_id = new_request_id()
        if auth_type is not None and not self.capabilities.supports_authentication(auth_type):
            log_event("authn", "unsupported", req_id, logging.WARNING, type=auth_type)
            raise NotSupported()

        params = StartAuthRequestParams(
            purpose=purpose,
            type=auth_type,
            email=email,
            authenticator_id=authenticator_id,
            authenticator_index=authenticator_index,
        )
        log_event("authn", "start", req_id, purpose=purpose, type=auth_type, email=email)
        request = self.authority.start_auth_request(params)
        log_event(
            "authn",
            "started",
            req_id,
            auth_request_id=request.id,
            type=request.type,
            state=AuthenticationState.STARTED,
        )

        prepare = self.strategies.authentication(request.type)
        if prepare is None or not self.capabilities.supports_authentication(request.type):
            log_event("authn", "unsupported", req_id, logging.WARNING, type=request.type)
            raise NotSupported()

        response = prepare(request.data, FlowContext(email=email, device=device))
        if is_abandoned(response):
            log_event(
                "authn",
                "canceled",
                req_id,
                logging.WARNING,
                auth_request_id=request.id,
                state=AuthenticationState.CANCELED,
            )
            raise AuthenticationFailed(REQUEST_CANCELED)
        log_event(
            "authn", "prepared", req_id, auth_request_id=request.id, state=AuthenticationState.PREPARED
        )

        try:
            token = self.authority.complete_auth_request(request.id, response, email)
        except AuthenticationFailed as exc:
            log_event(
                "authn", "failed", req_id, logging.WARNING, auth_request_id=request.id, error=exc.message
            )
            raise
        log_event(
            "authn", "success", req_id, auth_request_id=request.id, state=AuthenticationState.COMPLETED
        )
        return token
