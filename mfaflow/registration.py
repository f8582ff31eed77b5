"""Registration flow: start, prepare, complete, with rollback of pending records."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Optional

from .authority import AuthorityClient
from .capabilities import CapabilityRegistry
from .config import MFASettings
from .errors import AuthenticationFailed, NotSupported
from .events import log_event, new_request_id
from .models import (
    AuthPurpose,
    AuthType,
    DeviceInfo,
    FlowContext,
    PendingRegistration,
    StartRegistrationParams,
    is_abandoned,
)
from .strategies.base import StrategySet

SETUP_CANCELED = "Setup Canceled"


class RegistrationState(str, Enum):
    IDLE = "idle"
    STARTED = "started"
    PREPARED = "prepared"
    COMPLETED = "completed"
    ROLLED_BACK = "rolled_back"


class RegistrationOrchestrator:
    """Adds a new authenticator with the remote authority.

    Once the authority has provisioned a pending authenticator, the flow
    ends either completed or with a delete attempted for that id.
    Callers must not run two flows for the same pending id at once.
    """

    def __init__(
        self,
        authority: AuthorityClient,
        strategies: StrategySet,
        capabilities: CapabilityRegistry,
        settings: Optional[MFASettings] = None,
    ) -> None:
        self.authority = authority
        self.strategies = strategies
        self.capabilities = capabilities
        self.settings = settings or MFASettings()

    def register(
        self,
        auth_type: AuthType,
        purposes: Iterable[AuthPurpose],
        *,
        data: Optional[Dict[str, Any]] = None,
        device: Optional[DeviceInfo] = None,
        email: Optional[str] = None,
    ) -> str:
        req_id = new_request_id()
        if not self.capabilities.supports_registration(auth_type):
            log_event("register", "unsupported", req_id, logging.WARNING, type=auth_type)
            raise NotSupported()
        params = StartRegistrationParams(
            type=auth_type, purposes=list(purposes), data=data or {}, device=device
        )

        log_event("register", "start", req_id, type=auth_type, purposes=params.purposes)
        pending = self.authority.start_registration(params)
        log_event(
            "register",
            "started",
            req_id,
            authenticator_id=pending.id,
            type=pending.type,
            state=RegistrationState.STARTED,
        )

        with self._provisional(pending, req_id):
            prepare = self.strategies.registration(pending.type)
            if prepare is None or not self.capabilities.supports_registration(pending.type):
                raise NotSupported()
            response = prepare(pending.data, FlowContext(email=email, device=device))
            if is_abandoned(response):
                log_event(
                    "register", "canceled", req_id, logging.WARNING, authenticator_id=pending.id
                )
                raise AuthenticationFailed(SETUP_CANCELED)
            log_event(
                "register",
                "prepared",
                req_id,
                authenticator_id=pending.id,
                state=RegistrationState.PREPARED,
            )
            self.authority.complete_registration(pending.id, response)

        log_event(
            "register",
            "success",
            req_id,
            authenticator_id=pending.id,
            type=pending.type,
            state=RegistrationState.COMPLETED,
        )
        return pending.id

    # Helpers -----------------------------------------------------------
    @contextmanager
    def _provisional(self, pending: PendingRegistration, req_id: str) -> Iterator[PendingRegistration]:
        """Holds the pending record; any exit other than success deletes it."""
        try:
            yield pending
        except BaseException as exc:
            # Interrupts leave a pending record behind just like errors do.
            self._rollback(pending, exc, req_id)
            raise

    def _rollback(self, pending: PendingRegistration, cause: BaseException, req_id: str) -> None:
        log_event(
            "register",
            "rollback",
            req_id,
            authenticator_id=pending.id,
            cause=type(cause).__name__,
        )
        try:
            self.authority.delete_authenticator(pending.id)
        except Exception as exc:
            report = self.settings.orphan_policy == "report"
            log_event(
                "register",
                "rollback.failed",
                req_id,
                logging.ERROR if report else logging.WARNING,
                authenticator_id=pending.id,
                error=str(exc),
                orphan_policy=self.settings.orphan_policy,
            )
            if report:
                cause.add_note(
                    f"Pending authenticator {pending.id} could not be deleted and may be orphaned: {exc}"
                )
            return
        log_event(
            "register",
            "rollback",
            req_id,
            level=logging.DEBUG,
            authenticator_id=pending.id,
            state=RegistrationState.ROLLED_BACK,
        )
