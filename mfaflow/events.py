"""Staged log records for orchestration flows."""

from __future__ import annotations

import json
import logging
import secrets
from enum import Enum

LOGGER = logging.getLogger("mfaflow")

STAGE_LABELS = {"register": "Register", "authn": "Authenticate"}
EVENT_LABELS = {
    ("register", "start"): "Starting authenticator registration",
    ("register", "started"): "Pending authenticator provisioned",
    ("register", "prepared"): "Registration ceremony finished",
    ("register", "canceled"): "Registration canceled by user",
    ("register", "success"): "Authenticator registered",
    ("register", "rollback"): "Rolling back pending authenticator",
    ("register", "rollback.failed"): "Rollback of pending authenticator failed",
    ("register", "unsupported"): "Authenticator type not supported on this device",
    ("authn", "start"): "Starting authentication request",
    ("authn", "started"): "Authentication challenge issued",
    ("authn", "prepared"): "Authentication ceremony finished",
    ("authn", "canceled"): "Authentication canceled by user",
    ("authn", "success"): "Authentication token issued",
    ("authn", "failed"): "Authentication request failed",
    ("authn", "unsupported"): "Authenticator type not supported on this device",
}


def new_request_id() -> str:
    return secrets.token_hex(4)


def _truncate(value: str, limit: int = 64) -> str:
    if len(value) <= limit:
        return value
    half = limit // 2
    return f"{value[:half]}…{value[-half:]}"


def _build_payload(req: str, **fields: object) -> dict[str, object]:
    payload: dict[str, object] = {"request_id": req}
    for key, value in fields.items():
        if value is None:
            continue
        if isinstance(value, Enum):
            value = value.value
        if isinstance(value, str):
            payload[key] = _truncate(value)
        elif isinstance(value, (list, tuple)):
            payload[key] = [item.value if isinstance(item, Enum) else item for item in value]
        else:
            payload[key] = value
    return payload


def log_event(
    stage: str,
    event: str,
    req: str,
    level: int = logging.INFO,
    logger: logging.Logger = LOGGER,
    **fields: object,
) -> None:
    stage_label = STAGE_LABELS.get(stage, stage.title())
    event_label = EVENT_LABELS.get((stage, event), event)
    payload = json.dumps(_build_payload(req, **fields), indent=2, sort_keys=True, default=str)
    logger.log(level, f"[mfaflow: {stage_label}]: {event_label}\n{payload}")
