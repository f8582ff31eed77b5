"""Portable security keys over CTAP2/USB HID using python-fido2."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, Iterable, Optional

from fido2.ctap import CtapError
from fido2.ctap2 import Ctap2
from fido2.hid import CtapHidDevice

from .authdata import attestation_object
from .options import (
    ClientData,
    CreationOptions,
    RequestOptions,
    assertion_credential,
    attestation_credential,
    b64url_decode,
)

LOGGER = logging.getLogger(__name__)

ATTACHMENT = "cross-platform"

# Errors a key reports when the user declines or never touches it.
DISMISSED = {
    CtapError.ERR.OPERATION_DENIED,
    CtapError.ERR.KEEPALIVE_CANCEL,
    CtapError.ERR.USER_ACTION_TIMEOUT,
}


class SecurityKeyDismissed(RuntimeError):
    pass


class SecurityKeyMissing(RuntimeError):
    pass


def is_dismissal(exc: CtapError) -> bool:
    return exc.code in DISMISSED


def _descriptors(items) -> list:
    return [{"type": "public-key", "id": b64url_decode(item.id)} for item in items]


class PortableAuthenticator:
    """Runs CTAP2 ceremonies on the first connected security key."""

    def __init__(
        self,
        origin: str,
        timeout: float = 60.0,
        list_devices: Callable[[], Iterable[Any]] = CtapHidDevice.list_devices,
    ) -> None:
        self.origin = origin
        self.timeout = timeout
        self._list_devices = list_devices

    def _device(self) -> Optional[Any]:
        return next(iter(self._list_devices()), None)

    def is_available(self) -> bool:
        return self._device() is not None

    def _ctap(self) -> Ctap2:
        device = self._device()
        if device is None:
            raise SecurityKeyMissing("No security key connected")
        return Ctap2(device)

    def _run(self, ceremony: Callable[[threading.Event], Any]) -> Any:
        cancel = threading.Event()
        timer = threading.Timer(self.timeout, cancel.set)
        timer.start()
        try:
            return ceremony(cancel)
        except CtapError as exc:
            if is_dismissal(exc):
                raise SecurityKeyDismissed(str(exc)) from exc
            raise
        finally:
            timer.cancel()

    def make_credential(self, options_data: Dict[str, Any]) -> Dict[str, Any]:
        options = CreationOptions.model_validate(options_data)
        client_data = ClientData("webauthn.create", options.challenge, self.origin)
        ctap = self._ctap()
        LOGGER.info("Touch your security key to register it with %s", options.rp.id)
        response = self._run(
            lambda cancel: ctap.make_credential(
                client_data.hash,
                {"id": options.rp.id, "name": options.rp.name or options.rp.id},
                {
                    "id": b64url_decode(options.user.id),
                    "name": options.user.name,
                    "displayName": options.user.displayName or options.user.name,
                },
                [{"type": "public-key", "alg": param.alg} for param in options.pubKeyCredParams],
                exclude_list=_descriptors(options.excludeCredentials) or None,
                event=cancel,
            )
        )
        auth_data = bytes(response.auth_data)
        return attestation_credential(
            response.auth_data.credential_data.credential_id,
            client_data,
            attestation_object(auth_data, response.fmt, response.att_stmt),
            auth_data,
            ATTACHMENT,
        )

    def get_assertion(self, options_data: Dict[str, Any]) -> Dict[str, Any]:
        options = RequestOptions.model_validate(options_data)
        client_data = ClientData("webauthn.get", options.challenge, self.origin)
        ctap = self._ctap()
        LOGGER.info("Touch your security key to sign in to %s", options.rpId)
        response = self._run(
            lambda cancel: ctap.get_assertion(
                options.rpId,
                client_data.hash,
                allow_list=_descriptors(options.allowCredentials) or None,
                event=cancel,
            )
        )
        user = response.user or {}
        return assertion_credential(
            response.credential["id"],
            client_data,
            bytes(response.auth_data),
            response.signature,
            user.get("id"),
            ATTACHMENT,
        )
