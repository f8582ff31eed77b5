"""User verification for the platform authenticator (Touch ID through pyobjc)."""

from __future__ import annotations

import logging
import sys
import time
from typing import Protocol

LOGGER = logging.getLogger(__name__)

# LAError codes meaning the user (or system on their behalf) dismissed the sheet.
LA_ERROR_USER_CANCEL = -2
LA_ERROR_SYSTEM_CANCEL = -4
LA_ERROR_APP_CANCEL = -9
CANCEL_CODES = {LA_ERROR_USER_CANCEL, LA_ERROR_SYSTEM_CANCEL, LA_ERROR_APP_CANCEL}


class UserVerificationError(RuntimeError):
    pass


class UserVerificationCanceled(UserVerificationError):
    pass


class UserVerifier(Protocol):
    def is_available(self) -> bool:
        ...

    def verify_user(self, prompt: str) -> bool:
        ...


class TouchIDVerifier:
    def __init__(self, timeout: int = 30) -> None:
        self.timeout = timeout

    @staticmethod
    def _context():
        try:
            from LocalAuthentication import (
                LAContext,
                LAPolicyDeviceOwnerAuthenticationWithBiometrics,
            )
        except ImportError as exc:
            raise UserVerificationError("Touch ID is unavailable on this platform.") from exc
        return LAContext.alloc().init(), LAPolicyDeviceOwnerAuthenticationWithBiometrics

    def is_available(self) -> bool:
        if sys.platform != "darwin":
            return False
        try:
            context, policy = self._context()
        except UserVerificationError:
            return False
        success, _error = context.canEvaluatePolicy_error_(policy, None)
        return bool(success)

    def verify_user(self, prompt: str) -> bool:
        context, policy = self._context()
        from Foundation import NSDate, NSRunLoop

        success, error = context.canEvaluatePolicy_error_(policy, None)
        if not success:
            raise UserVerificationError(f"Touch ID unavailable: {error}")

        outcome = {"done": False, "success": False, "error": None}

        def reply(result: bool, err) -> None:
            outcome["done"] = True
            outcome["success"] = bool(result)
            outcome["error"] = err

        context.evaluatePolicy_localizedReason_reply_(policy, prompt, reply)

        run_loop = NSRunLoop.currentRunLoop()
        deadline = time.time() + self.timeout
        while not outcome["done"] and time.time() < deadline:
            run_loop.runUntilDate_(NSDate.dateWithTimeIntervalSinceNow_(0.1))

        if not outcome["done"]:
            raise UserVerificationCanceled("Touch ID timed out")
        if outcome["success"]:
            return True
        err = outcome["error"]
        if err is not None and err.code() in CANCEL_CODES:
            raise UserVerificationCanceled("Touch ID canceled")
        raise UserVerificationError(f"Touch ID verification failed: {err}")


class NoopVerifier:
    """Verifier that always succeeds; used where no biometric hardware exists."""

    def is_available(self) -> bool:
        return True

    def verify_user(self, prompt: str) -> bool:
        LOGGER.info("Skipping user verification: NoopVerifier in use")
        return True


def build_verifier(mode: str, timeout: int = 30) -> UserVerifier:
    if mode == "touchid" or (mode == "auto" and sys.platform == "darwin"):
        return TouchIDVerifier(timeout=timeout)
    return NoopVerifier()
