"""Code-entry strategies backed by the interactive prompt."""

from __future__ import annotations

from typing import Any, Mapping

import pyotp

from ..models import ABANDONED, AuthType, FlowContext, PrepareResult
from ..prompt import Prompt, PromptOptions
from .base import Strategy

CODE_INPUT = dict(placeholder="Enter Verification Code", input_kind="number", pattern="[0-9]*")


def _code_response(answer: str | None) -> PrepareResult:
    return {"code": answer} if answer else ABANDONED


class EmailCodeStrategy(Strategy):
    auth_type = AuthType.EMAIL_CODE

    def __init__(self, prompt: Prompt) -> None:
        self.prompt = prompt

    def prepare_registration(self, data: Mapping[str, Any], context: FlowContext) -> PrepareResult:
        return self._ask("Add MFA-Method")

    def prepare_authentication(self, data: Mapping[str, Any], context: FlowContext) -> PrepareResult:
        return self._ask("Email Authentication")

    def _ask(self, title: str) -> PrepareResult:
        answer = self.prompt.ask(
            "Please enter the confirmation code sent to your email address to proceed!",
            PromptOptions(title=title, **CODE_INPUT),
        )
        return _code_response(answer)


class TOTPStrategy(Strategy):
    auth_type = AuthType.TOTP

    def __init__(self, prompt: Prompt, issuer: str = "mfaflow") -> None:
        self.prompt = prompt
        self.issuer = issuer

    def provisioning_uri(self, secret: str, account: str) -> str:
        return pyotp.TOTP(secret).provisioning_uri(name=account, issuer_name=self.issuer)

    def prepare_registration(self, data: Mapping[str, Any], context: FlowContext) -> PrepareResult:
        secret = str(data.get("secret", ""))
        url = self.provisioning_uri(secret, context.email or "")
        message = (
            "Please scan the following qr-code in your authenticator app, "
            "then enter the displayed code to confirm!\n"
            f"{url}\n"
            f"Secret: {secret}"
        )
        answer = self.prompt.ask(message, PromptOptions(title="Add MFA-Method", **CODE_INPUT))
        return _code_response(answer)

    def prepare_authentication(self, data: Mapping[str, Any], context: FlowContext) -> PrepareResult:
        answer = self.prompt.ask(
            "Please enter the code displayed in your authenticator app to proceed!",
            PromptOptions(title="TOTP Authentication", **CODE_INPUT),
        )
        return _code_response(answer)
