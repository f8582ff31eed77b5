from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import sys

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mfaflow.capabilities import CapabilityRegistry
from mfaflow.config import MFASettings
from mfaflow.models import (
    AuthType,
    PendingAuthRequest,
    PendingRegistration,
    StartAuthRequestParams,
    StartRegistrationParams,
)
from mfaflow.prompt import PromptOptions
from mfaflow.strategies.base import Strategy, StrategySet


class FakeAuthority:
    """Records every call; methods listed in ``fail`` raise the given error."""

    def __init__(
        self,
        registration_id: str = "abc",
        registration_data: Optional[dict] = None,
        request_id: str = "req-1",
        default_type: AuthType = AuthType.EMAIL_CODE,
        auth_data: Optional[dict] = None,
        token: str = "token-123",
    ) -> None:
        self.registration_id = registration_id
        self.registration_data = registration_data or {}
        self.request_id = request_id
        self.default_type = default_type
        self.auth_data = auth_data or {}
        self.token = token
        self.fail: Dict[str, BaseException] = {}
        self.calls: List[Tuple[str, tuple]] = []

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if name in self.fail:
            raise self.fail[name]

    def named(self, name: str) -> List[tuple]:
        return [args for call, args in self.calls if call == name]

    def start_registration(self, params: StartRegistrationParams) -> PendingRegistration:
        self._record("start_registration", params)
        return PendingRegistration(
            id=self.registration_id,
            type=params.type,
            purposes=params.purposes,
            data=self.registration_data,
        )

    def complete_registration(self, authenticator_id: str, data) -> None:
        self._record("complete_registration", authenticator_id, data)

    def delete_authenticator(self, authenticator_id: str) -> None:
        self._record("delete_authenticator", authenticator_id)

    def start_auth_request(self, params: StartAuthRequestParams) -> PendingAuthRequest:
        self._record("start_auth_request", params)
        return PendingAuthRequest(
            id=self.request_id,
            type=params.type or self.default_type,
            purpose=params.purpose,
            data=self.auth_data,
            email=params.email,
        )

    def complete_auth_request(self, request_id: str, data, email=None) -> str:
        self._record("complete_auth_request", request_id, data, email)
        return self.token


class ScriptedPrompt:
    """Answers prompts from a fixed script; ``None`` means the user canceled."""

    def __init__(self, answers: List[Optional[str]]) -> None:
        self.answers = list(answers)
        self.asked: List[Tuple[str, PromptOptions]] = []

    def ask(self, message: str, options: PromptOptions) -> Optional[str]:
        self.asked.append((message, options))
        return self.answers.pop(0)


class StubStrategy(Strategy):
    def __init__(self, auth_type: AuthType, result: Any = None, available: bool = True) -> None:
        self.auth_type = auth_type
        self.result = {"code": "000000"} if result is None else result
        self.available = available
        self.seen: List[tuple] = []

    def is_available(self) -> bool:
        return self.available

    def _outcome(self):
        if isinstance(self.result, BaseException):
            raise self.result
        return self.result

    def prepare_registration(self, data, context):
        self.seen.append(("register", data, context))
        return self._outcome()

    def prepare_authentication(self, data, context):
        self.seen.append(("authn", data, context))
        return self._outcome()


class AuthenticationOnlyStrategy(StubStrategy):
    prepare_registration = None


def make_strategies(**overrides: Strategy) -> StrategySet:
    """Stub strategy for every type, with overrides keyed by ``AuthType`` name."""
    table = {auth_type: StubStrategy(auth_type) for auth_type in AuthType}
    for name, strategy in overrides.items():
        table[AuthType[name]] = strategy
    return StrategySet(table.values())


@pytest.fixture(autouse=True)
def fake_keyring(monkeypatch):
    storage: Dict[Tuple[str, str], str] = {}

    def set_password(service: str, username: str, password: str) -> None:
        storage[(service, username)] = password

    def get_password(service: str, username: str) -> str | None:
        return storage.get((service, username))

    def delete_password(service: str, username: str) -> None:
        storage.pop((service, username), None)

    monkeypatch.setattr("mfaflow.webauthn.store.keyring.set_password", set_password)
    monkeypatch.setattr("mfaflow.webauthn.store.keyring.get_password", get_password)
    monkeypatch.setattr("mfaflow.webauthn.store.keyring.delete_password", delete_password)
    yield storage


@pytest.fixture
def temp_settings(tmp_path: Path) -> MFASettings:
    return MFASettings(
        authority_url="http://authority.test",
        keyring_service="test-service",
        credential_index_path=str(tmp_path / "index.json"),
        origin="https://example.com",
        user_verification="none",
    )


@pytest.fixture
def authority() -> FakeAuthority:
    return FakeAuthority()


@pytest.fixture
def strategies() -> StrategySet:
    return make_strategies()


@pytest.fixture
def capabilities(strategies: StrategySet) -> CapabilityRegistry:
    return CapabilityRegistry(strategies)
