from __future__ import annotations

import pytest

from conftest import AuthenticationOnlyStrategy, StubStrategy, make_strategies
from mfaflow.capabilities import CapabilityRegistry
from mfaflow.errors import StrategyConfigurationError
from mfaflow.models import AuthType
from mfaflow.strategies.base import Strategy, StrategySet


def test_strategy_set_requires_every_type():
    partial = [StubStrategy(t) for t in AuthType if t is not AuthType.FEDERATED_OPENID]

    with pytest.raises(StrategyConfigurationError, match="openid"):
        StrategySet(partial)


def test_strategy_set_rejects_duplicates():
    strategies = [StubStrategy(t) for t in AuthType] + [StubStrategy(AuthType.TOTP)]

    with pytest.raises(StrategyConfigurationError, match="Duplicate"):
        StrategySet(strategies)


def test_strategy_set_rejects_strategy_without_type():
    with pytest.raises(StrategyConfigurationError):
        StrategySet([Strategy()], required=())


def test_lookup_of_unregistered_type_is_programming_error():
    strategies = StrategySet([StubStrategy(AuthType.TOTP)], required=(AuthType.TOTP,))

    with pytest.raises(LookupError):
        strategies.get(AuthType.EMAIL_CODE)


def test_registry_reports_device_capabilities():
    strategies = make_strategies(
        PORTABLE_SECURITY_KEY=StubStrategy(AuthType.PORTABLE_SECURITY_KEY, available=False),
        FEDERATED_OPENID=AuthenticationOnlyStrategy(AuthType.FEDERATED_OPENID),
    )
    registry = CapabilityRegistry(strategies)

    assert registry.supports(AuthType.EMAIL_CODE)
    assert not registry.supports(AuthType.PORTABLE_SECURITY_KEY)
    assert registry.supports(AuthType.FEDERATED_OPENID)
    assert not registry.supports_registration(AuthType.FEDERATED_OPENID)
    assert registry.supports_authentication(AuthType.FEDERATED_OPENID)
    assert registry.report() == {
        AuthType.PLATFORM_BIOMETRIC: True,
        AuthType.PORTABLE_SECURITY_KEY: False,
        AuthType.EMAIL_CODE: True,
        AuthType.TOTP: True,
        AuthType.FEDERATED_OPENID: True,
    }


def test_registry_is_recomputed_on_every_call():
    key = StubStrategy(AuthType.PORTABLE_SECURITY_KEY)
    registry = CapabilityRegistry(make_strategies(PORTABLE_SECURITY_KEY=key))

    assert registry.supports(AuthType.PORTABLE_SECURITY_KEY)
    key.available = False
    assert not registry.supports(AuthType.PORTABLE_SECURITY_KEY)
    assert registry.report()[AuthType.PORTABLE_SECURITY_KEY] is False


def test_failing_probe_counts_as_unsupported():
    class BrokenProbe(StubStrategy):
        def is_available(self) -> bool:
            raise OSError("hid access denied")

    registry = CapabilityRegistry(
        make_strategies(PORTABLE_SECURITY_KEY=BrokenProbe(AuthType.PORTABLE_SECURITY_KEY))
    )
    assert registry.supports(AuthType.PORTABLE_SECURITY_KEY) is False


def test_platform_auth_type():
    platform = StubStrategy(AuthType.PLATFORM_BIOMETRIC)
    registry = CapabilityRegistry(make_strategies(PLATFORM_BIOMETRIC=platform))

    assert registry.platform_auth_type() is AuthType.PLATFORM_BIOMETRIC
    platform.available = False
    assert registry.platform_auth_type() is None
    assert CapabilityRegistry(make_strategies(), platform_type=None).platform_auth_type() is None
