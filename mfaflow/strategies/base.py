"""Strategy plug-in surface and the dispatch table over auth types."""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Dict, Iterable, Mapping, Optional, Tuple

from ..errors import StrategyConfigurationError
from ..models import AuthType, FlowContext, PrepareResult

PrepareFn = Callable[[Mapping[str, Any], FlowContext], PrepareResult]


class Strategy:
    """Turns a server-issued challenge into a client response for one auth type.

    Subclasses implement ``prepare_registration`` and/or
    ``prepare_authentication`` with the signature ``(data, context)``. An
    operation a backend cannot perform is left undefined so that capability
    checks stay authoritative.
    """

    auth_type: ClassVar[AuthType]

    def is_available(self) -> bool:
        return True


class StrategySet:
    """Total mapping from every ``AuthType`` to exactly one strategy."""

    def __init__(
        self,
        strategies: Iterable[Strategy],
        required: Tuple[AuthType, ...] = tuple(AuthType),
    ) -> None:
        table: Dict[AuthType, Strategy] = {}
        for strategy in strategies:
            auth_type = getattr(strategy, "auth_type", None)
            if not isinstance(auth_type, AuthType):
                raise StrategyConfigurationError(
                    f"{type(strategy).__name__} does not declare an auth type"
                )
            if auth_type in table:
                raise StrategyConfigurationError(
                    f"Duplicate strategy for {auth_type.value}: "
                    f"{type(table[auth_type]).__name__} and {type(strategy).__name__}"
                )
            table[auth_type] = strategy
        missing = [t.value for t in required if t not in table]
        if missing:
            raise StrategyConfigurationError(f"No strategy registered for: {', '.join(missing)}")
        self._table = table

    def __contains__(self, auth_type: object) -> bool:
        return auth_type in self._table

    def get(self, auth_type: AuthType) -> Strategy:
        try:
            return self._table[auth_type]
        except KeyError:
            raise LookupError(f"No strategy registered for {auth_type!r}") from None

    def registration(self, auth_type: AuthType) -> Optional[PrepareFn]:
        return getattr(self.get(auth_type), "prepare_registration", None)

    def authentication(self, auth_type: AuthType) -> Optional[PrepareFn]:
        return getattr(self.get(auth_type), "prepare_authentication", None)
