"""
Authorization guards for ledger operations.

Guards wrap an operation whose first argument (after self) is the calling
identity. The role check runs before the operation body, so a rejected
caller never reaches any state mutation. Rejections are counted and
re-raised unchanged.

Usage:
    class CredentialLedger:
        @issuer_only
        def issue_credential(self, caller, subject, vaccine_type, payload): ...
"""

from __future__ import annotations

import functools
import logging
from typing import TYPE_CHECKING, Any, Callable, TypeVar

from vax_ledger.errors import LedgerError

if TYPE_CHECKING:
    from vax_ledger.access import AccessControlRegistry

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

Check = Callable[["AccessControlRegistry", str], str]
RegistryOf = Callable[[Any], "AccessControlRegistry"]


def guarded(check: Check, registry: RegistryOf) -> Callable[[F], F]:
    """
    Build a decorator that runs `check(registry(self), caller)` first.

    Args:
        check: Role predicate; returns the normalized caller or raises
        registry: Resolves the AccessControlRegistry from the decorated
            method's instance

    The wrapped operation receives the normalized caller.
    """
    def decorator(func: F) -> F:
        name = func.__name__

        @functools.wraps(func)
        def wrapper(self, caller: str, *args: Any, **kwargs: Any) -> Any:
            access = registry(self)
            try:
                caller = check(access, caller)
                result = func(self, caller, *args, **kwargs)
            except LedgerError as e:
                access.metrics.rejected(name, e)
                logger.debug(f"{name} rejected: {e}")
                raise
            access.metrics.succeeded(name)
            return result

        return wrapper  # type: ignore[return-value]

    return decorator


# Role management lives on the registry itself
administrator_only = guarded(
    lambda access, caller: access.require_administrator(caller),
    registry=lambda registry: registry,
)

# Ledger components hold their registry as `.access`
issuer_only = guarded(
    lambda access, caller: access.require_issuer(caller),
    registry=lambda component: component.access,
)
