"""
Access policy: which operations need a caller, and which roles may call them.

Each operation's requirements are plain data in ``POLICIES``; the API layer
looks an operation up by name and calls ``authorize`` before dispatching.
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass, field

from app.core.enums import UserRole
from app.core.exceptions import Forbidden, InvalidToken, Unauthenticated
from app.core.security import CallerIdentity


@dataclass(frozen=True)
class OperationPolicy:
    requires_auth: bool = True
    roles: frozenset[UserRole] = field(default_factory=frozenset)


def is_allowed(required_roles: Collection[UserRole], caller_role: UserRole | None) -> bool:
    """Pure role check; authentication is enforced separately."""
    if not required_roles:
        return True
    if caller_role is None:
        return False
    return caller_role in required_roles


def authorize(
    policy: OperationPolicy,
    caller: CallerIdentity | None,
    token_error: InvalidToken | None = None,
) -> CallerIdentity | None:
    """Apply *policy* to the resolved caller.

    The authentication gate runs before role evaluation, so an anonymous
    request to a role-gated operation is ``Unauthenticated``, not
    ``Forbidden``.
    """
    if policy.requires_auth and caller is None:
        raise Unauthenticated(token_error.detail if token_error else None)
    if not is_allowed(policy.roles, caller.role if caller else None):
        raise Forbidden()
    return caller


_PUBLIC = OperationPolicy(requires_auth=False)
_AUTHENTICATED = OperationPolicy()


def _roles(*roles: UserRole) -> OperationPolicy:
    return OperationPolicy(roles=frozenset(roles))


POLICIES: dict[str, OperationPolicy] = {
    "health": _PUBLIC,
    # Auth
    "auth.register": _PUBLIC,
    "auth.login": _PUBLIC,
    "auth.me": _AUTHENTICATED,
    # Users
    "users.list": _roles(UserRole.ADMIN, UserRole.DISPATCHER),
    "users.drivers": _roles(UserRole.ADMIN, UserRole.DISPATCHER),
    "users.get": _AUTHENTICATED,
    "users.create": _roles(UserRole.ADMIN),
    "users.update": _AUTHENTICATED,  # self-service, narrowed in UserService
    "users.delete": _roles(UserRole.ADMIN),
    # Shipments
    "shipments.create": _roles(UserRole.ADMIN, UserRole.DISPATCHER, UserRole.CUSTOMER),
    "shipments.list": _AUTHENTICATED,
    "shipments.get": _AUTHENTICATED,
    "shipments.track": _PUBLIC,
    "shipments.update": _roles(UserRole.ADMIN, UserRole.DISPATCHER),
    "shipments.remove": _roles(UserRole.ADMIN),
    "shipments.assign_driver": _roles(UserRole.ADMIN, UserRole.DISPATCHER),
    "shipments.flag": _roles(UserRole.ADMIN, UserRole.DISPATCHER),
}


def policy_for(operation: str) -> OperationPolicy:
    try:
        return POLICIES[operation]
    except KeyError:
        raise KeyError(f"No access policy declared for operation {operation!r}") from None
