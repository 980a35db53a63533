# taskguard/security/roles.py

from __future__ import annotations

from typing import Callable, Iterable, Optional, Sequence

from fastapi import Depends

from taskguard.errors import ErrorCode, raise_error
from taskguard.security.principal import Principal, get_principal

ROLE_VIEWER = "Viewer"
ROLE_ADMIN = "Admin"
ROLE_OWNER = "Owner"

# lowest -> highest
ROLE_HIERARCHY: Sequence[str] = (ROLE_VIEWER, ROLE_ADMIN, ROLE_OWNER)


def role_rank(role_name: Optional[str]) -> int:
    """Position in ROLE_HIERARCHY, -1 for unknown names."""
    try:
        return ROLE_HIERARCHY.index(str(role_name))
    except ValueError:
        return -1


def has_required_role(role_name: Optional[str], acceptable: Iterable[str]) -> bool:
    """
    Grant if the principal's rank reaches ANY of the acceptable roles.

    The effective threshold is therefore the lowest rank among `acceptable`:
    ("Owner", "Admin") behaves exactly like ("Admin",).
    An empty `acceptable` grants.
    """
    wanted = list(acceptable)
    if not wanted:
        return True
    rank = role_rank(role_name)
    return any(rank >= role_rank(r) for r in wanted)


def ensure_role(principal: Optional[Principal], acceptable: Iterable[str]) -> Optional[Principal]:
    wanted = list(acceptable)
    if not wanted:
        return principal
    if principal is None or not principal.role_name:
        raise_error(ErrorCode.AUTH_UNAUTHORIZED_NO_ROLE)
    if not has_required_role(principal.role_name, wanted):
        raise_error(
            ErrorCode.AUTH_FORBIDDEN_ROLE,
            extra={"role": principal.role_name, "required_roles": wanted},
        )
    return principal


def require_roles(*roles: str) -> Callable[..., Principal]:
    """FastAPI dependency: resolves the principal and applies the role check."""

    def _dep(principal: Principal = Depends(get_principal)) -> Principal:
        return ensure_role(principal, roles)

    return _dep
