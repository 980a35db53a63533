# taskguard/security/principal.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Header

from taskguard.errors import ErrorCode, raise_error


@dataclass(frozen=True)
class Principal:
    """
    Already-authenticated identity attached to a request.
    The claim is trusted verbatim; no signature or expiry checks happen here.
    """

    id: int
    role_name: Optional[str]
    organization_id: Optional[int]


def _parse_int_header(name: str, value: Optional[str], *, required: bool) -> Optional[int]:
    s = (value or "").strip()
    if not s:
        if required:
            raise_error(ErrorCode.AUTH_UNAUTHORIZED_NO_USER)
        return None
    try:
        return int(s)
    except ValueError:
        raise_error(ErrorCode.AUTH_UNAUTHORIZED_BAD_CLAIM, extra={"header": name})


def get_principal(
    x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
    x_user_role: Optional[str] = Header(default=None, alias="X-User-Role"),
    x_org_id: Optional[str] = Header(default=None, alias="X-Org-Id"),
) -> Principal:
    uid = _parse_int_header("X-User-Id", x_user_id, required=True)
    org_id = _parse_int_header("X-Org-Id", x_org_id, required=False)
    role = (x_user_role or "").strip() or None
    return Principal(id=int(uid), role_name=role, organization_id=org_id)
