# taskguard/security/permissions.py

from __future__ import annotations

from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection

CREATE_TASK = "create_task"
EDIT_TASK = "edit_task"
DELETE_TASK = "delete_task"
VIEW_TASK = "view_task"

ALL_PERMISSIONS: FrozenSet[str] = frozenset({CREATE_TASK, EDIT_TASK, DELETE_TASK, VIEW_TASK})

# Seed contract for role -> permissions. Not derived from rank:
# Admin outranks Viewer yet e.g. delete_task is Owner-only.
SEED_ROLE_PERMISSIONS: Mapping[str, FrozenSet[str]] = {
    "Owner": ALL_PERMISSIONS,
    "Admin": ALL_PERMISSIONS - {DELETE_TASK},
    "Viewer": frozenset({VIEW_TASK}),
}


def load_role_permissions(conn: Connection, role_id: Optional[int]) -> FrozenSet[str]:
    if role_id is None:
        return frozenset()
    rows = conn.execute(
        text(
            """
            SELECT p.name
            FROM role_permissions rp
            JOIN permissions p ON p.id = rp.permission_id
            WHERE rp.role_id = :rid
            """
        ),
        {"rid": int(role_id)},
    ).all()
    return frozenset(str(r[0]) for r in rows)


def permission_granted(granted: Iterable[str], name: str) -> bool:
    return name in set(granted)


def has_permission(conn: Connection, user: Dict[str, Any], name: str) -> bool:
    """Load the user's role with its permission set and check membership."""
    return permission_granted(load_role_permissions(conn, user.get("role_id")), name)
