# taskguard/services/tasks_repo.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection

from taskguard.db.schema import tasks as tasks_table
from taskguard.models import SORTABLE_COLUMNS

_TASK_COLUMNS = """
    t.id,
    t.title,
    t.description,
    t.category,
    t.status,
    t.sort_order,
    t.assigned_to_id,
    t.organization_id
"""

EDITABLE_FIELDS = ("title", "description", "category", "status")


# ---------------------------
# Users
# ---------------------------
def load_user(conn: Connection, user_id: int) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        text(
            """
            SELECT
                u.id,
                u.email,
                u.role_id,
                r.name AS role_name,
                u.organization_id,
                o.name AS organization_name,
                o.parent_id AS organization_parent_id
            FROM users u
            LEFT JOIN roles r ON r.id = u.role_id
            LEFT JOIN organizations o ON o.id = u.organization_id
            WHERE u.id = :uid
            """
        ),
        {"uid": int(user_id)},
    ).mappings().first()
    return dict(row) if row else None


# ---------------------------
# Tasks: reads
# ---------------------------
def load_task(conn: Connection, task_id: int) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        text(f"SELECT {_TASK_COLUMNS} FROM tasks t WHERE t.id = :tid"),
        {"tid": int(task_id)},
    ).mappings().first()
    return dict(row) if row else None


def find_tasks(
    conn: Connection,
    *,
    organization_id: Optional[int] = None,
    assigned_to_id: Optional[int] = None,
    category: Optional[str] = None,
    status: Optional[str] = None,
    sort: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Equality filters are AND-ed; sort is a single ascending field from SORTABLE_COLUMNS.
    Filters left as None are not applied.
    """
    where: List[str] = []
    params: Dict[str, Any] = {}

    if organization_id is not None:
        where.append("t.organization_id = :organization_id")
        params["organization_id"] = int(organization_id)

    if assigned_to_id is not None:
        where.append("t.assigned_to_id = :assigned_to_id")
        params["assigned_to_id"] = int(assigned_to_id)

    if category is not None:
        where.append("t.category = :category")
        params["category"] = category

    if status is not None:
        where.append("t.status = :status")
        params["status"] = status

    where_sql = " AND ".join(where) if where else "1=1"

    if sort is not None:
        column = SORTABLE_COLUMNS.get(sort)
        if column is None:
            raise ValueError(f"Unsupported sort field: {sort}")
        order_sql = f"t.{column} ASC"
    else:
        order_sql = "t.id ASC"

    rows = conn.execute(
        text(f"SELECT {_TASK_COLUMNS} FROM tasks t WHERE {where_sql} ORDER BY {order_sql}"),
        params,
    ).mappings().all()
    return [dict(r) for r in rows]


def find_org_or_assignee_scope(
    conn: Connection,
    *,
    organization_id: Optional[int],
    assigned_to_id: Optional[int],
) -> List[Dict[str, Any]]:
    """
    Scoped query without options: exactly one of organization_id / assigned_to_id is expected.
    NULL organization matches nothing.
    """
    if assigned_to_id is not None:
        cond = "t.assigned_to_id = :scope_id"
        scope_id: Optional[int] = int(assigned_to_id)
    else:
        cond = "t.organization_id = :scope_id"
        scope_id = int(organization_id) if organization_id is not None else None

    rows = conn.execute(
        text(f"SELECT {_TASK_COLUMNS} FROM tasks t WHERE {cond} ORDER BY t.id ASC"),
        {"scope_id": scope_id},
    ).mappings().all()
    return [dict(r) for r in rows]


# ---------------------------
# Tasks: writes
# ---------------------------
def shift_category_orders(conn: Connection, *, organization_id: Optional[int], category: str) -> int:
    """Bulk conditional update: sort_order + 1 for every task of (organization, category)."""
    res = conn.execute(
        text(
            """
            UPDATE tasks
            SET sort_order = sort_order + 1
            WHERE organization_id = :org_id AND category = :category
            """
        ),
        {"org_id": organization_id, "category": category},
    )
    return int(res.rowcount or 0)


def insert_task(conn: Connection, values: Dict[str, Any]) -> int:
    res = conn.execute(tasks_table.insert().values(**values))
    return int(res.inserted_primary_key[0])


def update_task_fields(conn: Connection, task_id: int, fields: Dict[str, Any]) -> None:
    if not fields:
        return
    sets = ", ".join(f"{col} = :{col}" for col in fields)
    params = dict(fields)
    params["tid"] = int(task_id)
    conn.execute(text(f"UPDATE tasks SET {sets} WHERE id = :tid"), params)


def delete_task_row(conn: Connection, task_id: int) -> int:
    res = conn.execute(text("DELETE FROM tasks WHERE id = :tid"), {"tid": int(task_id)})
    return int(res.rowcount or 0)
