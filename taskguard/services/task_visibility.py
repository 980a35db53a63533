# taskguard/services/task_visibility.py
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.engine import Connection

from taskguard.models import CategoryGroup, ListOptions, sanitize_task
from taskguard.security.permissions import VIEW_TASK, permission_granted
from taskguard.services.tasks_repo import find_org_or_assignee_scope, find_tasks


def visibility_scope(user: Dict[str, Any], granted: Iterable[str]) -> Dict[str, Optional[int]]:
    """
    view_task holders see their whole organization,
    everyone else only tasks assigned to them.
    """
    if permission_granted(granted, VIEW_TASK):
        return {"organization_id": user.get("organization_id"), "assigned_to_id": None}
    return {"organization_id": None, "assigned_to_id": int(user["id"])}


def load_visible_tasks(
    conn: Connection,
    *,
    user: Dict[str, Any],
    granted: Iterable[str],
    options: ListOptions,
) -> List[Dict[str, Any]]:
    scope = visibility_scope(user, granted)
    if scope["assigned_to_id"] is None and scope["organization_id"] is None:
        # org-wide scope without an organization matches nothing
        return []
    return find_tasks(
        conn,
        organization_id=scope["organization_id"],
        assigned_to_id=scope["assigned_to_id"],
        category=options.category,
        status=options.filter.status,
        sort=options.sort,
    )


def load_scoped_tasks(conn: Connection, *, user: Dict[str, Any], granted: Iterable[str]) -> List[Dict[str, Any]]:
    scope = visibility_scope(user, granted)
    return find_org_or_assignee_scope(
        conn,
        organization_id=scope["organization_id"],
        assigned_to_id=scope["assigned_to_id"],
    )


def group_by_category(rows: Iterable[Dict[str, Any]]) -> List[CategoryGroup]:
    # dicts keep insertion order -> first-seen category order
    grouped: Dict[str, List[Dict[str, Any]]] = {}
    for r in rows:
        grouped.setdefault(str(r["category"]), []).append(r)
    return [
        CategoryGroup(category=cat, tasks=[sanitize_task(t) for t in items])
        for cat, items in grouped.items()
    ]
