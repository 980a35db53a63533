# taskguard/services/task_access.py
"""
Task-level eligibility checks.

Two independent gates exist and are applied at different layers:

  can_access_task    -- coarse, role-name only; the HTTP layer evaluates it
                        before calling edit/delete.
  can_edit_or_delete -- permission based; evaluated inside edit/delete/status.

Both are pure: all data (principal, user row, task row, permission set) is
fetched before the decision.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from taskguard.security.permissions import EDIT_TASK, permission_granted
from taskguard.security.principal import Principal
from taskguard.security.roles import ROLE_ADMIN, ROLE_OWNER, ROLE_VIEWER


def _same_id(a: Any, b: Any) -> bool:
    if a is None or b is None:
        return False
    try:
        return int(a) == int(b)
    except (TypeError, ValueError):
        return False


def can_access_task(principal: Principal, task: Optional[Dict[str, Any]]) -> bool:
    if not task:
        return False
    role = principal.role_name
    if role == ROLE_ADMIN:
        return True
    if role == ROLE_OWNER:
        return _same_id(principal.organization_id, task.get("organization_id"))
    if role == ROLE_VIEWER:
        return _same_id(principal.id, task.get("assigned_to_id"))
    return False


def can_edit_or_delete(user: Dict[str, Any], task: Dict[str, Any], granted: Iterable[str]) -> bool:
    """
    edit_task holders: any task of their own organization.
    Everyone else: only tasks assigned to them, even without edit_task.
    """
    if permission_granted(granted, EDIT_TASK):
        return _same_id(task.get("organization_id"), user.get("organization_id"))
    return _same_id(task.get("assigned_to_id"), user.get("id"))
