# tests/test_task_access.py
from __future__ import annotations

import pytest

from taskguard.security.permissions import SEED_ROLE_PERMISSIONS
from taskguard.security.principal import Principal
from taskguard.services.task_access import can_access_task, can_edit_or_delete

TASK = {"id": 10, "organization_id": 2, "assigned_to_id": 5}


# -------------------------
# can_access_task (role name only)
# -------------------------
@pytest.mark.parametrize("org_id", [2, 99, None])
def test_admin_accesses_any_task(org_id):
    assert can_access_task(Principal(id=1, role_name="Admin", organization_id=org_id), TASK)


def test_owner_accesses_same_org_only():
    assert can_access_task(Principal(id=1, role_name="Owner", organization_id=2), TASK)
    assert not can_access_task(Principal(id=1, role_name="Owner", organization_id=3), TASK)
    assert not can_access_task(Principal(id=1, role_name="Owner", organization_id=None), TASK)


def test_viewer_accesses_assigned_only():
    assert can_access_task(Principal(id=5, role_name="Viewer", organization_id=99), TASK)
    assert not can_access_task(Principal(id=6, role_name="Viewer", organization_id=2), TASK)


@pytest.mark.parametrize("role", ["Admin", "Owner", "Viewer", None])
def test_absent_task_is_never_accessible(role):
    assert not can_access_task(Principal(id=5, role_name=role, organization_id=2), None)


def test_unknown_role_has_no_access():
    assert not can_access_task(Principal(id=5, role_name="Intern", organization_id=2), TASK)


# -------------------------
# can_edit_or_delete (permission based)
# -------------------------
def test_editor_limited_to_own_org():
    granted = SEED_ROLE_PERMISSIONS["Admin"]
    assert can_edit_or_delete({"id": 1, "organization_id": 2}, TASK, granted)
    assert not can_edit_or_delete({"id": 1, "organization_id": 3}, TASK, granted)


def test_editor_in_other_org_is_denied_even_when_assignee():
    # edit_task holders are judged by organization only
    granted = SEED_ROLE_PERMISSIONS["Owner"]
    assert not can_edit_or_delete({"id": 5, "organization_id": 3}, TASK, granted)


def test_assignee_fallback_without_edit_permission():
    granted = SEED_ROLE_PERMISSIONS["Viewer"]
    assert can_edit_or_delete({"id": 5, "organization_id": 2}, TASK, granted)
    assert can_edit_or_delete({"id": 5, "organization_id": 42}, TASK, granted)
    assert not can_edit_or_delete({"id": 6, "organization_id": 2}, TASK, granted)


def test_unassigned_task_without_edit_permission():
    task = dict(TASK, assigned_to_id=None)
    assert not can_edit_or_delete({"id": 5, "organization_id": 2}, task, frozenset())
