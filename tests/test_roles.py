# tests/test_roles.py
from __future__ import annotations

import itertools

import pytest

from taskguard.errors import ErrorCode, TaskGuardError
from taskguard.security.principal import Principal
from taskguard.security.roles import (
    ROLE_ADMIN,
    ROLE_HIERARCHY,
    ROLE_OWNER,
    ROLE_VIEWER,
    ensure_role,
    has_required_role,
    role_rank,
)


def test_ranks():
    assert role_rank(ROLE_VIEWER) == 0
    assert role_rank(ROLE_ADMIN) == 1
    assert role_rank(ROLE_OWNER) == 2
    assert role_rank("Intern") == -1
    assert role_rank(None) == -1


_RANKED_PAIRS = [
    (higher, lower)
    for higher, lower in itertools.product(ROLE_HIERARCHY, ROLE_HIERARCHY)
    if role_rank(higher) >= role_rank(lower)
]


@pytest.mark.parametrize("higher,lower", _RANKED_PAIRS)
def test_higher_rank_inherits_lower_grants(higher, lower):
    assert has_required_role(lower, [lower])
    assert has_required_role(higher, [lower])


@pytest.mark.parametrize("role", list(ROLE_HIERARCHY) + ["Intern"])
def test_owner_admin_equals_admin_alone(role):
    # threshold collapses to the lowest listed rank
    assert has_required_role(role, [ROLE_OWNER, ROLE_ADMIN]) == has_required_role(role, [ROLE_ADMIN])


def test_viewer_denied_on_owner_admin_route():
    assert not has_required_role(ROLE_VIEWER, [ROLE_OWNER, ROLE_ADMIN])
    assert not has_required_role(ROLE_ADMIN, [ROLE_OWNER])
    assert has_required_role(ROLE_OWNER, [ROLE_OWNER])


def test_empty_acceptable_set_grants():
    assert has_required_role(None, [])
    assert ensure_role(None, []) is None


def test_unknown_role_never_reaches_listed_role():
    assert not has_required_role("Intern", [ROLE_VIEWER])


def test_ensure_role_without_role_is_unauthorized():
    with pytest.raises(TaskGuardError) as ei:
        ensure_role(Principal(id=1, role_name=None, organization_id=1), [ROLE_VIEWER])
    assert ei.value.status_code == 401
    assert ei.value.code == ErrorCode.AUTH_UNAUTHORIZED_NO_ROLE

    with pytest.raises(TaskGuardError) as ei:
        ensure_role(None, [ROLE_VIEWER])
    assert ei.value.code == ErrorCode.AUTH_UNAUTHORIZED_NO_ROLE


def test_ensure_role_below_threshold_is_forbidden():
    with pytest.raises(TaskGuardError) as ei:
        ensure_role(Principal(id=1, role_name=ROLE_VIEWER, organization_id=1), [ROLE_OWNER, ROLE_ADMIN])
    assert ei.value.status_code == 403
    assert ei.value.code == ErrorCode.AUTH_FORBIDDEN_ROLE
    assert ei.value.detail["required_roles"] == [ROLE_OWNER, ROLE_ADMIN]


def test_ensure_role_returns_principal_when_granted():
    p = Principal(id=7, role_name=ROLE_ADMIN, organization_id=3)
    assert ensure_role(p, [ROLE_OWNER, ROLE_ADMIN]) is p
