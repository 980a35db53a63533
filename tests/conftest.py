# tests/conftest.py
from __future__ import annotations

from typing import Any, Callable, Dict, Iterator, Optional

import pytest
from sqlalchemy.engine import Engine
from starlette.testclient import TestClient

from taskguard.db import schema
from taskguard.db.engine import make_engine
from taskguard.main import create_app
from taskguard.security.permissions import ALL_PERMISSIONS, SEED_ROLE_PERMISSIONS
from taskguard.services.audit_log import AuditRecorder
from taskguard.services.task_ordering import KeyedLocks
from taskguard.services.tasks_service import TaskService


# =============================
# Helpers
# =============================

def insert_returning_id(conn, table, **values) -> int:
    res = conn.execute(table.insert().values(**values))
    return int(res.inserted_primary_key[0])


def create_org(conn, name: str, parent_id: Optional[int] = None) -> int:
    return insert_returning_id(conn, schema.organizations, name=name, parent_id=parent_id)


def create_user(conn, *, email: str, role_id: Optional[int], organization_id: Optional[int]) -> int:
    return insert_returning_id(
        conn,
        schema.users,
        email=email,
        role_id=role_id,
        organization_id=organization_id,
    )


def seed_roles(conn) -> Dict[str, int]:
    perm_ids: Dict[str, int] = {}
    for name in sorted(ALL_PERMISSIONS):
        perm_ids[name] = insert_returning_id(conn, schema.permissions, name=name)

    role_ids: Dict[str, int] = {}
    for role_name, granted in SEED_ROLE_PERMISSIONS.items():
        rid = insert_returning_id(conn, schema.roles, name=role_name)
        role_ids[role_name] = rid
        for p in sorted(granted):
            conn.execute(schema.role_permissions.insert().values(role_id=rid, permission_id=perm_ids[p]))
    return role_ids


# =============================
# Fixtures
# =============================

@pytest.fixture(scope="function")
def engine(tmp_path) -> Iterator[Engine]:
    # file db: the concurrency tests need several connections to see the same data
    eng = make_engine(f"sqlite:///{tmp_path / 'taskguard-test.db'}")
    schema.create_all(eng)
    try:
        yield eng
    finally:
        eng.dispose()


@pytest.fixture(scope="function")
def seed(engine) -> Dict[str, Any]:
    """
    ParentOrg
      └─ ChildOrg
    OtherOrg

    owner  -> ParentOrg, Owner
    admin  -> ChildOrg,  Admin
    viewer -> ChildOrg,  Viewer
    other_admin -> OtherOrg, Admin
    child_owner -> ChildOrg, Owner
    """
    with engine.begin() as conn:
        role_ids = seed_roles(conn)

        parent_org = create_org(conn, "ParentOrg")
        child_org = create_org(conn, "ChildOrg", parent_id=parent_org)
        other_org = create_org(conn, "OtherOrg")

        owner = create_user(conn, email="owner@org.com", role_id=role_ids["Owner"], organization_id=parent_org)
        admin = create_user(conn, email="admin@org.com", role_id=role_ids["Admin"], organization_id=child_org)
        viewer = create_user(conn, email="viewer@org.com", role_id=role_ids["Viewer"], organization_id=child_org)
        other_admin = create_user(
            conn, email="admin@other.com", role_id=role_ids["Admin"], organization_id=other_org
        )
        child_owner = create_user(
            conn, email="owner@child.com", role_id=role_ids["Owner"], organization_id=child_org
        )

    return {
        "role_ids": role_ids,
        "parent_org": parent_org,
        "child_org": child_org,
        "other_org": other_org,
        "owner": owner,
        "admin": admin,
        "viewer": viewer,
        "other_admin": other_admin,
        "child_owner": child_owner,
    }


@pytest.fixture(scope="function")
def make_task(engine) -> Callable[..., int]:
    """Insert a task row directly, bypassing the ordering logic."""

    def _make(
        *,
        title: str,
        organization_id: Optional[int],
        assigned_to_id: Optional[int],
        category: str = "Work",
        status: str = "Todo",
        order: int = 0,
        description: Optional[str] = None,
    ) -> int:
        with engine.begin() as conn:
            return insert_returning_id(
                conn,
                schema.tasks,
                title=title,
                description=description,
                category=category,
                status=status,
                sort_order=order,
                assigned_to_id=assigned_to_id,
                organization_id=organization_id,
            )

    return _make


@pytest.fixture(scope="function")
def audit() -> AuditRecorder:
    return AuditRecorder()


@pytest.fixture(scope="function")
def service(engine, audit) -> TaskService:
    return TaskService(engine, audit=audit, locks=KeyedLocks())


@pytest.fixture(scope="function")
def client(engine, audit) -> TestClient:
    return TestClient(create_app(engine=engine, audit=audit))


@pytest.fixture(scope="function")
def orders_of(engine) -> Callable[..., Dict[int, int]]:
    """task_id -> sort_order for one (organization, category)."""

    def _orders(organization_id: int, category: str) -> Dict[int, int]:
        with engine.begin() as conn:
            rows = conn.execute(
                schema.tasks.select().where(
                    schema.tasks.c.organization_id == organization_id,
                    schema.tasks.c.category == category,
                )
            ).mappings().all()
        return {int(r["id"]): int(r["sort_order"]) for r in rows}

    return _orders
