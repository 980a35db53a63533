# taskguard/db/schema.py
"""
Table definitions for the task store.

Migrations are managed outside of this package; `create_all` is used for
bootstrap and tests.
"""
from __future__ import annotations

import sqlalchemy as sa
from sqlalchemy.engine import Engine

metadata = sa.MetaData()


organizations = sa.Table(
    "organizations",
    metadata,
    sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
    sa.Column("name", sa.String(length=255), nullable=False),
    sa.Column("parent_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=True),
)

permissions = sa.Table(
    "permissions",
    metadata,
    sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
    sa.Column("name", sa.String(length=64), nullable=False, unique=True),
)

roles = sa.Table(
    "roles",
    metadata,
    sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
    sa.Column("name", sa.String(length=64), nullable=False, unique=True),
)

role_permissions = sa.Table(
    "role_permissions",
    metadata,
    sa.Column("role_id", sa.Integer(), sa.ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
    sa.Column("permission_id", sa.Integer(), sa.ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True),
)

users = sa.Table(
    "users",
    metadata,
    sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
    sa.Column("email", sa.String(length=255), nullable=False, unique=True),
    sa.Column("role_id", sa.Integer(), sa.ForeignKey("roles.id"), nullable=True),
    sa.Column("organization_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=True),
)

tasks = sa.Table(
    "tasks",
    metadata,
    sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
    sa.Column("title", sa.String(length=255), nullable=False),
    sa.Column("description", sa.Text(), nullable=True),
    sa.Column("category", sa.String(length=64), nullable=False, server_default=sa.text("'Work'")),
    sa.Column("status", sa.String(length=32), nullable=False, server_default=sa.text("'Todo'")),
    sa.Column("sort_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
    sa.Column("assigned_to_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
    sa.Column("organization_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=True),
)

sa.Index("ix_tasks_org_category", tasks.c.organization_id, tasks.c.category)
sa.Index("ix_tasks_assigned_to_id", tasks.c.assigned_to_id)


def create_all(engine: Engine) -> None:
    metadata.create_all(engine)
