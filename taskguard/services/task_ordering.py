# taskguard/services/task_ordering.py
"""
Per-(organization, category) ordering of tasks.

Creation pushes every sibling down by one and puts the new task at order 0,
so right after a create the category is dense: 0..n-1 without duplicates.
A manual reorder overwrites one task's order and touches nothing else; gaps
and duplicates produced that way stay until the next create shifts them.
"""
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Dict, Hashable, Iterator, Optional, Tuple

from sqlalchemy.engine import Connection

from taskguard.models import TaskInput
from taskguard.services.tasks_repo import (
    insert_task,
    load_task,
    shift_category_orders,
    update_task_fields,
)

CategoryKey = Tuple[Optional[int], str]


class KeyedLocks:
    """One lock per key, created on first use and kept for the process lifetime."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, threading.Lock] = {}

    def get(self, key: Hashable) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        lock = self.get(key)
        with lock:
            yield


category_locks = KeyedLocks()


def category_key(organization_id: Optional[int], category: str) -> CategoryKey:
    return (int(organization_id) if organization_id is not None else None, category)


def insert_at_top(conn: Connection, *, user: Dict[str, Any], dto: TaskInput) -> Dict[str, Any]:
    """
    Shift siblings and insert the new task at order 0.

    Must run inside one transaction (engine.begin()) while the caller holds
    the category lock; otherwise two creates can both land on order 0.
    """
    organization_id = user.get("organization_id")
    shift_category_orders(conn, organization_id=organization_id, category=dto.category)

    task_id = insert_task(
        conn,
        {
            "title": dto.title,
            "description": dto.description,
            "category": dto.category,
            "status": dto.status,
            "sort_order": 0,
            "assigned_to_id": int(user["id"]),
            "organization_id": organization_id,
        },
    )
    row = load_task(conn, task_id)
    if row is None:
        raise RuntimeError(f"Inserted task {task_id} could not be read back")
    return row


def overwrite_order(conn: Connection, *, task_id: int, new_order: int) -> Dict[str, Any]:
    """Set one task's order. Siblings are not shifted or rebalanced."""
    update_task_fields(conn, task_id, {"sort_order": int(new_order)})
    row = load_task(conn, task_id)
    if row is None:
        raise RuntimeError(f"Task {task_id} disappeared during reorder")
    return row
