# taskguard/services/tasks_service.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.engine import Connection, Engine

from taskguard.errors import ErrorCode, raise_error
from taskguard.models import (
    CategoryGroup,
    DeleteResult,
    ListOptions,
    TaskEdit,
    TaskInput,
    TaskOut,
    sanitize_task,
)
from taskguard.security.permissions import CREATE_TASK, has_permission, load_role_permissions
from taskguard.security.principal import Principal
from taskguard.services.audit_log import (
    ACTION_CREATE_TASK,
    ACTION_DELETE_TASK,
    ACTION_EDIT_TASK,
    ACTION_LIST_TASKS,
    ACTION_UPDATE_ORDER,
    ACTION_UPDATE_STATUS,
    AuditEntry,
    AuditRecorder,
    audit_log,
)
from taskguard.services.task_access import can_access_task, can_edit_or_delete
from taskguard.services.task_ordering import (
    KeyedLocks,
    category_key,
    category_locks,
    insert_at_top,
    overwrite_order,
)
from taskguard.services.task_visibility import group_by_category, load_scoped_tasks, load_visible_tasks
from taskguard.services.tasks_repo import (
    EDITABLE_FIELDS,
    delete_task_row,
    find_tasks,
    load_task,
    load_user,
    update_task_fields,
)

log = logging.getLogger("taskguard")


class TaskService:
    """
    Task lifecycle with authorization.

    Every check runs before the store is touched; a failed check raises
    TaskGuardError and leaves both the store and the audit log unchanged.
    Audit entries are appended only after the transaction has committed.
    """

    def __init__(
        self,
        engine: Engine,
        audit: Optional[AuditRecorder] = None,
        locks: Optional[KeyedLocks] = None,
    ) -> None:
        self._engine = engine
        self._audit = audit if audit is not None else audit_log
        self._locks = locks if locks is not None else category_locks

    # ---------------------------
    # helpers
    # ---------------------------
    def _load_user_and_task(
        self, conn: Connection, user_id: int, task_id: int
    ) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        user = load_user(conn, user_id)
        task = load_task(conn, task_id)
        if not user or not task:
            raise_error(ErrorCode.TASK_NOT_FOUND, extra={"task_id": int(task_id)})
        return user, task

    def _ensure_can_edit_or_delete(
        self,
        conn: Connection,
        user: Dict[str, Any],
        task: Dict[str, Any],
        code: ErrorCode,
    ) -> None:
        granted = load_role_permissions(conn, user.get("role_id"))
        if not can_edit_or_delete(user, task, granted):
            log.warning("denied %s: user_id=%s task_id=%s", code.value, user["id"], task["id"])
            raise_error(code, extra={"task_id": int(task["id"])})

    # ---------------------------
    # create / reorder
    # ---------------------------
    def create_task(self, principal_id: int, dto: TaskInput) -> TaskOut:
        with self._engine.begin() as conn:
            user = load_user(conn, principal_id)
            if not user or not has_permission(conn, user, CREATE_TASK):
                log.warning("denied create_task: user_id=%s", principal_id)
                raise_error(ErrorCode.TASK_FORBIDDEN_CREATE)

        with self._locks.hold(category_key(user.get("organization_id"), dto.category)):
            with self._engine.begin() as conn:
                row = insert_at_top(conn, user=user, dto=dto)

        self._audit.record(user["id"], ACTION_CREATE_TASK, row["id"])
        log.info(
            "task created: task_id=%s user_id=%s org_id=%s category=%s",
            row["id"],
            user["id"],
            row["organization_id"],
            row["category"],
        )
        return sanitize_task(row)

    def update_task_order(self, principal_id: int, task_id: int, new_order: int) -> TaskOut:
        # no ownership check here, only existence
        with self._engine.begin() as conn:
            user, _ = self._load_user_and_task(conn, principal_id, task_id)
            row = overwrite_order(conn, task_id=task_id, new_order=new_order)

        self._audit.record(user["id"], ACTION_UPDATE_ORDER, task_id)
        log.info("task reordered: task_id=%s user_id=%s order=%s", task_id, user["id"], new_order)
        return sanitize_task(row)

    # ---------------------------
    # edit / status / delete
    # ---------------------------
    def edit_task(self, principal_id: int, task_id: int, dto: TaskEdit) -> TaskOut:
        changes = {k: v for k, v in dto.changes().items() if k in EDITABLE_FIELDS}
        with self._engine.begin() as conn:
            user, task = self._load_user_and_task(conn, principal_id, task_id)
            self._ensure_can_edit_or_delete(conn, user, task, ErrorCode.TASK_FORBIDDEN_PATCH)
            update_task_fields(conn, task_id, changes)
            row = load_task(conn, task_id)

        self._audit.record(user["id"], ACTION_EDIT_TASK, task_id)
        log.info("task edited: task_id=%s user_id=%s fields=%s", task_id, user["id"], sorted(changes))
        return sanitize_task(row)

    def update_task_status(self, principal_id: int, task_id: int, new_status: str) -> TaskOut:
        with self._engine.begin() as conn:
            user, task = self._load_user_and_task(conn, principal_id, task_id)
            self._ensure_can_edit_or_delete(conn, user, task, ErrorCode.TASK_FORBIDDEN_STATUS)
            update_task_fields(conn, task_id, {"status": new_status})
            row = load_task(conn, task_id)

        self._audit.record(user["id"], ACTION_UPDATE_STATUS, task_id)
        log.info("task status changed: task_id=%s user_id=%s status=%s", task_id, user["id"], new_status)
        return sanitize_task(row)

    def delete_task(self, principal_id: int, task_id: int) -> DeleteResult:
        with self._engine.begin() as conn:
            user, task = self._load_user_and_task(conn, principal_id, task_id)
            self._ensure_can_edit_or_delete(conn, user, task, ErrorCode.TASK_FORBIDDEN_DELETE)
            delete_task_row(conn, task_id)

        self._audit.record(user["id"], ACTION_DELETE_TASK, task_id)
        log.info("task deleted: task_id=%s user_id=%s", task_id, user["id"])
        return DeleteResult(deleted=True)

    # ---------------------------
    # listings
    # ---------------------------
    def list_tasks(self, principal_id: int, options: Optional[ListOptions] = None) -> List[TaskOut]:
        opts = options if options is not None else ListOptions()
        with self._engine.begin() as conn:
            user = load_user(conn, principal_id)
            if not user:
                raise_error(ErrorCode.TASKS_FORBIDDEN_LIST)
            granted = load_role_permissions(conn, user.get("role_id"))
            rows = load_visible_tasks(conn, user=user, granted=granted, options=opts)

        self._audit.record(user["id"], ACTION_LIST_TASKS)
        return [sanitize_task(r) for r in rows]

    def list_all_tasks(self) -> List[TaskOut]:
        with self._engine.begin() as conn:
            rows = find_tasks(conn)
        return [sanitize_task(r) for r in rows]

    def list_org_tasks(self, org_id: Optional[int]) -> List[TaskOut]:
        if org_id is None:
            return []
        with self._engine.begin() as conn:
            rows = find_tasks(conn, organization_id=int(org_id))
        return [sanitize_task(r) for r in rows]

    def list_categories(self, principal_id: int) -> List[CategoryGroup]:
        with self._engine.begin() as conn:
            user = load_user(conn, principal_id)
            if not user:
                raise_error(ErrorCode.TASKS_FORBIDDEN_LIST)
            granted = load_role_permissions(conn, user.get("role_id"))
            rows = load_scoped_tasks(conn, user=user, granted=granted)
        return group_by_category(rows)

    # ---------------------------
    # access / audit
    # ---------------------------
    def get_task(self, task_id: int) -> Optional[Dict[str, Any]]:
        with self._engine.begin() as conn:
            return load_task(conn, task_id)

    def can_access_task(self, principal: Principal, task: Optional[Dict[str, Any]]) -> bool:
        return can_access_task(principal, task)

    def get_audit_log(self) -> List[AuditEntry]:
        return self._audit.entries()
