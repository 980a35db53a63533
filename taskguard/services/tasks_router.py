# taskguard/services/tasks_router.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Path, Query, Request

from taskguard.errors import ErrorCode, raise_error
from taskguard.models import (
    CategoryGroup,
    DeleteResult,
    ListOptions,
    SortField,
    TaskEdit,
    TaskFilter,
    TaskInput,
    TaskOrderUpdate,
    TaskOut,
    TaskStatusUpdate,
)
from taskguard.security.principal import Principal
from taskguard.security.roles import ROLE_ADMIN, ROLE_OWNER, ROLE_VIEWER, require_roles
from taskguard.services.tasks_service import TaskService

router = APIRouter(tags=["tasks"])

_any_role = require_roles(ROLE_VIEWER, ROLE_OWNER, ROLE_ADMIN)
_editor_role = require_roles(ROLE_OWNER, ROLE_ADMIN)


def get_task_service(request: Request) -> TaskService:
    return request.app.state.task_service


def _as_str_or_none(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    s = v.strip()
    return s if s else None


# -----------------------
# endpoints
# -----------------------
@router.post("/task", response_model=TaskOut)
def create_task(
    payload: TaskInput,
    principal: Principal = Depends(_editor_role),
    svc: TaskService = Depends(get_task_service),
) -> TaskOut:
    return svc.create_task(principal.id, payload)


@router.get("/tasks", response_model=List[TaskOut])
def list_tasks(
    sort: Optional[SortField] = Query(None),
    category: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    principal: Principal = Depends(_any_role),
    svc: TaskService = Depends(get_task_service),
) -> List[TaskOut]:
    # dispatch by role name, not by permission set
    if principal.role_name == ROLE_ADMIN:
        return svc.list_all_tasks()
    if principal.role_name == ROLE_OWNER:
        return svc.list_org_tasks(principal.organization_id)

    options = ListOptions(
        sort=sort,
        filter=TaskFilter(status=_as_str_or_none(status)),
        category=_as_str_or_none(category),
    )
    return svc.list_tasks(principal.id, options)


@router.get("/tasks-by-categories", response_model=List[CategoryGroup])
def list_categories(
    principal: Principal = Depends(_any_role),
    svc: TaskService = Depends(get_task_service),
) -> List[CategoryGroup]:
    return svc.list_categories(principal.id)


@router.put("/task/{task_id}/order", response_model=TaskOut)
def update_order(
    body: TaskOrderUpdate,
    task_id: int = Path(..., ge=1),
    principal: Principal = Depends(_editor_role),
    svc: TaskService = Depends(get_task_service),
) -> TaskOut:
    return svc.update_task_order(principal.id, task_id, body.order)


@router.put("/task/{task_id}/status", response_model=TaskOut)
def update_status(
    body: TaskStatusUpdate,
    task_id: int = Path(..., ge=1),
    principal: Principal = Depends(_editor_role),
    svc: TaskService = Depends(get_task_service),
) -> TaskOut:
    return svc.update_task_status(principal.id, task_id, body.status)


def _ensure_task_access(svc: TaskService, principal: Principal, task_id: int) -> None:
    task = svc.get_task(task_id)
    if not svc.can_access_task(principal, task):
        raise_error(ErrorCode.TASK_FORBIDDEN_ACCESS, extra={"task_id": int(task_id)})


@router.put("/editTask/{task_id}", response_model=TaskOut)
def edit_task(
    body: TaskEdit,
    task_id: int = Path(..., ge=1),
    principal: Principal = Depends(_editor_role),
    svc: TaskService = Depends(get_task_service),
) -> TaskOut:
    _ensure_task_access(svc, principal, task_id)
    return svc.edit_task(principal.id, task_id, body)


@router.delete("/deleteTask/{task_id}", response_model=DeleteResult)
def delete_task(
    task_id: int = Path(..., ge=1),
    principal: Principal = Depends(_editor_role),
    svc: TaskService = Depends(get_task_service),
) -> DeleteResult:
    _ensure_task_access(svc, principal, task_id)
    return svc.delete_task(principal.id, task_id)


@router.get("/audit-log")
def get_audit_log(
    principal: Principal = Depends(_editor_role),
    svc: TaskService = Depends(get_task_service),
) -> List[Dict[str, Any]]:
    return [e.as_dict() for e in svc.get_audit_log()]
