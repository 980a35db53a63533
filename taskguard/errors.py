# taskguard/errors.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class ErrorKind(str, Enum):
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"


class ErrorCode(str, Enum):
    # auth / role guard
    AUTH_UNAUTHORIZED_NO_USER = "AUTH_UNAUTHORIZED_NO_USER"
    AUTH_UNAUTHORIZED_BAD_CLAIM = "AUTH_UNAUTHORIZED_BAD_CLAIM"
    AUTH_UNAUTHORIZED_NO_ROLE = "AUTH_UNAUTHORIZED_NO_ROLE"
    AUTH_FORBIDDEN_ROLE = "AUTH_FORBIDDEN_ROLE"

    # tasks: list/view
    TASKS_FORBIDDEN_LIST = "TASKS_FORBIDDEN_LIST"
    TASK_NOT_FOUND = "TASK_NOT_FOUND"
    TASK_FORBIDDEN_ACCESS = "TASK_FORBIDDEN_ACCESS"

    # tasks: create/edit/status/delete
    TASK_FORBIDDEN_CREATE = "TASK_FORBIDDEN_CREATE"
    TASK_FORBIDDEN_PATCH = "TASK_FORBIDDEN_PATCH"
    TASK_FORBIDDEN_STATUS = "TASK_FORBIDDEN_STATUS"
    TASK_FORBIDDEN_DELETE = "TASK_FORBIDDEN_DELETE"


@dataclass(frozen=True)
class ApiErrorSpec:
    http_status: int
    error: ErrorKind
    message: str
    reason: str
    hint: str

    def payload(self, *, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "error": self.error.value,
            "message": self.message,
            "reason": self.reason,
            "hint": self.hint,
        }
        if extra:
            data.update(extra)
        return data


class TaskGuardError(HTTPException):
    """
    HTTPException that also remembers which ErrorCode produced it,
    so service-level callers can branch on `.code` without parsing payloads.
    """

    def __init__(self, code: ErrorCode, spec: ApiErrorSpec, *, extra: Optional[Dict[str, Any]] = None) -> None:
        payload_extra: Dict[str, Any] = {"code": code.value}
        if extra:
            payload_extra.update(extra)
        super().__init__(status_code=spec.http_status, detail=spec.payload(extra=payload_extra))
        self.code = code
        self.kind = spec.error


ERRORS: Dict[ErrorCode, ApiErrorSpec] = {
    # auth / role guard
    ErrorCode.AUTH_UNAUTHORIZED_NO_USER: ApiErrorSpec(
        http_status=status.HTTP_401_UNAUTHORIZED,
        error=ErrorKind.UNAUTHORIZED,
        message="Unauthorized",
        reason="Missing X-User-Id header",
        hint="Send the authenticated user id in X-User-Id",
    ),
    ErrorCode.AUTH_UNAUTHORIZED_BAD_CLAIM: ApiErrorSpec(
        http_status=status.HTTP_401_UNAUTHORIZED,
        error=ErrorKind.UNAUTHORIZED,
        message="Unauthorized",
        reason="An identity header is not an integer",
        hint="Send numeric ids in X-User-Id and X-Org-Id",
    ),
    ErrorCode.AUTH_UNAUTHORIZED_NO_ROLE: ApiErrorSpec(
        http_status=status.HTTP_401_UNAUTHORIZED,
        error=ErrorKind.UNAUTHORIZED,
        message="No user role",
        reason="The request carries no principal or the principal has no role",
        hint="Attach an authenticated identity to the request",
    ),
    ErrorCode.AUTH_FORBIDDEN_ROLE: ApiErrorSpec(
        http_status=status.HTTP_403_FORBIDDEN,
        error=ErrorKind.FORBIDDEN,
        message="Forbidden",
        reason="Your role is below the level required for this action",
        hint="Ask an owner or admin to perform the action",
    ),
    # tasks list/view
    ErrorCode.TASKS_FORBIDDEN_LIST: ApiErrorSpec(
        http_status=status.HTTP_403_FORBIDDEN,
        error=ErrorKind.FORBIDDEN,
        message="Forbidden",
        reason="The requesting user is unknown",
        hint="Check the user id attached to the request",
    ),
    ErrorCode.TASK_NOT_FOUND: ApiErrorSpec(
        http_status=status.HTTP_404_NOT_FOUND,
        error=ErrorKind.NOT_FOUND,
        message="Not found",
        reason="The user or the task does not exist",
        hint="Check the task id and the requesting user",
    ),
    ErrorCode.TASK_FORBIDDEN_ACCESS: ApiErrorSpec(
        http_status=status.HTTP_403_FORBIDDEN,
        error=ErrorKind.FORBIDDEN,
        message="Forbidden",
        reason="The task is outside of your access scope",
        hint="Ask the task assignee or an organization admin",
    ),
    # tasks create/edit/status/delete
    ErrorCode.TASK_FORBIDDEN_CREATE: ApiErrorSpec(
        http_status=status.HTTP_403_FORBIDDEN,
        error=ErrorKind.FORBIDDEN,
        message="Forbidden",
        reason="Your role does not hold the create_task permission",
        hint="Ask an owner or admin to create the task",
    ),
    ErrorCode.TASK_FORBIDDEN_PATCH: ApiErrorSpec(
        http_status=status.HTTP_403_FORBIDDEN,
        error=ErrorKind.FORBIDDEN,
        message="Forbidden",
        reason="You may not edit this task",
        hint="Only the assignee or an editor of the same organization can edit it",
    ),
    ErrorCode.TASK_FORBIDDEN_STATUS: ApiErrorSpec(
        http_status=status.HTTP_403_FORBIDDEN,
        error=ErrorKind.FORBIDDEN,
        message="Forbidden",
        reason="You may not change the status of this task",
        hint="Only the assignee or an editor of the same organization can change it",
    ),
    ErrorCode.TASK_FORBIDDEN_DELETE: ApiErrorSpec(
        http_status=status.HTTP_403_FORBIDDEN,
        error=ErrorKind.FORBIDDEN,
        message="Forbidden",
        reason="You may not delete this task",
        hint="Only the assignee or an editor of the same organization can delete it",
    ),
}


def raise_error(code: ErrorCode, *, extra: Optional[Dict[str, Any]] = None) -> None:
    """
    Raise TaskGuardError with a stable error contract.

    extra: optional fields to include into payload (e.g., task_id, required_roles).
    """
    raise TaskGuardError(code, ERRORS[code], extra=extra)


def error_payload(code: ErrorCode, *, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Build a payload without raising (useful for tests or non-exception flows).
    """
    spec = ERRORS[code]
    return spec.payload(extra={"code": code.value, **(extra or {})})
