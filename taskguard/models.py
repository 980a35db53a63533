# taskguard/models.py
from __future__ import annotations

import os
from typing import Any, Dict, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _env(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


DEFAULT_CATEGORY = _env("TASKGUARD_DEFAULT_CATEGORY", "Work")
DEFAULT_STATUS = _env("TASKGUARD_DEFAULT_STATUS", "Todo")

# public field name -> tasks column
SORTABLE_COLUMNS: Dict[str, str] = {
    "id": "id",
    "title": "title",
    "description": "description",
    "category": "category",
    "status": "status",
    "order": "sort_order",
}

SortField = Literal["id", "title", "description", "category", "status", "order"]

# sort_order is a 32-bit INTEGER column
ORDER_MIN = -(2**31)
ORDER_MAX = 2**31 - 1


# -----------------------
# inputs
# -----------------------
class TaskInput(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category: str = Field(default=DEFAULT_CATEGORY, min_length=1, max_length=64)
    status: str = Field(default=DEFAULT_STATUS, min_length=1, max_length=32)


class TaskEdit(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, min_length=1, max_length=64)
    status: Optional[str] = Field(default=None, min_length=1, max_length=32)

    @field_validator("title", "category", "status")
    @classmethod
    def _not_null(cls, v: Optional[str]) -> str:
        # only description may be cleared
        if v is None:
            raise ValueError("must not be null")
        return v

    def changes(self) -> Dict[str, Any]:
        # only fields the caller actually sent
        return self.model_dump(exclude_unset=True)


class TaskOrderUpdate(BaseModel):
    order: int = Field(..., ge=ORDER_MIN, le=ORDER_MAX)


class TaskStatusUpdate(BaseModel):
    status: str = Field(..., min_length=1, max_length=32)


class TaskFilter(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: Optional[str] = None


class ListOptions(BaseModel):
    """Recognized options of list_tasks; nothing else is honored."""

    model_config = ConfigDict(extra="forbid")

    sort: Optional[SortField] = None
    filter: TaskFilter = Field(default_factory=TaskFilter)
    category: Optional[str] = None


# -----------------------
# outputs
# -----------------------
class TaskOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    category: str
    status: str
    order: int


class CategoryGroup(BaseModel):
    category: str
    tasks: List[TaskOut]


class DeleteResult(BaseModel):
    deleted: bool = True


def sanitize_task(row: Mapping[str, Any]) -> TaskOut:
    """Strip organization/assignee relations from a task row."""
    return TaskOut(
        id=int(row["id"]),
        title=str(row["title"]),
        description=row.get("description"),
        category=str(row["category"]),
        status=str(row["status"]),
        order=int(row["sort_order"]),
    )
