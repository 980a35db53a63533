# taskguard/services/audit_log.py

from __future__ import annotations

import threading
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

ACTION_CREATE_TASK = "CREATE_TASK"
ACTION_LIST_TASKS = "LIST_TASKS"
ACTION_EDIT_TASK = "EDIT_TASK"
ACTION_DELETE_TASK = "DELETE_TASK"
ACTION_UPDATE_ORDER = "UPDATE_ORDER"
ACTION_UPDATE_STATUS = "UPDATE_STATUS"


@dataclass(frozen=True)
class AuditEntry:
    user_id: int
    action: str
    target_id: Optional[int]
    timestamp: str

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


class AuditRecorder:
    """
    Append-only, in-memory audit trail.

    Starts empty with the process and is never persisted. Entries are kept in
    completion order: callers append only after their mutation has committed.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: List[AuditEntry] = []

    def record(self, user_id: int, action: str, target_id: Optional[int] = None) -> AuditEntry:
        entry = AuditEntry(
            user_id=int(user_id),
            action=action,
            target_id=int(target_id) if target_id is not None else None,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        with self._lock:
            self._entries.append(entry)
        return entry

    def entries(self) -> List[AuditEntry]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        # tests only
        with self._lock:
            self._entries.clear()


audit_log = AuditRecorder()
