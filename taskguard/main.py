# taskguard/main.py
from __future__ import annotations

import logging
import os
from typing import Optional

from fastapi import FastAPI
from sqlalchemy import text
from sqlalchemy.engine import Engine

from taskguard.db.engine import engine as default_engine
from taskguard.services.audit_log import AuditRecorder
from taskguard.services.tasks_router import router as tasks_router
from taskguard.services.tasks_service import TaskService

logging.basicConfig(
    level=(os.getenv("TASKGUARD_LOG_LEVEL") or "INFO").strip().upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger("taskguard")


def create_app(engine: Optional[Engine] = None, audit: Optional[AuditRecorder] = None) -> FastAPI:
    eng = engine if engine is not None else default_engine

    app = FastAPI(title="Task Guard")
    app.state.engine = eng
    app.state.task_service = TaskService(eng, audit=audit)

    @app.get("/health")
    def health():
        with eng.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"status": "ok"}

    app.include_router(tasks_router)
    log.info("app initialized. dialect=%s", eng.dialect.name)
    return app


app = create_app()
