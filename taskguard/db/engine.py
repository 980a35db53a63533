# taskguard/db/engine.py
from __future__ import annotations

import os

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine


def _env(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


DATABASE_URL = _env("DATABASE_URL", "sqlite:///./taskguard.db")


def make_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        # requests run on FastAPI's threadpool
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, pool_pre_ping=True)


engine = make_engine(DATABASE_URL)
