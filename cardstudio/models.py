from __future__ import annotations

from datetime import datetime, timezone

from sqlmodel import Field, SQLModel, Session, create_engine

from . import config


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Draft(SQLModel, table=True):
    sku: str = Field(primary_key=True)
    payload: str
    updated_at: datetime = Field(default_factory=_utcnow)


engine = create_engine(f"sqlite:///{config.DB_PATH}")


def reset_engine() -> None:
    global engine
    engine = create_engine(f"sqlite:///{config.DB_PATH}")


def init_db() -> None:
    config.OUT_DIR.mkdir(parents=True, exist_ok=True)
    SQLModel.metadata.create_all(engine)


def get_session() -> Session:
    return Session(engine, expire_on_commit=False)
