from __future__ import annotations
from typing import Generator
from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base, Session

Base = declarative_base()


def make_engine(database_url: str) -> Engine:
    engine_kwargs = dict(pool_pre_ping=True, future=True)
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, **engine_kwargs)

    engine = create_engine(database_url, connect_args={"check_same_thread": False}, **engine_kwargs)

    @event.listens_for(engine, "connect")
    def _sqlite_pragmas(dbapi_connection, _):
        cur = dbapi_connection.cursor()
        cur.execute("PRAGMA foreign_keys=ON")
        try:
            cur.execute("PRAGMA journal_mode=WAL")
            cur.execute("PRAGMA synchronous=NORMAL")
        except Exception:
            # 記憶體資料庫等不支援 WAL，忽略即可
            pass
        cur.close()

    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False, future=True)


def ensure_tables(engine: Engine) -> None:
    # models 必須先 import，create_all 才看得到資料表
    from . import models  # noqa: F401
    Base.metadata.create_all(bind=engine)


def get_db(request: Request) -> Generator[Session, None, None]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


__all__ = ["Base", "make_engine", "make_session_factory", "ensure_tables", "get_db"]
