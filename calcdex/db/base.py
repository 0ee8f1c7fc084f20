from __future__ import annotations
import os
from contextlib import contextmanager
from typing import Iterator
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Session

DEFAULT_DB_PATH = os.path.join(os.path.dirname(__file__), "..", "..", "calcdex.db")


def database_url() -> str:
    """CALCDEX_DB_URL o un sqlite junto al paquete."""
    return os.environ.get("CALCDEX_DB_URL") or f"sqlite:///{os.path.abspath(DEFAULT_DB_PATH)}"


def make_engine(url: str | None = None) -> Engine:
    return create_engine(url or database_url(), echo=False, future=True)


def make_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(bind=bind, autoflush=False, autocommit=False, future=True)


engine = make_engine()
SessionLocal = make_session_factory(engine)


class Base(DeclarativeBase):
    pass


@contextmanager
def session_scope(factory: sessionmaker | None = None) -> Iterator[Session]:
    """Sesión transaccional: commit al salir, rollback si algo falla."""
    session = (factory or SessionLocal)()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
