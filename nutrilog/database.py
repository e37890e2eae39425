"""Подключение к базе данных SQLAlchemy."""
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# Базовый класс для моделей
Base = declarative_base()


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _is_memory_sqlite(url: str) -> bool:
    return _is_sqlite(url) and (url in ("sqlite://", "sqlite:///:memory:") or ":memory:" in url)


def make_engine(url: str, echo: bool = False) -> Engine:
    """Создание движка БД.

    In-memory SQLite живёт в одном соединении (StaticPool), иначе каждая
    сессия видела бы пустую базу.
    """
    kwargs = {"echo": echo}
    if _is_sqlite(url):
        kwargs["connect_args"] = {"check_same_thread": False}
    if _is_memory_sqlite(url):
        kwargs["poolclass"] = StaticPool

    engine = create_engine(url, **kwargs)

    if _is_sqlite(url):
        wal = not _is_memory_sqlite(url)

        @event.listens_for(engine, "connect")
        def _sqlite_pragmas(dbapi_conn, _record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys = ON")
            if wal:
                cursor.execute("PRAGMA journal_mode = WAL")
            cursor.close()

    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    """Фабрика сессий.

    expire_on_commit=False: объекты возвращаются из хранилища уже
    отсоединёнными и должны оставаться читаемыми.
    """
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@contextmanager
def session_scope(factory: sessionmaker) -> Iterator[Session]:
    """Контекстный менеджер для сессий БД.

    Использование:
        with session_scope(factory) as db:
            profile = db.query(UserProfile).first()
    """
    db = factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
