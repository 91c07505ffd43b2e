# feedbackhub/db.py
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from feedbackhub import config
from feedbackhub.errors import Unavailable

Base = declarative_base()


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ships with FK enforcement off; it is a per-connection setting
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _make_engine(url: str, pool_size: int = None) -> Engine:
    pool_size = config.DB_POOL_SIZE if pool_size is None else pool_size
    if not url.startswith("sqlite"):
        return create_engine(url, pool_size=pool_size, pool_pre_ping=True)

    connect_args = {"check_same_thread": False}
    if _is_memory_sqlite(url):
        # one shared connection, otherwise every checkout sees a fresh empty DB
        engine = create_engine(url, connect_args=connect_args, poolclass=StaticPool)
    else:
        engine = create_engine(url, connect_args=connect_args, pool_size=pool_size)
    event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create tables if they don't exist. Raises Unavailable if the DB can't be reached."""
    # import models lazily so Base metadata has them
    import feedbackhub.models  # noqa: F401
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        raise Unavailable(f"DB init failed: {e}") from e
