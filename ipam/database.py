from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import get_settings

Base = declarative_base()


def create_db_engine(database_url: str, busy_timeout: float = 30.0) -> Engine:
    """
    Create a SQLAlchemy engine for the given URL.

    SQLite connections are switched to explicit ``BEGIN IMMEDIATE``
    transactions so that concurrent writers queue on the database lock
    instead of failing when a read transaction tries to upgrade. Savepoints
    keep working because pysqlite no longer issues its own BEGIN.
    """
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)

    engine = create_engine(
        database_url,
        connect_args={"check_same_thread": False, "timeout": busy_timeout},
    )

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


settings = get_settings()

engine = create_db_engine(settings.database_url, settings.sqlite_busy_timeout)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_db():
    """Yield a request-scoped session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind: Engine = engine) -> None:
    # Import models so they register on Base.metadata
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=bind)
