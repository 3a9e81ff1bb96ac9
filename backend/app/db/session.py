"""
SQLAlchemy engine + session factory.
Import *get_db* as a FastAPI dependency in route handlers.
"""
from collections.abc import Generator

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings


def configure_sqlite_engine(engine: Engine) -> Engine:
    """
    Make a SQLite engine behave like the production store.

    - PRAGMA foreign_keys=ON so ON DELETE CASCADE actually fires.
    - pysqlite's implicit transaction handling is switched off and BEGIN is
      emitted by SQLAlchemy instead, otherwise SAVEPOINTs misbehave.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")

    return engine


def build_engine(url: str, echo: bool = False) -> Engine:
    """Create an engine with dialect-appropriate pool/connect options."""
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            # FastAPI runs sync routes in a threadpool
            connect_args={"check_same_thread": False},
            echo=echo,
        )
        return configure_sqlite_engine(engine)

    return create_engine(
        url,
        # Health-check connections before handing them to the app
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        echo=echo,
    )


# Log every SQL statement in dev; silence in production
engine = build_engine(settings.DATABASE_URL, echo=settings.is_dev)

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,  # Avoid lazy-load errors after commit
)


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a scoped DB session.

    Usage:
        @router.get("/items")
        def list_items(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
