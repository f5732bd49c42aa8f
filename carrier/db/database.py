"""Database connection and session management."""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from ..config import DATABASE_URL, DATA_DIR, DB_PATH
from .models import Base


def build_engine(url: str = DATABASE_URL, **kwargs) -> Engine:
    """Create an engine; SQLite gets thread sharing and enforced foreign keys."""
    if url.startswith("sqlite"):
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)  # Needed for SQLite + FastAPI
        engine = create_engine(url, connect_args=connect_args, **kwargs)

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine
    return create_engine(url, pool_pre_ping=True, **kwargs)


if DATABASE_URL == f"sqlite:///{DB_PATH}":
    # Ensure data directory exists
    DATA_DIR.mkdir(parents=True, exist_ok=True)

engine = build_engine(DATABASE_URL, echo=False)  # Set echo=True for SQL debugging

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = engine):
    """Initialize database tables."""
    Base.metadata.create_all(bind=bind)


def get_db():
    """Dependency for FastAPI to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
