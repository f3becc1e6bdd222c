"""Database session and engine configuration."""

from typing import Generator

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from gigmarket.config import settings
from gigmarket.db.base import Base

# Load environment variables
load_dotenv()


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create a synchronous engine for the given URL.

    SQLite (used by the test-suite and local demos) shares one connection
    across threads; everything else gets a regular connection pool.
    """
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_engine(
        database_url,
        echo=echo,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_pre_ping=True,
    )


def build_session_factory(bind: Engine) -> sessionmaker:
    """Session factory used by services, API dependencies and the scheduler."""
    return sessionmaker(
        bind,
        class_=Session,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

SyncSessionLocal = build_session_factory(engine)


def get_sync_db() -> Generator[Session, None, None]:
    """Get synchronous database session for scripts and background tasks."""
    session = SyncSessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(bind: Engine = None) -> None:
    """Create tables (in production, use Alembic migrations)."""
    # Import all models to register them
    import gigmarket.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
