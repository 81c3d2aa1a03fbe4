from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from typing import Generator
import logging

from .config import settings

logger = logging.getLogger(__name__)

# ============================================================
# Database Engine
# ============================================================

def is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def enable_sqlite_foreign_keys(target: Engine) -> None:
    """SQLite ignores ON DELETE rules unless the pragma is set per connection."""

    @event.listens_for(target, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


if is_sqlite(settings.DATABASE_URL):
    engine = create_engine(
        settings.DATABASE_URL,
        echo=settings.DB_ECHO,
        future=True,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
else:
    engine = create_engine(
        settings.DATABASE_URL,
        echo=settings.DB_ECHO,
        future=True,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        pool_timeout=30,
        pool_recycle=3600,
    )

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False
)

# ============================================================
# Base Model
# ============================================================

Base = declarative_base()

# ============================================================
# Database Session Dependency
# ============================================================

def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI endpoints.

    Usage:
        @router.get("/items")
        def get_items(db: Session = Depends(get_db)):
            return db.query(Item).all()

    Handlers commit explicitly; the session is closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ============================================================
# Database Health Check
# ============================================================

def check_db_health() -> bool:
    """
    Check if database is accessible and responsive.
    Returns True if healthy, False otherwise.
    """
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return False
    finally:
        db.close()


# ============================================================
# Startup/Shutdown Handlers
# ============================================================

def init_db() -> None:
    """Create missing tables and verify connectivity. Failure is fatal at startup."""
    # Register every model on Base.metadata before create_all
    from . import models  # noqa: F401

    logger.info("🔄 Creating database tables...")
    Base.metadata.create_all(bind=engine)

    if check_db_health():
        logger.info("✅ Database health check passed")
    else:
        logger.error("❌ Database health check failed")
        raise RuntimeError("Database is not reachable")


def close_db() -> None:
    """
    Close database connections on shutdown.
    """
    try:
        logger.info("🔄 Closing database connections...")
        engine.dispose()
        logger.info("✅ Database connections closed")
    except Exception as e:
        logger.error(f"❌ Error closing database: {e}")


__all__ = [
    'Base',
    'engine',
    'SessionLocal',
    'get_db',
    'check_db_health',
    'enable_sqlite_foreign_keys',
    'init_db',
    'close_db',
]
