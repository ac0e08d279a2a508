"""
Database session management for Botdesk
SQLAlchemy setup shared by the API and the services
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from botdesk.config import settings

# pool_pre_ping: Verify connections before using them
# echo: Log all SQL statements when DEBUG=True
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    echo=settings.DEBUG
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all models
Base = declarative_base()


def get_db():
    """
    Dependency for FastAPI endpoints to get database session
    Automatically closes session after request

    Rolls back on exceptions so a failed request never leaves a
    half-written transaction (or a held admission lock) behind.
    """
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def create_tables():
    """
    Create all tables in the database
    Called during application startup
    """
    # Import models so they're registered with Base.metadata
    import botdesk.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
