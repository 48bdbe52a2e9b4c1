"""
Database session management
"""
from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from drivehub.core.config import Settings
from drivehub.core.logging_config import logger

# Base class for models
Base = declarative_base()


def create_db_engine(settings: Settings) -> Engine:
    """Create the SQLAlchemy engine for the configured DATABASE_URL"""
    connect_args = {}
    engine_args = {
        "pool_pre_ping": True,
        "echo": settings.DEBUG
    }

    if settings.DATABASE_URL.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    else:
        engine_args["pool_size"] = 10
        engine_args["max_overflow"] = 20

    return create_engine(
        settings.DATABASE_URL,
        connect_args=connect_args,
        **engine_args
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create session factory bound to engine"""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine
    )


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency for getting database session

    Yields:
        Database session from the factory attached to the application
    """
    db = request.app.state.session_factory()
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        logger.error(f"Database session error: {str(e)}")
        db.rollback()
        raise
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(engine: Engine) -> None:
    """Initialize database tables"""
    from drivehub.db import models  # noqa: F401 - registers the models on Base

    Base.metadata.create_all(bind=engine)
    logger.info("Database initialized successfully")
