from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from fastapi import Request
from typing import Generator
import redis
from .config import Settings

Base = declarative_base()

def create_db_engine(settings: Settings) -> Engine:
    """Build the engine for the configured database URL."""
    if settings.is_sqlite:
        return create_engine(
            settings.DATABASE_URL,
            connect_args={"check_same_thread": False},
        )

    return create_engine(
        settings.DATABASE_URL,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=1800,  # Recycle connections after 30 minutes
    )

def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)

def create_redis_client(settings: Settings) -> redis.Redis:
    return redis.from_url(settings.REDIS_URL, decode_responses=True)

# Database dependency
def get_db(request: Request) -> Generator[Session, None, None]:
    """Open a session scoped to the current request."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()

# Redis dependency
def get_redis(request: Request):
    """Get the Redis client built at startup."""
    return request.app.state.redis

# Database initialization
def init_db(engine: Engine):
    """Initialize database tables."""
    # Registers the mapped classes on Base.metadata
    from .. import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
