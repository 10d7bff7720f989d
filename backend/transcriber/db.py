from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import NullPool

from .config import Settings

Base = declarative_base()


def make_engine(settings: Settings) -> Engine:
    if settings.database_url.startswith("sqlite"):
        # Use NullPool to avoid pool exhaustion with sqlite; each session gets a fresh connection
        return create_engine(
            settings.database_url,
            connect_args={"check_same_thread": False},
            poolclass=NullPool,
        )
    return create_engine(
        settings.database_url,
        pool_pre_ping=True,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout,
        pool_recycle=settings.pool_recycle,
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    # rows handed out by the store stay readable after their session closes
    return sessionmaker(
        autocommit=False, autoflush=False, expire_on_commit=False, bind=engine
    )
