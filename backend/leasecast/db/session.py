from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import sessionmaker

from leasecast.core.config import get_settings


def build_engine(database_url: str) -> Engine:
    """Engine for the billing database; the report path only ever reads through it."""
    return create_engine(database_url, future=True, pool_pre_ping=True)


def build_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(bind=bind, autoflush=False, autocommit=False, expire_on_commit=False)


engine = build_engine(get_settings().database_url)
SessionLocal = build_session_factory(engine)
