import urllib.parse
from datetime import datetime, timezone
from functools import lru_cache

from sqlalchemy import Boolean, Column, create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from doypal.config import get_settings

Base = declarative_base()


class SoftDeleteMixin:
    """Rows are archived through ``is_active`` and never removed."""

    is_active = Column(Boolean, nullable=False, default=True)

    @classmethod
    def active(cls, db: Session):
        return db.query(cls).filter(cls.is_active.is_(True))


def _normalize_url(url: str) -> str:
    try:
        # Parse the URL to ensure all components are properly encoded
        parsed = urllib.parse.urlparse(url)
        return urllib.parse.urlunparse(parsed)
    except ValueError:
        return url.encode("utf-8", errors="replace").decode("utf-8")


def build_engine(database_url: str):
    url = _normalize_url(database_url)

    connect_args = {}
    if url.startswith("postgres"):
        connect_args = {"options": "-c timezone=utc"}
    elif url.startswith("sqlite"):
        # request handlers run in FastAPI's threadpool
        connect_args = {"check_same_thread": False}

    return create_engine(url, connect_args=connect_args)


@lru_cache
def get_engine():
    return build_engine(get_settings().database_url)


@lru_cache
def get_session_factory():
    return sessionmaker(bind=get_engine(), autoflush=False)


def get_db():
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()


def utcnow() -> datetime:
    # timestamps are stored as naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)
