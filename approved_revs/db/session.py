"""Engine and session factories.

Writes go through the primary session factory. Read paths may use a
replica factory; it defaults to the primary.
"""

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from approved_revs.db.base import Base


def make_engine(database_url: str, *, echo: bool = False) -> Engine:
    """Create an engine; in-memory SQLite shares one connection across sessions."""
    if database_url == "sqlite://" or (database_url.startswith("sqlite") and ":memory:" in database_url):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, echo=echo, pool_pre_ping=True)


def make_session_factory(database_url: str, *, echo: bool = False) -> sessionmaker:
    return sessionmaker(bind=make_engine(database_url, echo=echo), expire_on_commit=False)


def make_read_session_factory(
    read_database_url: Optional[str],
    primary: sessionmaker,
) -> sessionmaker:
    if not read_database_url:
        return primary
    return make_session_factory(read_database_url)


def create_schema(engine: Engine) -> None:
    """Create the approval tables (development and tests)."""
    import approved_revs.db.models  # noqa: F401  registers the mappers

    Base.metadata.create_all(engine)
