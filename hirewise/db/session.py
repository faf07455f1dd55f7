"""Engine and session factory construction."""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hirewise.db.tables import Base
from hirewise.utils.logger import get_logger

logger = get_logger(__name__)


def create_session_factory(database_url: str, echo: bool = False, create_tables: bool = True) -> sessionmaker:
    """
    Build a session factory bound to ``database_url``.

    In-memory SQLite URLs share one connection so every session sees the
    same database.
    """
    kwargs = {}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, echo=echo, future=True, **kwargs)
    if create_tables:
        Base.metadata.create_all(engine)
        logger.info(f"Database ready: {engine.url.render_as_string(hide_password=True)}")

    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False, future=True)
