from typing import Any, Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from afusocial.config import get_settings

settings = get_settings()


def _engine_options(url: str) -> dict[str, Any]:
    """Connection options for the configured backend.

    SQLite is only used for local runs, where the same connection is shared
    across FastAPI's worker threads.
    """

    if make_url(url).get_backend_name() == "sqlite":
        return {"connect_args": {"check_same_thread": False}}
    # pool_pre_ping: verify connections before handing them out
    return {"pool_size": 10, "max_overflow": 20, "pool_pre_ping": True}


engine = create_engine(
    settings.sqlalchemy_url,
    echo=settings.debug,
    future=True,
    **_engine_options(settings.sqlalchemy_url),
)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
