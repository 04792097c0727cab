from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from medibook.core import config


def _connect_args(url: str) -> dict:
    # Sync handlers run in the threadpool, so SQLite connections cross threads.
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(config.DATABASE_URL, connect_args=_connect_args(config.DATABASE_URL))

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_schema() -> None:
    # Registers every mapped table on Base.metadata before creating them.
    from medibook.models import appointment, availability, user  # noqa: F401

    Base.metadata.create_all(bind=engine)
