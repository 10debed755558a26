# storefront/data/database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.utils.settings import DATABASE_URL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _engine_kwargs(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}

    kwargs = {"connect_args": {"check_same_thread": False}}
    #in-memory sqlite has to share one connection, otherwise every session sees an empty db
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return kwargs


engine = create_engine(DATABASE_URL, **_engine_kwargs(DATABASE_URL))
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
Base = declarative_base()


def init_db() -> None:
    #register every model in Base.metadata before create_all
    import storefront.data.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info(f"Database ready, tables: {sorted(Base.metadata.tables.keys())}")


def close_db() -> None:
    engine.dispose()
    logger.info("Database connections closed")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
