# marketplace/data/database.py
from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from marketplace.utils.retry import db_retry
from marketplace.utils.settings import DATABASE_URL
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

Base = declarative_base()


def make_engine(url: str = DATABASE_URL):
    if url.startswith("sqlite"):
        # in-memory sqlite: jedno polaczenie wspoldzielone przez wszystkie sesje
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_engine(url, pool_pre_ping=True)


engine = make_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=True)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@db_retry()
def init_db(bind=None) -> None:
    # import modeli zeby zarejestrowac tabele w Base.metadata
    import marketplace.data.models  # noqa: F401

    bind = bind or engine
    logger.info(f"Creating tables: {list(Base.metadata.tables.keys())}")
    Base.metadata.create_all(bind=bind)
