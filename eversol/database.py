# eversol/database.py
from sqlmodel import SQLModel, create_engine

from eversol.core.config import get_settings

settings = get_settings()

# ---------------------------------------------------------
# Durable storefront state (STORAGE_BACKEND="sql")
#
# - SQLite (default): check_same_thread=False so FastAPI's
#   threadpool can share the connection
# - Postgres & co:    pool_size=1 / max_overflow=0 keeps a single
#   pooled connection per worker; pool_pre_ping validates it
# ---------------------------------------------------------

db_url = settings.DATABASE_URL

if db_url.startswith("sqlite"):
    engine = create_engine(
        db_url,
        echo=False,
        connect_args={"check_same_thread": False},
    )
else:
    engine = create_engine(
        db_url,
        echo=False,        # set to True if you want to debug SQL queries
        pool_pre_ping=True,
        pool_size=1,
        max_overflow=0,
    )


def create_db_and_tables() -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(engine)

