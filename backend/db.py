import logging
import os
from sqlmodel import Session, SQLModel, create_engine

logger = logging.getLogger(__name__)


def database_url() -> str:
    """DATABASE_URL when set, otherwise a local SQLite file at DATABASE_PATH.

    The SQLite fallback is refused when ENV says production.
    """
    url = os.getenv("DATABASE_URL")
    if not url:
        env = os.getenv("ENV", "dev").lower()
        if env in ("prod", "production"):
            raise RuntimeError(
                "DATABASE_URL missing in production; refusing to start with SQLite. "
                "Please configure DATABASE_URL environment variable."
            )
        url = f"sqlite:///{os.getenv('DATABASE_PATH', './agenda.db')}"

    # Hosted Postgres URLs use postgres:// but SQLAlchemy needs postgresql://
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


DATABASE_URL = database_url()
logger.info(f"DB_URL_DRIVER={DATABASE_URL.split(':', 1)[0]}")

engine = create_engine(DATABASE_URL, echo=False)


def create_db_and_tables():
    """Create the hearing and user_account tables if they don't exist."""
    SQLModel.metadata.create_all(engine)


def get_session():
    """Get database session."""
    with Session(engine) as session:
        yield session
