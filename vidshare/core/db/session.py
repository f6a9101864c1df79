from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from vidshare.core.config import get_settings

settings = get_settings()


def _connect_args(database_url: str) -> dict:
    """Driver arguments that bound connection and statement time on PostgreSQL."""
    if not database_url.startswith("postgresql"):
        return {}
    return {
        "connect_timeout": settings.DB_CONNECT_TIMEOUT,
        "options": f"-c timezone=utc -c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}",
    }


engine = create_engine(
    settings.database_url,
    echo=False,
    future=True,
    pool_pre_ping=True,
    connect_args=_connect_args(settings.database_url),
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()
