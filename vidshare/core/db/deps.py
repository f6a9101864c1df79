from typing import Generator

from sqlalchemy.orm import Session

from vidshare.core.db.session import SessionLocal


def get_db() -> Generator[Session, None, None]:
    """
    Request-scoped database session.

    Work left uncommitted by a failing request is rolled back before the
    session goes back to the pool.

    Yields:
        Session: SQLAlchemy database session
    """
    db: Session = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
