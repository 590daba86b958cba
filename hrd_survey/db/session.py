# hrd_survey/db/session.py
import logging
import re

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hrd_survey.core.config import settings

logger = logging.getLogger(__name__)


def _mask(u: str) -> str:
    """Masks the password in the URL for logs"""
    return re.sub(r"://([^:]+):([^@]+)@", r"://\1:***@", u)


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        # Local/test: one shared connection so in-memory databases survive across sessions
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    return {
        "pool_size": 5,
        "max_overflow": 10,
        "pool_timeout": 30,
        "pool_recycle": 1800,
        "pool_pre_ping": True,
    }


db_url = settings.db_url
logger.info("[DB] Using: %s", _mask(db_url))

engine = create_engine(db_url, echo=False, **_engine_kwargs(db_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """FastAPI dependency"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connection() -> bool:
    try:
        with engine.connect() as conn:
            row = conn.execute(text("SELECT 1")).fetchone()
            return bool(row and row[0] == 1)
    except Exception:
        logger.exception("[DB] Connection failed")
        return False
