# alembic/env.py
from __future__ import annotations

import logging
import os
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import create_engine, pool

ROOT_DIR = Path(__file__).resolve().parents[1]
load_dotenv(ROOT_DIR / ".env")

# PG variables that override the URL's own settings
for var in ("PGSERVICE", "PGSERVICEFILE", "PGSYSCONFDIR", "PGAPPNAME", "PGOPTIONS", "PGPASSFILE"):
    os.environ.pop(var, None)
os.environ.setdefault("PGCLIENTENCODING", "UTF8")

config = context.config
if config.config_file_name:
    fileConfig(config.config_file_name)
logger = logging.getLogger("alembic.env")

# DATABASE_URL / SQLALCHEMY_DATABASE_URI from .env, else sqlalchemy.url in alembic.ini
db_url = (
    os.getenv("DATABASE_URL")
    or os.getenv("SQLALCHEMY_DATABASE_URI")
    or config.get_main_option("sqlalchemy.url")
)
if not db_url:
    raise RuntimeError("No database URL: set DATABASE_URL in .env or sqlalchemy.url in alembic.ini")

if ("supabase.co" in db_url or "supabase.com" in db_url) and "sslmode=" not in db_url:
    sep = "&" if "?" in db_url else "?"
    db_url = f"{db_url}{sep}sslmode=require"

config.set_main_option("sqlalchemy.url", db_url.replace("%", "%%"))

# Every model module is imported by hrd_survey.db.base
from hrd_survey.db.base import Base  # noqa: E402

target_metadata = Base.metadata


def _redact_url(url: str) -> str:
    prefix, sep, rest = url.partition("://")
    if "@" in rest and ":" in rest.split("@", 1)[0]:
        creds, tail = rest.split("@", 1)
        user = creds.split(":", 1)[0]
        return f"{prefix}{sep}{user}:***@{tail}"
    return url


logger.info("sqlalchemy.url = %s", _redact_url(db_url))


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    context.configure(
        url=db_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    engine = create_engine(db_url, poolclass=pool.NullPool)
    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
