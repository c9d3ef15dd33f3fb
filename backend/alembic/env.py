"""
Alembic environment configuration
"""
import sys
from logging.config import fileConfig
from pathlib import Path
from urllib.parse import urlparse, urlunparse

# Load environment variables BEFORE importing folio modules
BACKEND_DIR = Path(__file__).resolve().parent.parent
BASE_DIR = BACKEND_DIR.parent
sys.path.insert(0, str(BACKEND_DIR))

from dotenv import load_dotenv

env_file = BASE_DIR / ".env"
if env_file.exists():
    load_dotenv(env_file, override=True)

from alembic import context
from sqlalchemy import engine_from_config, pool

from folio.core.config import get_settings
from folio.core.database import Base
from folio.models import *  # noqa: F401, F403 - register all models

config = context.config


def _mask_database_url(url: str) -> str:
    """Mask password in a database URL for safe logging."""
    p = urlparse(url)
    if not p.username:
        return url
    netloc = f"{p.username}:***@{p.hostname or ''}"
    if p.port:
        netloc = f"{netloc}:{p.port}"
    return urlunparse((p.scheme, netloc, p.path or "", p.params or "", p.query or "", p.fragment or ""))


try:
    settings = get_settings()
except Exception as exc:  # pragma: no cover - helpful runtime error path
    sys.stderr.write(
        "Failed to load application settings required by Alembic.\n"
        "Set DATABASE_URL or the POSTGRES_* variables (see folio/core/config.py).\n\n"
        f"Original error: {exc}\n"
    )
    raise

config.set_main_option("sqlalchemy.url", settings.database_url.replace("%", "%%"))
sys.stderr.write(f"Alembic will use database URL: {_mask_database_url(settings.database_url)}\n")

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection, target_metadata=target_metadata
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
