"""Database migration utilities."""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory

from campus_api.config import settings

logger = logging.getLogger(__name__)

# Repository root: holds alembic.ini and migrations/
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent


def get_alembic_config() -> Config:
    """Build the Alembic configuration for this project."""
    alembic_ini = _PROJECT_ROOT / "alembic.ini"

    if not alembic_ini.exists():
        raise FileNotFoundError(f"alembic.ini not found at {alembic_ini}")

    config = Config(str(alembic_ini))
    config.set_main_option("script_location", str(_PROJECT_ROOT / "migrations"))
    config.set_main_option("sqlalchemy.url", settings.database_sync_url)

    return config


def run_migrations() -> None:
    """Upgrade the database to the latest revision."""
    logger.info("Running database migrations...")

    try:
        command.upgrade(get_alembic_config(), "head")
        logger.info("Database migrations completed successfully")
    except Exception as e:
        logger.error(f"Database migration failed: {e}")
        raise


def get_head_revision() -> str | None:
    """Return the newest revision known to the migration scripts."""
    try:
        script = ScriptDirectory.from_config(get_alembic_config())
        return script.get_current_head()
    except Exception:
        return None


def main() -> None:
    """Console entry point: ``campus-migrate``."""
    logging.basicConfig(level=logging.INFO)
    run_migrations()
