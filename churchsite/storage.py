"""Schema initialization for the durable backend."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect
from sqlalchemy.engine import make_url
from sqlalchemy.exc import OperationalError

from .database import backend

logger = logging.getLogger(__name__)


def init_db() -> list[str]:
    """Bring the schema up to date, tolerating an unreachable backend."""
    if backend is None:
        return []
    try:
        return upgrade_database(make_backup=False)
    except OperationalError as exc:
        logger.warning(
            "Durable backend unreachable at startup, continuing with temporary storage: %s",
            exc,
        )
        return []


def _alembic_config() -> Config:
    package_dir = Path(__file__).resolve().parent
    script_location = package_dir / "alembic"
    ini_path = script_location.parent / "alembic.ini"

    config = Config(str(ini_path)) if ini_path.exists() else Config()
    config.set_main_option("script_location", str(script_location))
    config.set_main_option(
        "sqlalchemy.url", backend.engine.url.render_as_string(hide_password=False)
    )
    return config


def _sqlite_path() -> Path | None:
    url = make_url(str(backend.engine.url))
    if url.get_backend_name() != "sqlite" or not url.database or url.database == ":memory:":
        return None
    return Path(url.database)


def upgrade_database(*, make_backup: bool = True) -> list[str]:
    """Upgrade the database schema in-place.

    Returns a list of applied actions; empty if already up-to-date.
    """
    if backend is None:
        raise RuntimeError("The durable backend is disabled (database_url is empty)")

    actions: list[str] = []
    db_path = _sqlite_path()
    if make_backup and db_path is not None and db_path.exists():
        backup_path = db_path.with_suffix(db_path.suffix + ".bak")
        shutil.copy(db_path, backup_path)
        actions.append(f"Backup created at {backup_path}")

    inspector = inspect(backend.engine)
    has_alembic = inspector.has_table("alembic_version")
    has_messages = inspector.has_table("messages")
    config = _alembic_config()

    with backend.engine.begin() as connection:
        config.attributes["connection"] = connection
        if not has_alembic and not has_messages:
            command.upgrade(config, "head")
            actions.append("Ran Alembic upgrade to head (fresh database)")
        elif not has_alembic:
            # Existing database without Alembic tracking: baseline it.
            command.stamp(config, "head")
            actions.append("Stamped existing database to Alembic head")
        else:
            command.upgrade(config, "head")
            actions.append("Applied Alembic migrations to head")

    return actions
