from __future__ import annotations

import logging
from pathlib import Path
from threading import Lock

from alembic import command
from alembic.config import Config

from .config import get_settings

logger = logging.getLogger(__name__)
_run_lock = Lock()
_has_run = False

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def alembic_config(database_url: str | None = None) -> Config:
    cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    cfg.set_main_option("sqlalchemy.url", database_url or get_settings().database_url)
    return cfg


def run_migrations_once() -> None:
    """Upgrade the schema to head the first time this process asks for it."""
    global _has_run
    if _has_run:
        return

    with _run_lock:
        if _has_run:
            return
        logger.info("Applying database migrations...")
        command.upgrade(alembic_config(), "head")
        _has_run = True
        logger.info("Database schema is up to date.")
