"""Bring the database schema to the latest Alembic revision on startup."""

from __future__ import annotations

import errno
import logging
import os
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from alembic import command
from alembic.config import Config

from .database import SQLALCHEMY_DATABASE_URL

LOGGER = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parent.parent
LOCK_FILENAME = ".alembic-migration.lock"
LOCK_RETRY_DELAY = 0.25
LOCK_TIMEOUT_ENV = "ALEMBIC_MIGRATION_LOCK_TIMEOUT"
DEFAULT_LOCK_TIMEOUT = 30.0

if os.name == "posix":  # pragma: no cover - platform specific
    import fcntl
else:  # pragma: no cover - platform specific
    import msvcrt

# Windows reports a held lock as ERROR_SHARING_VIOLATION or ERROR_LOCK_VIOLATION.
_WINDOWS_LOCK_ERRORS = {32, 33}


def _lock_timeout() -> float:
    raw = os.getenv(LOCK_TIMEOUT_ENV)
    if not raw:
        return DEFAULT_LOCK_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        value = 0.0
    if value <= 0:
        LOGGER.warning(
            "Ignoring %s=%r; waiting %.1f seconds for the migration lock",
            LOCK_TIMEOUT_ENV,
            raw,
            DEFAULT_LOCK_TIMEOUT,
        )
        return DEFAULT_LOCK_TIMEOUT
    return value


def _lock_is_held_elsewhere(error: OSError) -> bool:
    if isinstance(error, BlockingIOError):
        return True
    if error.errno in {errno.EACCES, errno.EAGAIN, errno.EBUSY}:
        return True
    return getattr(error, "winerror", None) in _WINDOWS_LOCK_ERRORS


def _try_lock(handle) -> None:
    if os.name == "posix":  # pragma: no cover - platform specific
        fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
    else:  # pragma: no cover - platform specific
        msvcrt.locking(handle.fileno(), msvcrt.LK_NBLCK, 1)


def _unlock(handle) -> None:
    if os.name == "posix":  # pragma: no cover - platform specific
        fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
    else:  # pragma: no cover - platform specific
        msvcrt.locking(handle.fileno(), msvcrt.LK_UNLCK, 1)


@contextmanager
def migration_lock(path: Path, *, timeout: float) -> Iterator[None]:
    """Hold an exclusive file lock so only one worker migrates at a time."""

    path.parent.mkdir(parents=True, exist_ok=True)
    deadline = time.monotonic() + timeout
    with path.open("a+") as handle:
        while True:
            try:
                _try_lock(handle)
                break
            except OSError as error:
                if not _lock_is_held_elsewhere(error):
                    raise
                if time.monotonic() >= deadline:
                    raise TimeoutError(f"Migration lock {path} still held after {timeout}s") from error
                time.sleep(LOCK_RETRY_DELAY)
        LOGGER.debug("Holding migration lock %s", path)
        try:
            yield
        finally:
            try:
                _unlock(handle)
            except OSError as error:  # pragma: no cover - closing the file releases it anyway
                LOGGER.debug("Could not release migration lock %s: %s", path, error)


def alembic_config(database_url: str | None = None) -> Config:
    config = Config(str(PACKAGE_DIR / "alembic.ini"))
    config.set_main_option("script_location", str(PACKAGE_DIR / "alembic"))
    url = database_url or os.getenv("DATABASE_URL") or SQLALCHEMY_DATABASE_URL
    if url:
        config.set_main_option("sqlalchemy.url", url)
    return config


def run_database_migrations() -> None:
    """Upgrade the configured database to ``head`` before serving requests.

    Every schema change goes through Alembic, so a database that was never
    migrated is built from the first revision.
    """

    project_root = PACKAGE_DIR.parent
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))

    config = alembic_config()
    LOGGER.info("Upgrading database schema at %s", config.get_main_option("sqlalchemy.url"))
    with migration_lock(PACKAGE_DIR / LOCK_FILENAME, timeout=_lock_timeout()):
        command.upgrade(config, "head")
