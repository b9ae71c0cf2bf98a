# app/db/engine.py

import logging
import time
from functools import lru_cache
from typing import Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, OperationalError

from app.config import get_settings
from app.db.schema import metadata
from app.errors import TransientStorageError

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "unique"
FOREIGN_KEY_VIOLATION = "foreign_key"
SERIALIZATION_FAILURE = "serialization"

# SQLSTATE codes as reported by Postgres drivers
_PG_CODES = {
    "23505": UNIQUE_VIOLATION,
    "23503": FOREIGN_KEY_VIOLATION,
    "40001": SERIALIZATION_FAILURE,
    "40P01": SERIALIZATION_FAILURE,  # deadlock_detected
}


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str, echo: bool = False) -> Engine:
    # echo=True if you want to see SQL printed in the terminal
    engine = create_engine(url, future=True, pool_pre_ping=True, echo=echo)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


@lru_cache(maxsize=None)
def get_engine() -> Engine:
    """Process-wide engine (and connection pool), built on first use."""
    return build_engine(get_settings().database_url)


def wait_for_database(engine: Engine, attempts: int, delay: float) -> None:
    """
    Probe the database with SELECT 1, retrying a bounded number of times.
    Raises TransientStorageError once every attempt has failed.
    """
    for attempt in range(1, attempts + 1):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info("Connected to database")
            return
        except OperationalError as exc:
            logger.warning(
                "Database not reachable (%s/%s): %s", attempt, attempts, exc.orig
            )
            if attempt < attempts:
                time.sleep(delay)

    raise TransientStorageError(
        f"Database still unreachable after {attempts} attempts"
    )


def init_db(engine: Engine, drop: bool = False) -> None:
    if drop:
        metadata.drop_all(engine)
    metadata.create_all(engine)


def classify_db_error(exc: DBAPIError) -> Optional[str]:
    """
    Map a driver error to UNIQUE_VIOLATION, FOREIGN_KEY_VIOLATION or
    SERIALIZATION_FAILURE; None when it is none of those.
    """
    orig = exc.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code:
        return _PG_CODES.get(code)

    # sqlite3 only exposes the message
    message = str(orig)
    if "UNIQUE constraint failed" in message:
        return UNIQUE_VIOLATION
    if "FOREIGN KEY constraint failed" in message:
        return FOREIGN_KEY_VIOLATION
    return None
