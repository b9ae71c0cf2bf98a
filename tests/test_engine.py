"""Tests for engine bootstrap and database error classification."""
import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from app.db.engine import (
    FOREIGN_KEY_VIOLATION,
    SERIALIZATION_FAILURE,
    UNIQUE_VIOLATION,
    build_engine,
    classify_db_error,
    wait_for_database,
)
from app.errors import TransientStorageError


class FakePgError(Exception):
    def __init__(self, pgcode):
        super().__init__("driver error")
        self.pgcode = pgcode


@pytest.mark.parametrize("code, kind", [
    ("23505", UNIQUE_VIOLATION),
    ("23503", FOREIGN_KEY_VIOLATION),
    ("40001", SERIALIZATION_FAILURE),
    ("40P01", SERIALIZATION_FAILURE),
    ("23502", None),
])
def test_classify_postgres_codes(code, kind):
    exc = IntegrityError("INSERT ...", {}, FakePgError(code))

    assert classify_db_error(exc) == kind


def test_classify_sqlite_messages():
    unique = IntegrityError("INSERT ...", {}, Exception("UNIQUE constraint failed: productbill.product_id"))
    foreign = IntegrityError("INSERT ...", {}, Exception("FOREIGN KEY constraint failed"))
    other = OperationalError("SELECT ...", {}, Exception("disk I/O error"))

    assert classify_db_error(unique) == UNIQUE_VIOLATION
    assert classify_db_error(foreign) == FOREIGN_KEY_VIOLATION
    assert classify_db_error(other) is None


def test_wait_for_database_succeeds(engine):
    wait_for_database(engine, attempts=1, delay=0)


def test_wait_for_database_gives_up(tmp_path):
    unreachable = build_engine(f"sqlite:///{tmp_path / 'missing' / 'db.sqlite'}")

    with pytest.raises(TransientStorageError):
        wait_for_database(unreachable, attempts=2, delay=0)


def test_sqlite_foreign_keys_are_enforced(engine):
    with engine.connect() as conn:
        assert conn.exec_driver_sql("PRAGMA foreign_keys").scalar() == 1
