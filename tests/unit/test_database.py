"""
Tests for database helpers.
"""
import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError, OperationalError

from datasource_store.database import (
    create_db_engine, create_session_factory, get_db, init_db, is_unique_constraint_violation
)


def integrity_error(message: str) -> IntegrityError:
    return IntegrityError("INSERT INTO data_source ...", {}, Exception(message))


@pytest.mark.unit
class TestUniqueConstraintViolation:
    """Test duplicate-key classification across dialects"""

    @pytest.mark.parametrize("message", [
        "UNIQUE constraint failed: data_source.org_id, data_source.uid",
        "(1062, \"Duplicate entry '1-abc' for key 'uq_data_source_org_id_uid'\")",
        'duplicate key value violates unique constraint "uq_data_source_org_id_uid"',
    ])
    def test_uid_violation(self, message):
        assert is_unique_constraint_violation(integrity_error(message), "uid") is True

    def test_other_column(self):
        error = integrity_error("UNIQUE constraint failed: data_source.org_id, data_source.name")

        assert is_unique_constraint_violation(error) is True
        assert is_unique_constraint_violation(error, "uid") is False

    def test_not_null_violation(self):
        error = integrity_error("NOT NULL constraint failed: data_source.uid")

        assert is_unique_constraint_violation(error, "uid") is False

    def test_non_integrity_error(self):
        error = OperationalError("SELECT 1", {}, Exception("UNIQUE constraint failed: x.uid"))

        assert is_unique_constraint_violation(error, "uid") is False
        assert is_unique_constraint_violation(ValueError("duplicate entry")) is False


@pytest.mark.unit
class TestEngineSetup:

    def test_sqlite_engine(self):
        engine = create_db_engine("sqlite://")

        assert engine.dialect.name == "sqlite"
        engine.dispose()

    def test_init_db_creates_table(self):
        engine = create_db_engine("sqlite://")
        init_db(engine)

        assert "data_source" in inspect(engine).get_table_names()
        engine.dispose()

    def test_session_factory_keeps_objects_loaded(self, db_engine):
        factory = create_session_factory(db_engine)

        assert factory.kw["expire_on_commit"] is False
        assert factory.kw["autoflush"] is False

    def test_get_db_closes_session(self):
        generator = get_db()
        session = next(generator)

        assert session.is_active
        with pytest.raises(StopIteration):
            next(generator)
