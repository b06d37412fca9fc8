from types import SimpleNamespace

from sqlalchemy.exc import IntegrityError, OperationalError

from petads.exceptions.base import DuplicateError, ExecutionError
from petads.exceptions.mapper import extract_conflict_detail, map_conflict_error, map_execution_error


class FakePgError(Exception):
    def __init__(self, message: str, sqlstate: str, constraint_name: str | None = None, table_name: str | None = None):
        super().__init__(message)
        self.sqlstate = sqlstate
        self.diag = SimpleNamespace(constraint_name=constraint_name, table_name=table_name)


def integrity(orig: Exception) -> IntegrityError:
    return IntegrityError("INSERT ...", {}, orig)


class TestExtractConflictDetail:

    def test_postgres_key_detail(self):
        orig = FakePgError(
            'duplicate key value violates unique constraint "uq_users_email"\n'
            "DETAIL:  Key (email)=(a@b.com) already exists.",
            "23505",
            table_name="users",
        )

        detail = extract_conflict_detail(integrity(orig))

        assert detail.fields == ["email"]
        assert detail.values == ["a@b.com"]
        assert detail.table == "users"

    def test_postgres_composite_key(self):
        orig = FakePgError("DETAIL:  Key (user_id, ad_id)=(1, 2) already exists.", "23505", table_name="favorites")

        detail = extract_conflict_detail(integrity(orig))

        assert detail.fields == ["user_id", "ad_id"]
        assert detail.values == ["1", "2"]

    def test_sqlite_detail(self):
        detail = extract_conflict_detail(integrity(Exception("UNIQUE constraint failed: users.username")))

        assert detail.fields == ["username"]
        assert detail.values is None
        assert detail.table == "users"

    def test_mysql_detail(self):
        detail = extract_conflict_detail(integrity(Exception("Duplicate entry 'bob' for key 'users.username'")))

        assert detail.fields == ["username"]
        assert detail.values == ["bob"]
        assert detail.table == "users"

    def test_unparseable_message(self):
        assert tuple(extract_conflict_detail(integrity(Exception("boom")))) == (None, None, None)


class TestMapConflictError:

    def test_message_names_table_and_fields(self):
        error = map_conflict_error(integrity(Exception("UNIQUE constraint failed: users.email")))

        assert isinstance(error, DuplicateError)
        assert error.message == "users already exists for field(s): email"
        assert error.fields == ["email"]
        assert error.to_payload() == {"detail": error.message, "code": "duplicate", "fields": ["email"]}
        assert error.http_status() == 409

    def test_falls_back_to_constraint_name(self):
        orig = FakePgError("duplicate key value", "23505", constraint_name="uq_users_username")

        error = map_conflict_error(integrity(orig))

        assert error.constraint == "uq_users_username"
        assert "uq_users_username" in error.message
        # constraint names are for logs only
        assert "constraint" not in error.to_payload()


class TestMapExecutionError:

    def test_not_null_keeps_column(self):
        error = map_execution_error(integrity(Exception("NOT NULL constraint failed: ads.pet_name")), "create_ad")

        assert error.message == "Missing required field(s) for create_ad"
        assert error.fields == ["pet_name"]

    def test_foreign_key(self):
        error = map_execution_error(integrity(Exception("FOREIGN KEY constraint failed")), "favorite")

        assert error.message.startswith("Referenced entity not found")

    def test_generic_failure_hides_driver_text(self):
        exc = OperationalError("SELECT ...", {}, Exception("no such table: secrets"))

        error = map_execution_error(exc, "list_ads")

        assert isinstance(error, ExecutionError)
        assert error.message == "Failed to execute list_ads: OperationalError"
        assert "secrets" not in str(error)
        assert error.http_status() == 500
