"""Tests for the SQLAlchemy Database implementation."""

import pytest
from datetime import datetime

from conftest import JAN_1, OTHER_OWNER, OWNER
from pocketledger.database.factories import create_database, create_sqlite_database
from pocketledger.database.models import create_session_factory
from pocketledger.domain import entities
from pocketledger.domain.entities import PostingKind, SourceType
from pocketledger.domain.errors import ConflictError, NotFoundError


class TestDatabaseInterface:
    """Tests to verify Database interface returns domain models."""

    def test_create_and_get_account_returns_domain_model(self, temp_db):
        account = temp_db.create_account(OWNER, name="Nubank", type="bank", currency="BRL")

        fetched = temp_db.get_account(OWNER, account.id)

        assert isinstance(fetched, entities.Account)
        assert fetched.id == account.id
        assert fetched.name == "Nubank"
        assert fetched.is_archived is False
        assert isinstance(fetched.created_at, datetime)

    def test_get_account_is_scoped_to_owner(self, temp_db):
        account = temp_db.create_account(OWNER, name="Nubank", type="bank", currency="BRL")

        assert temp_db.get_account(OTHER_OWNER, account.id) is None
        assert temp_db.list_accounts(OTHER_OWNER) == []

    def test_partial_unique_index_rejects_active_duplicates(self, temp_db):
        """The index backs the service pre-check, ignoring case."""
        temp_db.create_account(OWNER, name="Nubank", type="bank", currency="BRL")

        with pytest.raises(ConflictError):
            temp_db.create_account(OWNER, name="NUBANK", type="bank", currency="BRL")

        # The session is usable again after the rollback
        assert len(temp_db.list_accounts(OWNER)) == 1

    def test_partial_unique_index_ignores_archived_and_other_owners(self, temp_db):
        first = temp_db.create_account(OWNER, name="Nubank", type="bank", currency="BRL")
        temp_db.set_account_archived(OWNER, first.id, archived=True)

        temp_db.create_account(OWNER, name="Nubank", type="bank", currency="BRL")
        temp_db.create_account(OTHER_OWNER, name="Nubank", type="bank", currency="BRL")

        assert len(temp_db.list_accounts(OWNER, include_archived=True)) == 2

    def test_movement_source_is_unique_per_account(self, temp_db):
        account = temp_db.create_account(OWNER, name="Nubank", type="bank", currency="BRL")
        temp_db.record_movement(OWNER, account.id, 100, JAN_1, SourceType.ADJUSTMENT, "src-1")

        with pytest.raises(ConflictError):
            temp_db.record_movement(OWNER, account.id, 100, JAN_1, SourceType.ADJUSTMENT, "src-1")

        assert temp_db.get_balance(OWNER, account.id) == 100

    def test_balance_aggregates_movements(self, temp_db):
        account = temp_db.create_account(OWNER, name="Nubank", type="bank", currency="BRL")
        empty = temp_db.create_account(OWNER, name="Empty", type="cash", currency="BRL")
        temp_db.record_movement(OWNER, account.id, 1000, JAN_1, SourceType.ADJUSTMENT, "a")
        temp_db.record_movement(OWNER, account.id, -250, JAN_1, SourceType.ADJUSTMENT, "b")

        assert temp_db.get_balance(OWNER, account.id) == 750
        balances = {row.account.id: row.balance for row in temp_db.list_account_balances(OWNER)}
        assert balances == {account.id: 750, empty.id: 0}

    def test_currency_totals_skip_archived_accounts(self, temp_db):
        brl = temp_db.create_account(OWNER, name="Nubank", type="bank", currency="BRL")
        usd = temp_db.create_account(OWNER, name="Wise", type="bank", currency="USD")
        old = temp_db.create_account(OWNER, name="Old", type="bank", currency="BRL")
        temp_db.record_movement(OWNER, brl.id, 1000, JAN_1, SourceType.ADJUSTMENT, "a")
        temp_db.record_movement(OWNER, usd.id, 300, JAN_1, SourceType.ADJUSTMENT, "b")
        temp_db.record_movement(OWNER, old.id, 5000, JAN_1, SourceType.ADJUSTMENT, "c")
        temp_db.set_account_archived(OWNER, old.id, archived=True)

        totals = temp_db.get_currency_totals(OWNER)

        assert [(t.currency, t.total) for t in totals] == [("BRL", 1000), ("USD", 300)]

    def test_update_missing_rows_raise_not_found(self, temp_db):
        with pytest.raises(NotFoundError):
            temp_db.update_account(OWNER, "missing", name="X")
        with pytest.raises(NotFoundError):
            temp_db.delete_transfer(OWNER, "missing")
        with pytest.raises(NotFoundError):
            temp_db.update_posting(OWNER, PostingKind.EXPENSE, "missing", "acc", "x", 1, JAN_1)

    def test_posting_range_is_half_open(self, temp_db):
        account = temp_db.create_account(OWNER, name="Nubank", type="bank", currency="BRL")
        temp_db.create_posting(OWNER, PostingKind.EXPENSE, account.id, "a", 100, datetime(2024, 1, 1))
        temp_db.create_posting(OWNER, PostingKind.EXPENSE, account.id, "b", 200, datetime(2024, 1, 31, 23, 59))
        temp_db.create_posting(OWNER, PostingKind.EXPENSE, account.id, "c", 400, datetime(2024, 2, 1))

        start, end = datetime(2024, 1, 1), datetime(2024, 2, 1)
        assert [p.description for p in temp_db.list_postings(OWNER, PostingKind.EXPENSE, start, end)] == ["a", "b"]
        assert temp_db.get_posting_total(OWNER, PostingKind.EXPENSE, start, end) == 300
        assert temp_db.get_posting_total(OWNER, PostingKind.INCOME) == 0


class TestUnitOfWork:
    """Tests for Database.transaction()."""

    def test_commits_on_success(self, temp_db):
        account = temp_db.create_account(OWNER, name="Nubank", type="bank", currency="BRL")
        with temp_db.transaction():
            temp_db.record_movement(OWNER, account.id, 100, JAN_1, SourceType.ADJUSTMENT, "a")
            temp_db.record_movement(OWNER, account.id, 200, JAN_1, SourceType.ADJUSTMENT, "b")

        other = create_sqlite_database(temp_db.database_path)
        try:
            assert other.get_balance(OWNER, account.id) == 300
        finally:
            other.disconnect()

    def test_rolls_back_everything_on_error(self, temp_db):
        account = temp_db.create_account(OWNER, name="Nubank", type="bank", currency="BRL")

        with pytest.raises(RuntimeError):
            with temp_db.transaction():
                temp_db.create_transfer(OWNER, account.id, "elsewhere", 500, JAN_1)
                temp_db.record_movement(OWNER, account.id, -500, JAN_1, SourceType.TRANSFER, "t")
                raise RuntimeError("boom")

        assert temp_db.list_transfers(OWNER) == []
        assert temp_db.get_balance(OWNER, account.id) == 0

    def test_constraint_violation_becomes_conflict_and_rolls_back(self, temp_db):
        account = temp_db.create_account(OWNER, name="Nubank", type="bank", currency="BRL")

        with pytest.raises(ConflictError):
            with temp_db.transaction():
                temp_db.record_movement(OWNER, account.id, 100, JAN_1, SourceType.ADJUSTMENT, "dup")
                temp_db.record_movement(OWNER, account.id, 100, JAN_1, SourceType.ADJUSTMENT, "dup")

        assert temp_db.get_balance(OWNER, account.id) == 0

    def test_nested_units_join_the_outer_one(self, temp_db):
        account = temp_db.create_account(OWNER, name="Nubank", type="bank", currency="BRL")

        with pytest.raises(RuntimeError):
            with temp_db.transaction():
                with temp_db.transaction(serializable=True):
                    temp_db.record_movement(OWNER, account.id, 100, JAN_1, SourceType.ADJUSTMENT, "inner")
                raise RuntimeError("outer fails")

        assert temp_db.get_balance(OWNER, account.id) == 0

    def test_sqlite_does_not_request_serializable(self, temp_db):
        assert temp_db.backend_name == "sqlite"
        assert temp_db.supports_serializable is False


class TestConfiguration:
    """Tests for factories and engine configuration."""

    @pytest.mark.parametrize("level", ["READ UNCOMMITTED", "autocommit"])
    def test_unsafe_isolation_levels_are_rejected(self, level):
        with pytest.raises(ValueError, match="not supported"):
            create_session_factory("sqlite://", isolation_level=level)

    def test_create_database_reads_url_from_environment(self, monkeypatch, tmp_path):
        db_file = tmp_path / "env.db"
        monkeypatch.setenv("POCKETLEDGER_DATABASE_URL", f"sqlite:///{db_file}")
        monkeypatch.delenv("POCKETLEDGER_ISOLATION_LEVEL", raising=False)

        db = create_database()
        try:
            account = db.create_account(OWNER, name="Nubank", type="bank", currency="BRL")
            assert db.get_account(OWNER, account.id) is not None
        finally:
            db.disconnect()
        assert db_file.exists()

    def test_create_sqlite_database_uses_env_path(self, monkeypatch, tmp_path):
        db_file = tmp_path / "from-env.db"
        monkeypatch.setenv("POCKETLEDGER_DB_PATH", str(db_file))

        db = create_sqlite_database()
        db.disconnect()

        assert db.database_url == f"sqlite:///{db_file}"
