"""Tests for PostingService (expenses and incomes)."""

import pytest
from datetime import date, datetime, timedelta, timezone

from conftest import JAN_1, JAN_15, OTHER_OWNER, OWNER
from pocketledger.domain.entities import PostingKind, SourceType
from pocketledger.domain.errors import NotFoundError, ValidationError


def _movements(temp_db, source_id):
    return temp_db.list_movements(OWNER, source_id=source_id)


def test_expense_records_negative_movement(posting_service, ledger_service, temp_db, sample_account):
    expense = posting_service.create_posting(OWNER, "expense", sample_account.id, "Groceries", 2000, JAN_15)

    assert expense.kind is PostingKind.EXPENSE
    movements = _movements(temp_db, expense.id)
    assert [(m.amount, m.source_type, m.note) for m in movements] == [(-2000, SourceType.EXPENSE, "Groceries")]
    assert ledger_service.balance_of(OWNER, sample_account.id) == -2000


def test_income_records_positive_movement(posting_service, ledger_service, sample_account):
    posting_service.create_posting(OWNER, PostingKind.INCOME, sample_account.id, "Salary", 500000, JAN_1)

    assert ledger_service.balance_of(OWNER, sample_account.id) == 500000


def test_create_posting_defaults_to_now(posting_service, sample_account):
    posting = posting_service.create_posting(OWNER, "income", sample_account.id, "Gift", 100)

    assert posting.occurred_at is not None


@pytest.mark.parametrize("amount", [0, -1, 1.5, True])
def test_create_posting_rejects_bad_amounts(posting_service, sample_account, amount):
    with pytest.raises(ValidationError):
        posting_service.create_posting(OWNER, "expense", sample_account.id, "x", amount, JAN_1)


def test_create_posting_requires_description(posting_service, sample_account):
    with pytest.raises(ValidationError):
        posting_service.create_posting(OWNER, "expense", sample_account.id, "  ", 100, JAN_1)


def test_create_posting_rejects_unknown_kind(posting_service, sample_account):
    with pytest.raises(ValidationError):
        posting_service.create_posting(OWNER, "refund", sample_account.id, "x", 100, JAN_1)


def test_create_posting_on_archived_or_foreign_account(posting_service, account_service, sample_account, foreign_account):
    with pytest.raises(ValidationError):
        posting_service.create_posting(OWNER, "expense", foreign_account.id, "x", 100, JAN_1)

    account_service.archive_account(OWNER, sample_account.id)
    with pytest.raises(ValidationError, match="archived"):
        posting_service.create_posting(OWNER, "expense", sample_account.id, "x", 100, JAN_1)


def test_update_posting_replaces_movement(posting_service, ledger_service, temp_db, sample_account, second_account):
    expense = posting_service.create_posting(OWNER, "expense", sample_account.id, "Lunch", 3000, JAN_1)

    updated = posting_service.update_posting(
        OWNER, "expense", expense.id, account_id=second_account.id, amount_cents=4500
    )

    assert updated.account_id == second_account.id
    assert updated.amount == 4500
    assert updated.description == "Lunch"
    movements = _movements(temp_db, expense.id)
    assert [(m.account_id, m.amount) for m in movements] == [(second_account.id, -4500)]
    assert ledger_service.balance_of(OWNER, sample_account.id) == 0
    assert ledger_service.balance_of(OWNER, second_account.id) == -4500


def test_update_missing_posting_is_not_found(posting_service):
    with pytest.raises(NotFoundError, match="Income missing not found"):
        posting_service.update_posting(OWNER, "income", "missing", amount_cents=1)


def test_update_posting_is_kind_specific(posting_service, sample_account):
    expense = posting_service.create_posting(OWNER, "expense", sample_account.id, "Lunch", 3000, JAN_1)

    with pytest.raises(NotFoundError):
        posting_service.update_posting(OWNER, "income", expense.id, amount_cents=1)


def test_delete_posting(posting_service, ledger_service, temp_db, sample_account):
    income = posting_service.create_posting(OWNER, "income", sample_account.id, "Salary", 1000, JAN_1)

    result = posting_service.delete_posting(OWNER, "income", income.id)

    assert result.found is True
    assert result.deleted.id == income.id
    assert _movements(temp_db, income.id) == []
    assert ledger_service.balance_of(OWNER, sample_account.id) == 0


def test_delete_foreign_posting_reports_not_found(posting_service, temp_db, sample_account):
    income = posting_service.create_posting(OWNER, "income", sample_account.id, "Salary", 1000, JAN_1)

    result = posting_service.delete_posting(OTHER_OWNER, "income", income.id)

    assert result.found is False
    assert len(_movements(temp_db, income.id)) == 1


def test_list_and_total_include_whole_end_day(posting_service, sample_account):
    posting_service.create_posting(OWNER, "expense", sample_account.id, "a", 100, datetime(2024, 1, 1, 0, 0))
    posting_service.create_posting(OWNER, "expense", sample_account.id, "b", 200, datetime(2024, 1, 31, 22, 45))
    posting_service.create_posting(OWNER, "expense", sample_account.id, "c", 400, datetime(2024, 2, 1, 8, 0))
    posting_service.create_posting(OWNER, "income", sample_account.id, "d", 800, datetime(2024, 1, 10))

    postings = posting_service.list_postings(OWNER, "expense", start=date(2024, 1, 1), end=date(2024, 1, 31))

    assert [p.description for p in postings] == ["a", "b"]
    assert posting_service.total(OWNER, "expense", start=date(2024, 1, 1), end=date(2024, 1, 31)) == 300
    assert posting_service.total(OWNER, "expense") == 700
    assert posting_service.total(OWNER, "income") == 800
    assert posting_service.total(OTHER_OWNER, "income") == 0


def test_create_posting_converts_offsets_to_utc(posting_service, sample_account):
    brasilia = timezone(timedelta(hours=-3))
    posting = posting_service.create_posting(
        OWNER, "expense", sample_account.id, "Dinner", 5000, datetime(2024, 1, 31, 22, 0, tzinfo=brasilia)
    )

    assert posting.occurred_at == datetime(2024, 2, 1, 1, 0)
    assert posting_service.total(OWNER, "expense", end=date(2024, 1, 31)) == 0
    assert posting_service.total(OWNER, "expense", start=date(2024, 2, 1)) == 5000


def test_posting_with_category(posting_service, category_service, sample_account):
    food = category_service.create_category(OWNER, "expense", "Food")

    expense = posting_service.create_posting(
        OWNER, "expense", sample_account.id, "Lunch", 3000, JAN_1, category_id=food.id
    )

    assert expense.category_id == food.id
    assert posting_service.get_posting(OWNER, "expense", expense.id).category_id == food.id


def test_posting_category_must_match_kind_and_be_active(posting_service, category_service, sample_account):
    food = category_service.create_category(OWNER, "expense", "Food")
    salary = category_service.create_category(OWNER, "income", "Salary")

    with pytest.raises(ValidationError, match="not an expense category"):
        posting_service.create_posting(OWNER, "expense", sample_account.id, "x", 100, JAN_1, category_id=salary.id)
    with pytest.raises(ValidationError, match="Invalid category"):
        posting_service.create_posting(OWNER, "expense", sample_account.id, "x", 100, JAN_1, category_id="missing")

    category_service.archive_category(OWNER, food.id)
    with pytest.raises(ValidationError, match="archived"):
        posting_service.create_posting(OWNER, "expense", sample_account.id, "x", 100, JAN_1, category_id=food.id)


def test_foreign_category_is_invalid(posting_service, category_service, sample_account):
    theirs = category_service.create_category(OTHER_OWNER, "expense", "Food")

    with pytest.raises(ValidationError, match="Invalid category"):
        posting_service.create_posting(OWNER, "expense", sample_account.id, "x", 100, JAN_1, category_id=theirs.id)


def test_update_posting_category(posting_service, category_service, sample_account):
    food = category_service.create_category(OWNER, "expense", "Food")
    transport = category_service.create_category(OWNER, "expense", "Transport")
    expense = posting_service.create_posting(
        OWNER, "expense", sample_account.id, "Taxi", 3000, JAN_1, category_id=food.id
    )

    assert posting_service.update_posting(OWNER, "expense", expense.id, amount_cents=3500).category_id == food.id
    moved = posting_service.update_posting(OWNER, "expense", expense.id, category_id=transport.id)
    assert moved.category_id == transport.id
    cleared = posting_service.update_posting(OWNER, "expense", expense.id, clear_category=True)
    assert cleared.category_id is None


def test_delete_postings(posting_service, ledger_service, temp_db, sample_account):
    first = posting_service.create_posting(OWNER, "expense", sample_account.id, "a", 100, JAN_1)
    second = posting_service.create_posting(OWNER, "expense", sample_account.id, "b", 200, JAN_15)
    kept = posting_service.create_posting(OWNER, "expense", sample_account.id, "c", 400, JAN_15)

    deleted = posting_service.delete_postings(OWNER, "expense", [first.id, second.id, first.id])

    assert deleted == [first.id, second.id]
    assert _movements(temp_db, first.id) == []
    assert [p.id for p in posting_service.list_postings(OWNER, "expense")] == [kept.id]
    assert ledger_service.balance_of(OWNER, sample_account.id) == -400


def test_delete_postings_rolls_back_when_one_is_missing(posting_service, ledger_service, temp_db, sample_account):
    """Test one unknown ID leaves every posting and movement in place."""
    first = posting_service.create_posting(OWNER, "income", sample_account.id, "a", 100, JAN_1)
    second = posting_service.create_posting(OWNER, "income", sample_account.id, "b", 200, JAN_15)

    with pytest.raises(NotFoundError, match="Income missing not found"):
        posting_service.delete_postings(OWNER, "income", [first.id, "missing", second.id])

    assert len(posting_service.list_postings(OWNER, "income")) == 2
    assert len(_movements(temp_db, first.id)) == 1
    assert ledger_service.balance_of(OWNER, sample_account.id) == 300


def test_delete_postings_checks_ownership_and_kind(posting_service, sample_account):
    income = posting_service.create_posting(OWNER, "income", sample_account.id, "a", 100, JAN_1)

    with pytest.raises(NotFoundError):
        posting_service.delete_postings(OTHER_OWNER, "income", [income.id])
    with pytest.raises(NotFoundError):
        posting_service.delete_postings(OWNER, "expense", [income.id])
    with pytest.raises(ValidationError):
        posting_service.delete_postings(OWNER, "income", [])

    assert posting_service.get_posting(OWNER, "income", income.id) is not None
