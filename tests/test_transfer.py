"""Tests for TransferService."""

import pytest
from datetime import datetime
from decimal import Decimal

from conftest import JAN_1, JAN_15, OTHER_OWNER, OWNER
from pocketledger.domain.entities import SourceType
from pocketledger.domain.errors import NotFoundError, ValidationError


def _legs(temp_db, transfer_id):
    movements = temp_db.list_movements(OWNER, source_type=SourceType.TRANSFER, source_id=transfer_id)
    return sorted((m.account_id, m.amount) for m in movements)


def test_create_transfer_writes_two_legs(transfer_service, ledger_service, temp_db, sample_account, second_account):
    total_before = ledger_service.balance_of(OWNER, sample_account.id) + ledger_service.balance_of(
        OWNER, second_account.id
    )

    transfer = transfer_service.create_transfer(
        OWNER, sample_account.id, second_account.id, Decimal("5.00"), JAN_15, description="Cash"
    )

    assert transfer.amount == 500
    assert transfer.description == "Cash"
    assert _legs(temp_db, transfer.id) == sorted([(sample_account.id, -500), (second_account.id, 500)])
    total_after = ledger_service.balance_of(OWNER, sample_account.id) + ledger_service.balance_of(
        OWNER, second_account.id
    )
    assert total_after == total_before


@pytest.mark.parametrize("amount, cents", [(30, 3000), ("0.01", 1), (19.99, 1999)])
def test_create_transfer_converts_major_units(transfer_service, sample_account, second_account, amount, cents):
    transfer = transfer_service.create_transfer(OWNER, sample_account.id, second_account.id, amount, JAN_1)

    assert transfer.amount == cents


@pytest.mark.parametrize("amount", [0, -5, "1.234", "abc"])
def test_create_transfer_rejects_bad_amounts(transfer_service, temp_db, sample_account, second_account, amount):
    with pytest.raises(ValidationError):
        transfer_service.create_transfer(OWNER, sample_account.id, second_account.id, amount, JAN_1)

    assert temp_db.list_transfers(OWNER) == []


def test_create_transfer_to_same_account_is_rejected(transfer_service, sample_account):
    with pytest.raises(ValidationError, match="must differ"):
        transfer_service.create_transfer(OWNER, sample_account.id, sample_account.id, 10, JAN_1)


def test_create_transfer_with_foreign_account_is_bad_request(
    transfer_service, ledger_service, sample_account, foreign_account
):
    with pytest.raises(ValidationError, match="not found"):
        transfer_service.create_transfer(OWNER, sample_account.id, foreign_account.id, 10, JAN_1)

    assert ledger_service.balance_of(OWNER, sample_account.id) == 0


def test_create_transfer_with_archived_account_is_bad_request(
    transfer_service, account_service, sample_account, second_account
):
    account_service.archive_account(OWNER, second_account.id)

    with pytest.raises(ValidationError, match="archived"):
        transfer_service.create_transfer(OWNER, sample_account.id, second_account.id, 10, JAN_1)


def test_failed_leg_leaves_no_partial_rows(transfer_service, temp_db, monkeypatch, sample_account, second_account):
    """A failure after the transfer row is written rolls the whole unit back."""
    original = temp_db.record_movement
    calls = []

    def failing_record_movement(*args, **kwargs):
        calls.append(kwargs)
        if len(calls) == 2:
            raise RuntimeError("disk full")
        return original(*args, **kwargs)

    monkeypatch.setattr(temp_db, "record_movement", failing_record_movement)

    with pytest.raises(RuntimeError):
        transfer_service.create_transfer(OWNER, sample_account.id, second_account.id, 10, JAN_1)

    monkeypatch.undo()
    assert temp_db.list_transfers(OWNER) == []
    assert temp_db.list_movements(OWNER) == []


def test_update_transfer_amount_rebuilds_legs(transfer_service, ledger_service, temp_db, sample_account, second_account):
    transfer = transfer_service.create_transfer(OWNER, sample_account.id, second_account.id, 10, JAN_1)

    updated = transfer_service.update_transfer(OWNER, transfer.id, amount="25.50")

    assert updated.amount == 2550
    assert _legs(temp_db, transfer.id) == sorted([(sample_account.id, -2550), (second_account.id, 2550)])
    assert ledger_service.balance_of(OWNER, sample_account.id) == -2550


def test_update_transfer_destination_moves_leg(
    transfer_service, account_service, ledger_service, temp_db, sample_account, second_account
):
    savings = account_service.create_account(OWNER, name="Savings")
    transfer = transfer_service.create_transfer(OWNER, sample_account.id, second_account.id, 10, JAN_1)

    transfer_service.update_transfer(OWNER, transfer.id, to_account_id=savings.id)

    assert _legs(temp_db, transfer.id) == sorted([(sample_account.id, -1000), (savings.id, 1000)])
    assert ledger_service.balance_of(OWNER, second_account.id) == 0
    assert ledger_service.balance_of(OWNER, savings.id) == 1000


def test_update_transfer_date_moves_legs(transfer_service, temp_db, sample_account, second_account):
    transfer = transfer_service.create_transfer(OWNER, sample_account.id, second_account.id, 10, JAN_1)

    transfer_service.update_transfer(OWNER, transfer.id, occurred_at=JAN_15)

    movements = temp_db.list_movements(OWNER, source_type=SourceType.TRANSFER, source_id=transfer.id)
    assert [m.occurred_at for m in movements] == [JAN_15, JAN_15]


def test_update_transfer_description_keeps_legs(transfer_service, temp_db, sample_account, second_account):
    transfer = transfer_service.create_transfer(OWNER, sample_account.id, second_account.id, 10, JAN_1)
    legs_before = {m.id for m in temp_db.list_movements(OWNER, source_id=transfer.id)}

    updated = transfer_service.update_transfer(OWNER, transfer.id, description="Rent split")

    assert updated.description == "Rent split"
    assert {m.id for m in temp_db.list_movements(OWNER, source_id=transfer.id)} == legs_before


def test_update_transfer_rejects_same_accounts(transfer_service, sample_account, second_account):
    transfer = transfer_service.create_transfer(OWNER, sample_account.id, second_account.id, 10, JAN_1)

    with pytest.raises(ValidationError):
        transfer_service.update_transfer(OWNER, transfer.id, to_account_id=sample_account.id)


def test_update_transfer_failure_keeps_original_legs(
    transfer_service, temp_db, sample_account, second_account, foreign_account
):
    transfer = transfer_service.create_transfer(OWNER, sample_account.id, second_account.id, 10, JAN_1)

    with pytest.raises(ValidationError):
        transfer_service.update_transfer(OWNER, transfer.id, amount=20, to_account_id=foreign_account.id)

    assert _legs(temp_db, transfer.id) == sorted([(sample_account.id, -1000), (second_account.id, 1000)])
    assert temp_db.get_transfer(OWNER, transfer.id).amount == 1000


def test_update_missing_transfer_is_not_found(transfer_service):
    with pytest.raises(NotFoundError):
        transfer_service.update_transfer(OWNER, "missing", amount=1)


def test_delete_transfer_removes_row_and_legs(transfer_service, ledger_service, temp_db, sample_account, second_account):
    transfer = transfer_service.create_transfer(OWNER, sample_account.id, second_account.id, 10, JAN_1)

    result = transfer_service.delete_transfer(OWNER, transfer.id)

    assert result.found is True
    assert result.deleted.id == transfer.id
    assert transfer_service.get_transfer(OWNER, transfer.id) is None
    assert _legs(temp_db, transfer.id) == []
    assert ledger_service.balance_of(OWNER, sample_account.id) == 0


def test_delete_foreign_transfer_reports_not_found(transfer_service, temp_db, sample_account, second_account):
    transfer = transfer_service.create_transfer(OWNER, sample_account.id, second_account.id, 10, JAN_1)

    result = transfer_service.delete_transfer(OTHER_OWNER, transfer.id)

    assert result.found is False
    assert result.deleted is None
    assert len(_legs(temp_db, transfer.id)) == 2


def test_list_transfers_ordered_by_occurrence(transfer_service, sample_account, second_account):
    later = transfer_service.create_transfer(OWNER, sample_account.id, second_account.id, 1, JAN_15)
    earlier = transfer_service.create_transfer(OWNER, second_account.id, sample_account.id, 2, JAN_1)

    assert [t.id for t in transfer_service.list_transfers(OWNER)] == [earlier.id, later.id]
    assert transfer_service.list_transfers(OTHER_OWNER) == []
