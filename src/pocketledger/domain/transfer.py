"""Transfer domain service."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pocketledger.database.base import Database
from pocketledger.domain.entities import Account, DeleteResult, SourceType, Transfer
from pocketledger.domain.errors import NotFoundError, ValidationError, require_owner, transfer_not_found
from pocketledger.utils.amount_parser import to_cents
from pocketledger.utils.date_parser import to_naive_utc

logger = logging.getLogger(__name__)


def transfer_amount_to_cents(amount: Decimal | int | float | str) -> int:
    """Convert a transfer amount in major units to positive cents.

    Raises:
        ValidationError: If the amount is not positive or has more than two decimals
    """
    try:
        cents = to_cents(amount)
    except ValueError as e:
        raise ValidationError(str(e)) from e
    if cents <= 0:
        raise ValidationError("Transfer amount must be positive")
    return cents


class TransferService:
    """Service for moving funds between two accounts of the same owner.

    Each transfer owns exactly two movements: the amount leaves the source
    account and arrives on the destination account. The row and both
    movements are always written and removed together.
    """

    def __init__(self, db: Database):
        """Initialize transfer service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_transfer_account(self, owner_id: str, account_id: str) -> Account:
        account = self.db.get_account(owner_id, account_id)
        if account is None:
            raise ValidationError(f"Source or destination account {account_id} not found")
        if account.is_archived:
            raise ValidationError(f"Cannot transfer to or from archived account '{account.name}'")
        return account

    def _record_legs(self, transfer: Transfer) -> None:
        for account_id, amount in (
            (transfer.from_account_id, -transfer.amount),
            (transfer.to_account_id, transfer.amount),
        ):
            self.db.record_movement(
                owner_id=transfer.owner_id,
                account_id=account_id,
                amount=amount,
                occurred_at=transfer.occurred_at,
                source_type=SourceType.TRANSFER,
                source_id=transfer.id,
            )

    def create_transfer(
        self,
        owner_id: str,
        from_account_id: str,
        to_account_id: str,
        amount: Decimal | int | float | str,
        occurred_at: datetime,
        description: Optional[str] = None,
    ) -> Transfer:
        """Create a transfer between two active accounts.

        Args:
            owner_id: Caller, who must own both accounts
            from_account_id: Account the money leaves
            to_account_id: Account the money arrives on
            amount: Positive amount in major units, at most two decimals
            occurred_at: When the transfer happened
            description: Optional description

        Returns:
            The created transfer (amount in cents)

        Raises:
            ValidationError: If an account is missing, foreign or archived, the
                accounts are the same, or the amount is invalid
        """
        owner_id = require_owner(owner_id)
        if from_account_id == to_account_id:
            raise ValidationError("Source and destination accounts must differ")
        self._require_transfer_account(owner_id, from_account_id)
        self._require_transfer_account(owner_id, to_account_id)
        amount_cents = transfer_amount_to_cents(amount)

        with self.db.transaction():
            transfer = self.db.create_transfer(
                owner_id=owner_id,
                from_account_id=from_account_id,
                to_account_id=to_account_id,
                amount=amount_cents,
                occurred_at=to_naive_utc(occurred_at),
                description=description,
            )
            self._record_legs(transfer)

        logger.info("Transferred %d cents from %s to %s", amount_cents, from_account_id, to_account_id)
        return transfer

    def get_transfer(self, owner_id: str, transfer_id: str) -> Optional[Transfer]:
        """Get transfer by ID, or None if missing or foreign."""
        owner_id = require_owner(owner_id)
        return self.db.get_transfer(owner_id, transfer_id)

    def list_transfers(self, owner_id: str) -> list[Transfer]:
        """List the caller's transfers ordered by occurrence."""
        owner_id = require_owner(owner_id)
        return self.db.list_transfers(owner_id)

    def update_transfer(
        self,
        owner_id: str,
        transfer_id: str,
        from_account_id: Optional[str] = None,
        to_account_id: Optional[str] = None,
        amount: Optional[Decimal | int | float | str] = None,
        occurred_at: Optional[datetime] = None,
        description: Optional[str] = None,
    ) -> Transfer:
        """Update a transfer, rebuilding its movements when needed.

        Omitted fields keep their current value. When the amount, either
        account or the date changes, both movements are replaced from the
        merged fields. Everything happens in one unit of work.

        Raises:
            NotFoundError: If the transfer does not belong to the caller
            ValidationError: If a new account or the new amount is invalid
        """
        owner_id = require_owner(owner_id)
        amount_cents = transfer_amount_to_cents(amount) if amount is not None else None

        with self.db.transaction():
            current = self.db.get_transfer(owner_id, transfer_id)
            if current is None:
                raise NotFoundError(transfer_not_found(transfer_id))

            new_from = from_account_id if from_account_id is not None else current.from_account_id
            new_to = to_account_id if to_account_id is not None else current.to_account_id
            if new_from == new_to:
                raise ValidationError("Source and destination accounts must differ")
            if from_account_id is not None:
                self._require_transfer_account(owner_id, from_account_id)
            if to_account_id is not None:
                self._require_transfer_account(owner_id, to_account_id)

            new_amount = amount_cents if amount_cents is not None else current.amount
            new_occurred_at = to_naive_utc(occurred_at) if occurred_at is not None else current.occurred_at
            new_description = description if description is not None else current.description

            rebuild = (
                new_amount != current.amount
                or new_from != current.from_account_id
                or new_to != current.to_account_id
                or new_occurred_at != current.occurred_at
            )
            if rebuild:
                self.db.delete_movements_by_source(owner_id, SourceType.TRANSFER, transfer_id)

            updated = self.db.update_transfer(
                owner_id,
                transfer_id,
                from_account_id=new_from,
                to_account_id=new_to,
                amount=new_amount,
                occurred_at=new_occurred_at,
                description=new_description,
            )
            if rebuild:
                self._record_legs(updated)

        logger.info("Updated transfer %s%s", transfer_id, " (movements rebuilt)" if rebuild else "")
        return updated

    def delete_transfer(self, owner_id: str, transfer_id: str) -> DeleteResult:
        """Delete a transfer and both of its movements.

        Returns:
            DeleteResult with ``found=False`` when the transfer is missing or
            belongs to someone else; nothing is touched in that case.
        """
        owner_id = require_owner(owner_id)
        with self.db.transaction():
            transfer = self.db.get_transfer(owner_id, transfer_id)
            if transfer is None:
                return DeleteResult(found=False)
            self.db.delete_movements_by_source(owner_id, SourceType.TRANSFER, transfer_id)
            self.db.delete_transfer(owner_id, transfer_id)

        logger.info("Deleted transfer %s", transfer_id)
        return DeleteResult(found=True, deleted=transfer)
