"""Opening balance domain service."""

import logging
from datetime import datetime
from typing import Optional
from pocketledger.database.base import Database
from pocketledger.domain.account import require_int, require_owned_account
from pocketledger.domain.entities import Opening, OpeningSummary, SourceType
from pocketledger.domain.errors import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
    opening_locked,
    opening_not_found,
    require_owner,
)
from pocketledger.utils.date_parser import to_naive_utc

logger = logging.getLogger(__name__)

DEFAULT_OPENING_NOTE = "Opening balance"
MAX_NOTE_LENGTH = 255


def check_note(note: Optional[str]) -> Optional[str]:
    """Reject notes longer than the column allows."""
    if note is not None and len(note) > MAX_NOTE_LENGTH:
        raise ValidationError(f"Note must be at most {MAX_NOTE_LENGTH} characters")
    return note


class OpeningService:
    """Service for the declared starting balance of accounts.

    An opening is mirrored by exactly one ``opening_balance`` movement. Both
    are written in the same unit of work, and once any other movement exists
    on the account the pair is frozen.
    """

    def __init__(self, db: Database):
        """Initialize opening service.

        Args:
            db: Database instance
        """
        self.db = db

    def ensure_opening(
        self,
        owner_id: str,
        account_id: str,
        amount_cents: int,
        occurred_at: datetime,
        note: Optional[str] = None,
    ) -> Opening:
        """Create the opening of an account, or return the existing one unchanged.

        Args:
            owner_id: Caller
            account_id: Account to open
            amount_cents: Starting balance in cents (may be negative, e.g. a card)
            occurred_at: When the balance applied
            note: Optional note, defaults to "Opening balance"

        Returns:
            The opening (new or existing)

        Raises:
            ForbiddenError: If the account does not belong to the caller
        """
        account = require_owned_account(self.db, owner_id, account_id)
        require_int(amount_cents, "amount_cents")
        note = check_note(note)

        existing = self.db.get_opening_by_account(account.owner_id, account_id)
        if existing is not None:
            return existing

        try:
            with self.db.transaction():
                opening = self.db.create_opening(
                    owner_id=account.owner_id,
                    account_id=account_id,
                    amount=amount_cents,
                    occurred_at=to_naive_utc(occurred_at),
                    note=note if note is not None else DEFAULT_OPENING_NOTE,
                )
                self.db.record_movement(
                    owner_id=account.owner_id,
                    account_id=account_id,
                    amount=opening.amount,
                    occurred_at=opening.occurred_at,
                    source_type=SourceType.OPENING_BALANCE,
                    source_id=opening.id,
                    note=opening.note,
                )
        except ConflictError:
            # Lost a race with a concurrent ensure_opening for the same account
            existing = self.db.get_opening_by_account(account.owner_id, account_id)
            if existing is None:
                raise
            return existing

        logger.info("Opened account %s with %d cents", account_id, amount_cents)
        return opening

    def get_opening(self, owner_id: str, account_id: str) -> Optional[Opening]:
        """Get the opening of an account, or None when it has none."""
        account = require_owned_account(self.db, owner_id, account_id)
        return self.db.get_opening_by_account(account.owner_id, account_id)

    def list_openings(self, owner_id: str) -> list[OpeningSummary]:
        """List the caller's openings with account details, newest first."""
        owner_id = require_owner(owner_id)
        return self.db.list_openings(owner_id)

    def _require_unlocked_opening(self, owner_id: str, account_id: str, action: str) -> Opening:
        account = require_owned_account(self.db, owner_id, account_id)
        opening = self.db.get_opening_by_account(account.owner_id, account_id)
        if opening is None:
            raise NotFoundError(opening_not_found(account_id))
        if self.db.has_movements_other_than_opening(account_id):
            raise InvalidStateError(opening_locked(account_id, action))
        return opening

    def update_opening(
        self,
        owner_id: str,
        account_id: str,
        amount_cents: Optional[int] = None,
        occurred_at: Optional[datetime] = None,
        note: Optional[str] = None,
    ) -> Opening:
        """Change the opening of an account that has no other movements.

        Omitted fields keep their current value. The opening movement is
        rewritten to mirror the result exactly.

        Raises:
            ForbiddenError: If the account does not belong to the caller
            NotFoundError: If the account has no opening
            InvalidStateError: If other movements exist on the account
        """
        if amount_cents is not None:
            require_int(amount_cents, "amount_cents")
        check_note(note)

        with self.db.transaction(serializable=True):
            opening = self._require_unlocked_opening(owner_id, account_id, "update")
            new_amount = amount_cents if amount_cents is not None else opening.amount
            new_occurred_at = to_naive_utc(occurred_at) if occurred_at is not None else opening.occurred_at
            new_note = note if note is not None else opening.note

            updated = self.db.update_opening(
                opening.owner_id, opening.id, amount=new_amount, occurred_at=new_occurred_at, note=new_note
            )
            self.db.update_movements_by_source(
                opening.owner_id,
                SourceType.OPENING_BALANCE,
                opening.id,
                amount=updated.amount,
                occurred_at=updated.occurred_at,
                note=updated.note,
            )

        logger.info("Updated opening of account %s", account_id)
        return updated

    def delete_opening(self, owner_id: str, account_id: str) -> Opening:
        """Remove the opening of an account that has no other movements.

        Returns:
            The deleted opening

        Raises:
            ForbiddenError: If the account does not belong to the caller
            NotFoundError: If the account has no opening
            InvalidStateError: If other movements exist on the account
        """
        with self.db.transaction(serializable=True):
            opening = self._require_unlocked_opening(owner_id, account_id, "delete")
            self.db.delete_movements_by_source(opening.owner_id, SourceType.OPENING_BALANCE, opening.id)
            self.db.delete_opening(opening.owner_id, opening.id)

        logger.info("Deleted opening of account %s", account_id)
        return opening
