"""Reconciliation adjustments."""

import logging
import uuid
from datetime import datetime
from typing import Optional
from pocketledger.database.base import Database
from pocketledger.domain.account import require_int, require_owned_account
from pocketledger.domain.entities import Movement, SourceType
from pocketledger.domain.errors import ValidationError
from pocketledger.domain.opening import check_note
from pocketledger.utils.date_parser import to_naive_utc

logger = logging.getLogger(__name__)

DEFAULT_ADJUSTMENT_NOTE = "Adjustment (reconciliation)"


class AdjustmentService:
    """Service for correcting an account balance to match reality.

    An adjustment has no source table: the movement is the record, and its
    id doubles as its source id.
    """

    def __init__(self, db: Database):
        """Initialize adjustment service.

        Args:
            db: Database instance
        """
        self.db = db

    def apply_adjustment(
        self,
        owner_id: str,
        account_id: str,
        diff_cents: int,
        occurred_at: datetime,
        note: Optional[str] = None,
    ) -> Movement:
        """Record a signed correction on an account.

        Args:
            owner_id: Caller
            account_id: Account to correct
            diff_cents: Non-zero signed difference in cents
            occurred_at: When the correction applies
            note: Optional note, defaults to "Adjustment (reconciliation)"

        Returns:
            The adjustment movement

        Raises:
            ValidationError: If diff_cents is zero
            ForbiddenError: If the account does not belong to the caller
        """
        require_int(diff_cents, "diff_cents")
        if diff_cents == 0:
            raise ValidationError("Adjustment difference must not be zero")
        account = require_owned_account(self.db, owner_id, account_id)
        check_note(note)

        adjustment_id = str(uuid.uuid4())
        with self.db.transaction():
            movement = self.db.record_movement(
                owner_id=account.owner_id,
                account_id=account_id,
                amount=diff_cents,
                occurred_at=to_naive_utc(occurred_at),
                source_type=SourceType.ADJUSTMENT,
                source_id=adjustment_id,
                note=note if note is not None else DEFAULT_ADJUSTMENT_NOTE,
                movement_id=adjustment_id,
            )

        logger.info("Adjusted account %s by %d cents", account_id, diff_cents)
        return movement
