"""Expense and income postings.

A posting is a single-sided cash flow: an expense takes money out of one
account and an income puts money into one. Each posting owns exactly one
ledger movement carrying the signed amount.
"""

import logging
from datetime import date, datetime, UTC
from typing import Optional
from pocketledger.database.base import Database
from pocketledger.domain.account import require_int
from pocketledger.domain.entities import Account, Category, DeleteResult, Posting, PostingKind
from pocketledger.domain.errors import NotFoundError, ValidationError, posting_not_found, require_owner
from pocketledger.utils.date_parser import day_bounds, to_naive_utc

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 255


def normalize_kind(kind: PostingKind | str) -> PostingKind:
    """Coerce a posting kind value."""
    try:
        return PostingKind(kind)
    except ValueError:
        raise ValidationError(f"Invalid posting kind '{kind}'. Expected expense or income") from None


def normalize_description(description: str) -> str:
    description = (description or "").strip()
    if not description:
        raise ValidationError("Description is required")
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters")
    return description


def check_posting_amount(amount_cents: int) -> int:
    require_int(amount_cents, "amount_cents")
    if amount_cents < 1:
        raise ValidationError("Amount must be at least 1 cent")
    return amount_cents


class PostingService:
    """Service for recording expenses and incomes against accounts."""

    def __init__(self, db: Database):
        """Initialize posting service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_posting_account(self, owner_id: str, account_id: str) -> Account:
        account = self.db.get_account(owner_id, account_id)
        if account is None:
            raise ValidationError(f"Invalid account {account_id}")
        if account.is_archived:
            raise ValidationError(f"Account '{account.name}' is archived")
        return account

    def _require_posting_category(self, owner_id: str, kind: PostingKind, category_id: str) -> Category:
        category = self.db.get_category(owner_id, category_id)
        if category is None:
            raise ValidationError(f"Invalid category {category_id}")
        if category.is_archived:
            raise ValidationError(f"Category '{category.name}' is archived")
        if category.flow is not kind:
            raise ValidationError(f"Category '{category.name}' is not an {kind.value} category")
        return category

    def _record_movement(self, posting: Posting) -> None:
        self.db.record_movement(
            owner_id=posting.owner_id,
            account_id=posting.account_id,
            amount=posting.kind.sign * posting.amount,
            occurred_at=posting.occurred_at,
            source_type=posting.kind.source_type,
            source_id=posting.id,
            note=posting.description,
        )

    def create_posting(
        self,
        owner_id: str,
        kind: PostingKind | str,
        account_id: str,
        description: str,
        amount_cents: int,
        occurred_at: Optional[datetime] = None,
        category_id: Optional[str] = None,
    ) -> Posting:
        """Record an expense or income and its movement.

        Args:
            owner_id: Caller
            kind: expense or income
            account_id: Active account the money leaves or arrives on
            description: What the posting was for
            amount_cents: Positive amount in cents
            occurred_at: When it happened, defaults to now
            category_id: Optional category of the same kind

        Returns:
            The created posting

        Raises:
            ValidationError: If the account is missing, foreign or archived, or
                a field or the category is invalid
        """
        owner_id = require_owner(owner_id)
        kind = normalize_kind(kind)
        description = normalize_description(description)
        check_posting_amount(amount_cents)
        self._require_posting_account(owner_id, account_id)
        if category_id is not None:
            self._require_posting_category(owner_id, kind, category_id)

        with self.db.transaction():
            posting = self.db.create_posting(
                owner_id=owner_id,
                kind=kind,
                account_id=account_id,
                description=description,
                amount=amount_cents,
                occurred_at=to_naive_utc(occurred_at if occurred_at is not None else datetime.now(UTC)),
                category_id=category_id,
            )
            self._record_movement(posting)

        logger.info("Recorded %s %s of %d cents on %s", kind.value, posting.id, amount_cents, account_id)
        return posting

    def get_posting(self, owner_id: str, kind: PostingKind | str, posting_id: str) -> Optional[Posting]:
        """Get an expense or income by ID."""
        owner_id = require_owner(owner_id)
        return self.db.get_posting(owner_id, normalize_kind(kind), posting_id)

    def update_posting(
        self,
        owner_id: str,
        kind: PostingKind | str,
        posting_id: str,
        account_id: Optional[str] = None,
        description: Optional[str] = None,
        amount_cents: Optional[int] = None,
        occurred_at: Optional[datetime] = None,
        category_id: Optional[str] = None,
        clear_category: bool = False,
    ) -> Posting:
        """Update an expense or income and replace its movement.

        Omitted fields keep their current value. ``clear_category`` removes
        the category.

        Raises:
            NotFoundError: If the posting does not belong to the caller
            ValidationError: If the new account, the category or a field is invalid
        """
        owner_id = require_owner(owner_id)
        kind = normalize_kind(kind)
        if description is not None:
            description = normalize_description(description)
        if amount_cents is not None:
            check_posting_amount(amount_cents)

        with self.db.transaction():
            current = self.db.get_posting(owner_id, kind, posting_id)
            if current is None:
                raise NotFoundError(posting_not_found(kind.value, posting_id))
            if account_id is not None:
                self._require_posting_account(owner_id, account_id)
            if category_id is not None and not clear_category:
                self._require_posting_category(owner_id, kind, category_id)
            if clear_category:
                new_category_id = None
            else:
                new_category_id = category_id if category_id is not None else current.category_id

            self.db.delete_movements_by_source(owner_id, kind.source_type, posting_id)
            updated = self.db.update_posting(
                owner_id,
                kind,
                posting_id,
                account_id=account_id if account_id is not None else current.account_id,
                description=description if description is not None else current.description,
                amount=amount_cents if amount_cents is not None else current.amount,
                occurred_at=to_naive_utc(occurred_at) if occurred_at is not None else current.occurred_at,
                category_id=new_category_id,
            )
            self._record_movement(updated)

        logger.info("Updated %s %s", kind.value, posting_id)
        return updated

    def delete_posting(self, owner_id: str, kind: PostingKind | str, posting_id: str) -> DeleteResult:
        """Delete an expense or income and its movement.

        Returns:
            DeleteResult with ``found=False`` when the posting is missing or foreign
        """
        owner_id = require_owner(owner_id)
        kind = normalize_kind(kind)
        with self.db.transaction():
            posting = self.db.get_posting(owner_id, kind, posting_id)
            if posting is None:
                return DeleteResult(found=False)
            self.db.delete_movements_by_source(owner_id, kind.source_type, posting_id)
            self.db.delete_posting(owner_id, kind, posting_id)

        logger.info("Deleted %s %s", kind.value, posting_id)
        return DeleteResult(found=True, deleted=posting)

    def delete_postings(self, owner_id: str, kind: PostingKind | str, posting_ids: list[str]) -> list[str]:
        """Delete several expenses or incomes in one unit of work.

        Either every posting is deleted or none is.

        Args:
            owner_id: Caller
            kind: expense or income
            posting_ids: IDs to delete, duplicates are ignored

        Returns:
            The deleted IDs in request order

        Raises:
            ValidationError: If no ID is given
            NotFoundError: If any posting is missing or foreign
        """
        owner_id = require_owner(owner_id)
        kind = normalize_kind(kind)
        ids = list(dict.fromkeys(posting_ids or []))
        if not ids:
            raise ValidationError("At least one ID is required")

        with self.db.transaction():
            for posting_id in ids:
                if self.db.get_posting(owner_id, kind, posting_id) is None:
                    raise NotFoundError(posting_not_found(kind.value, posting_id))
                self.db.delete_movements_by_source(owner_id, kind.source_type, posting_id)
                self.db.delete_posting(owner_id, kind, posting_id)

        logger.info("Deleted %d %s postings", len(ids), kind.value)
        return ids

    def list_postings(
        self,
        owner_id: str,
        kind: PostingKind | str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[Posting]:
        """List expenses or incomes between two dates, both inclusive."""
        owner_id = require_owner(owner_id)
        start_at, end_at = day_bounds(start, end)
        return self.db.list_postings(owner_id, normalize_kind(kind), start=start_at, end=end_at)

    def total(
        self,
        owner_id: str,
        kind: PostingKind | str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> int:
        """Sum expense or income amounts between two dates, both inclusive."""
        owner_id = require_owner(owner_id)
        start_at, end_at = day_bounds(start, end)
        return self.db.get_posting_total(owner_id, normalize_kind(kind), start=start_at, end=end_at)
