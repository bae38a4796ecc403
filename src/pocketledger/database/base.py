"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional
from datetime import datetime

# Import entities directly to avoid circular import through domain/__init__.py
from pocketledger.domain.entities import (
    Account,
    AccountBalance,
    Category,
    CurrencyTotal,
    Movement,
    Opening,
    OpeningSummary,
    Posting,
    PostingKind,
    SourceType,
    Transfer,
)


class Database(ABC):
    """Abstract database interface for pocketledger.

    Every query takes the owner explicitly; implementations must never
    return rows belonging to another owner.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def transaction(self, serializable: bool = False) -> AbstractContextManager[None]:
        """Open a unit of work.

        Writes made inside the block are committed together when it exits
        normally and rolled back when it raises. Nested blocks join the
        outermost one.

        Args:
            serializable: Request SERIALIZABLE isolation where the backend supports it
        """
        pass

    # Account operations
    @abstractmethod
    def create_account(self, owner_id: str, name: str, type: str, currency: str) -> Account:
        """Create a new active account."""
        pass

    @abstractmethod
    def get_account(self, owner_id: str, account_id: str) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def find_active_account_by_name(
        self, owner_id: str, name: str, exclude_id: Optional[str] = None
    ) -> Optional[Account]:
        """Find an active account whose name matches case-insensitively."""
        pass

    @abstractmethod
    def list_accounts(self, owner_id: str, include_archived: bool = False) -> list[Account]:
        """List accounts, newest first."""
        pass

    @abstractmethod
    def update_account(
        self,
        owner_id: str,
        account_id: str,
        name: Optional[str] = None,
        type: Optional[str] = None,
        currency: Optional[str] = None,
    ) -> Account:
        """Update the given account fields."""
        pass

    @abstractmethod
    def set_account_archived(self, owner_id: str, account_id: str, archived: bool) -> Account:
        """Archive or unarchive an account."""
        pass

    @abstractmethod
    def delete_account(self, owner_id: str, account_id: str) -> None:
        """Hard-delete an account."""
        pass

    # Movement operations
    @abstractmethod
    def record_movement(
        self,
        owner_id: str,
        account_id: str,
        amount: int,
        occurred_at: datetime,
        source_type: SourceType,
        source_id: str,
        note: Optional[str] = None,
        movement_id: Optional[str] = None,
    ) -> Movement:
        """Append one movement. Only called from inside a unit of work."""
        pass

    @abstractmethod
    def update_movements_by_source(
        self,
        owner_id: str,
        source_type: SourceType,
        source_id: str,
        amount: int,
        occurred_at: datetime,
        note: Optional[str],
    ) -> int:
        """Rewrite the movements of one source in place. Returns rows updated."""
        pass

    @abstractmethod
    def delete_movements_by_source(self, owner_id: str, source_type: SourceType, source_id: str) -> int:
        """Delete the movements of one source. Returns rows deleted."""
        pass

    @abstractmethod
    def list_movements(
        self,
        owner_id: str,
        account_id: Optional[str] = None,
        source_type: Optional[SourceType] = None,
        source_id: Optional[str] = None,
    ) -> list[Movement]:
        """List movements, newest first, with optional filters."""
        pass

    @abstractmethod
    def count_account_movements(self, account_id: str) -> int:
        """Count movements referencing an account."""
        pass

    @abstractmethod
    def has_movements_other_than_opening(self, account_id: str) -> bool:
        """Check whether an account has any movement not tied to its opening."""
        pass

    @abstractmethod
    def get_balance(self, owner_id: str, account_id: str) -> int:
        """Sum of all movement amounts of an account (0 when none)."""
        pass

    @abstractmethod
    def list_account_balances(
        self, owner_id: str, include_archived: bool = False, account_id: Optional[str] = None
    ) -> list[AccountBalance]:
        """List accounts with their aggregated balance, newest first."""
        pass

    @abstractmethod
    def get_currency_totals(self, owner_id: str) -> list[CurrencyTotal]:
        """Sum balances of active accounts grouped by currency."""
        pass

    # Opening operations
    @abstractmethod
    def create_opening(
        self, owner_id: str, account_id: str, amount: int, occurred_at: datetime, note: Optional[str]
    ) -> Opening:
        """Create an opening row."""
        pass

    @abstractmethod
    def get_opening_by_account(self, owner_id: str, account_id: str) -> Optional[Opening]:
        """Get the opening of an account."""
        pass

    @abstractmethod
    def update_opening(
        self, owner_id: str, opening_id: str, amount: int, occurred_at: datetime, note: Optional[str]
    ) -> Opening:
        """Overwrite the opening fields."""
        pass

    @abstractmethod
    def delete_opening(self, owner_id: str, opening_id: str) -> None:
        """Delete an opening row."""
        pass

    @abstractmethod
    def list_openings(self, owner_id: str) -> list[OpeningSummary]:
        """List openings joined with their account, newest first."""
        pass

    # Transfer operations
    @abstractmethod
    def create_transfer(
        self,
        owner_id: str,
        from_account_id: str,
        to_account_id: str,
        amount: int,
        occurred_at: datetime,
        description: Optional[str] = None,
    ) -> Transfer:
        """Create a transfer row."""
        pass

    @abstractmethod
    def get_transfer(self, owner_id: str, transfer_id: str) -> Optional[Transfer]:
        """Get transfer by ID."""
        pass

    @abstractmethod
    def list_transfers(self, owner_id: str) -> list[Transfer]:
        """List transfers ordered by occurrence."""
        pass

    @abstractmethod
    def update_transfer(
        self,
        owner_id: str,
        transfer_id: str,
        from_account_id: str,
        to_account_id: str,
        amount: int,
        occurred_at: datetime,
        description: Optional[str],
    ) -> Transfer:
        """Overwrite the transfer fields."""
        pass

    @abstractmethod
    def delete_transfer(self, owner_id: str, transfer_id: str) -> None:
        """Delete a transfer row."""
        pass

    # Posting operations
    @abstractmethod
    def create_posting(
        self,
        owner_id: str,
        kind: PostingKind,
        account_id: str,
        description: str,
        amount: int,
        occurred_at: datetime,
        category_id: Optional[str] = None,
    ) -> Posting:
        """Create an expense or income row."""
        pass

    @abstractmethod
    def get_posting(self, owner_id: str, kind: PostingKind, posting_id: str) -> Optional[Posting]:
        """Get an expense or income by ID."""
        pass

    @abstractmethod
    def update_posting(
        self,
        owner_id: str,
        kind: PostingKind,
        posting_id: str,
        account_id: str,
        description: str,
        amount: int,
        occurred_at: datetime,
        category_id: Optional[str] = None,
    ) -> Posting:
        """Overwrite the expense or income fields."""
        pass

    @abstractmethod
    def delete_posting(self, owner_id: str, kind: PostingKind, posting_id: str) -> None:
        """Delete an expense or income row."""
        pass

    @abstractmethod
    def list_postings(
        self,
        owner_id: str,
        kind: PostingKind,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Posting]:
        """List expenses or incomes in [start, end), ordered by occurrence."""
        pass

    @abstractmethod
    def get_posting_total(
        self,
        owner_id: str,
        kind: PostingKind,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> int:
        """Sum of expense or income amounts in [start, end)."""
        pass

    @abstractmethod
    def get_posting_totals_by_category(
        self,
        owner_id: str,
        kind: PostingKind,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> dict[str, int]:
        """Sum of expense or income amounts in [start, end) per category id.

        Postings without a category are left out.
        """
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self,
        owner_id: str,
        flow: PostingKind,
        name: str,
        parent_id: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Category:
        """Create a category."""
        pass

    @abstractmethod
    def get_category(self, owner_id: str, category_id: str) -> Optional[Category]:
        """Get category by ID, or None if missing or owned by someone else."""
        pass

    @abstractmethod
    def find_active_category(
        self, owner_id: str, flow: PostingKind, name: str, parent_id: Optional[str] = None
    ) -> Optional[Category]:
        """Find the active category with this name under the same parent."""
        pass

    @abstractmethod
    def list_categories(
        self, owner_id: str, flow: Optional[PostingKind] = None, include_archived: bool = False
    ) -> list[Category]:
        """List categories ordered by name, optionally limited to one flow."""
        pass

    @abstractmethod
    def update_category(
        self,
        owner_id: str,
        category_id: str,
        name: str,
        color: Optional[str],
        parent_id: Optional[str],
    ) -> Category:
        """Overwrite the category fields."""
        pass

    @abstractmethod
    def set_category_archived(self, owner_id: str, category_id: str, archived: bool) -> Category:
        """Archive or reactivate a category."""
        pass
