"""Domain model entities for pocketledger.

These are pure data classes representing business concepts, independent of
database schema. Amounts are integer minor units (cents) throughout.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class AccountType(str, Enum):
    """Kind of place money sits."""

    BANK = "bank"
    CASH = "cash"
    CREDIT_CARD = "credit_card"
    EWALLET = "ewallet"
    OTHER = "other"


class SourceType(str, Enum):
    """Operation that produced a ledger movement."""

    OPENING_BALANCE = "opening_balance"
    EXPENSE = "expense"
    INCOME = "income"
    TRANSFER = "transfer"
    ADJUSTMENT = "adjustment"


class PostingKind(str, Enum):
    """Single-sided cash flows recorded against one account."""

    EXPENSE = "expense"
    INCOME = "income"

    @property
    def sign(self) -> int:
        return -1 if self is PostingKind.EXPENSE else 1

    @property
    def source_type(self) -> SourceType:
        return SourceType(self.value)


@dataclass(frozen=True)
class Account:
    """Account domain entity."""

    id: str
    owner_id: str
    name: str
    type: AccountType
    currency: str
    is_archived: bool
    archived_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class AccountBalance:
    """Account together with the sum of its movements."""

    account: Account
    balance: int


@dataclass(frozen=True)
class CurrencyTotal:
    """Sum of active account balances in one currency."""

    currency: str
    total: int


@dataclass(frozen=True)
class Movement:
    """Signed ledger entry affecting exactly one account."""

    id: str
    owner_id: str
    account_id: str
    amount: int
    occurred_at: datetime
    source_type: SourceType
    source_id: str
    note: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Opening:
    """Declared starting balance of an account."""

    id: str
    owner_id: str
    account_id: str
    amount: int
    occurred_at: datetime
    note: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class OpeningSummary:
    """Opening joined with the account it belongs to."""

    opening: Opening
    account_name: str
    account_type: AccountType
    account_currency: str


@dataclass(frozen=True)
class Transfer:
    """Movement of funds between two accounts of the same owner."""

    id: str
    owner_id: str
    from_account_id: str
    to_account_id: str
    amount: int
    occurred_at: datetime
    description: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Posting:
    """Expense or income recorded against one account."""

    id: str
    owner_id: str
    kind: PostingKind
    account_id: str
    description: str
    amount: int
    occurred_at: datetime
    created_at: datetime
    category_id: Optional[str] = None


@dataclass(frozen=True)
class Category:
    """Expense or income category. A category with a parent is a subcategory."""

    id: str
    owner_id: str
    flow: PostingKind
    name: str
    color: Optional[str]
    parent_id: Optional[str]
    is_archived: bool
    archived_at: Optional[datetime]
    created_at: datetime


@dataclass(frozen=True)
class CategoryNode:
    """Category with its subcategories."""

    category: Category
    subcategories: list["CategoryNode"] = field(default_factory=list)


@dataclass(frozen=True)
class CategoryTotal:
    """Posting total of a category in a date range.

    ``total`` counts postings filed directly under the category and
    ``tree_total`` adds those of all its subcategories.
    """

    category: Category
    total: int
    tree_total: int
    subcategories: list["CategoryTotal"] = field(default_factory=list)


@dataclass(frozen=True)
class DeleteResult:
    """Outcome of a delete that may not find its target.

    ``found`` is False when the id does not exist or belongs to another
    owner; in that case nothing was touched and ``deleted`` is None.
    """

    found: bool
    deleted: Optional[object] = None
