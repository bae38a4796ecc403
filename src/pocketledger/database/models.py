"""SQLAlchemy models for the pocketledger database."""

import uuid
from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    String,
    ForeignKey,
    DateTime,
    BigInteger,
    Boolean,
    CheckConstraint,
    Index,
    UniqueConstraint,
    TypeDecorator,
    create_engine,
    false,
    func,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()

ACCOUNT_TYPES = ("bank", "cash", "credit_card", "ewallet", "other")
POSTING_KINDS = ("expense", "income")
SOURCE_TYPES = ("opening_balance", "expense", "income", "transfer", "adjustment")

# Isolation levels under which a reader could see a half-applied unit of work.
UNSAFE_ISOLATION_LEVELS = {"READ UNCOMMITTED", "AUTOCOMMIT"}


def _new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Current time as naive UTC."""
    return datetime.now(UTC).replace(tzinfo=None)


def _in_list(column: str, values: tuple[str, ...]) -> str:
    return f"{column} IN ({', '.join(repr(v) for v in values)})"


class UTCDateTime(TypeDecorator):
    """Timestamp stored as naive UTC.

    Offset-aware values are converted to UTC before they are written, so rows
    written with different offsets still sort and filter by instant.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(UTC).replace(tzinfo=None)
        return value


class Account(Base):
    """Account model. Balance is never stored; it is summed from movements."""

    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=_new_id)
    owner_id = Column(String, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    type = Column(String(16), nullable=False, default="bank")
    currency = Column(String(3), nullable=False, default="BRL")
    is_archived = Column(Boolean, default=False, nullable=False)
    archived_at = Column(UTCDateTime(), nullable=True)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, nullable=False)

    __table_args__ = (CheckConstraint(_in_list("type", ACCOUNT_TYPES), name="ck_accounts_type"),)


# Name uniqueness applies to active accounts only, compared case-insensitively.
Index(
    "uq_accounts_owner_name_active",
    Account.owner_id,
    func.lower(Account.name),
    unique=True,
    sqlite_where=Account.is_archived == false(),
    postgresql_where=Account.is_archived == false(),
)


class Movement(Base):
    """Signed ledger entry (cents; negative = outflow)."""

    __tablename__ = "account_movements"

    id = Column(String(36), primary_key=True, default=_new_id)
    owner_id = Column(String, nullable=False, index=True)
    account_id = Column(String(36), ForeignKey("accounts.id", ondelete="RESTRICT"), nullable=False, index=True)
    amount = Column(BigInteger, nullable=False)
    occurred_at = Column(UTCDateTime(), nullable=False)
    source_type = Column(String(20), nullable=False)
    source_id = Column(String(36), nullable=False)
    note = Column(String(255), nullable=True)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("source_type", "source_id", "account_id", name="uq_movements_source"),
        CheckConstraint(_in_list("source_type", SOURCE_TYPES), name="ck_movements_source_type"),
        Index("ix_movements_source", "source_type", "source_id"),
    )


class Opening(Base):
    """Declared starting balance, at most one per account."""

    __tablename__ = "account_openings"

    id = Column(String(36), primary_key=True, default=_new_id)
    owner_id = Column(String, nullable=False, index=True)
    account_id = Column(String(36), ForeignKey("accounts.id", ondelete="RESTRICT"), nullable=False, unique=True)
    amount = Column(BigInteger, nullable=False)
    occurred_at = Column(UTCDateTime(), nullable=False)
    note = Column(String(255), nullable=True)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)


class Transfer(Base):
    """Transfer between two accounts of one owner. Amount is positive cents."""

    __tablename__ = "transfers"

    id = Column(String(36), primary_key=True, default=_new_id)
    owner_id = Column(String, nullable=False, index=True)
    from_account_id = Column(String(36), ForeignKey("accounts.id", ondelete="RESTRICT"), nullable=False, index=True)
    to_account_id = Column(String(36), ForeignKey("accounts.id", ondelete="RESTRICT"), nullable=False, index=True)
    amount = Column(BigInteger, nullable=False)
    occurred_at = Column(UTCDateTime(), nullable=False)
    description = Column(String(255), nullable=True)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transfers_amount_positive"),
        CheckConstraint("from_account_id <> to_account_id", name="ck_transfers_distinct_accounts"),
    )


class Category(Base):
    """Expense or income category, optionally nested under a parent."""

    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=_new_id)
    owner_id = Column(String, nullable=False)
    flow = Column(String(8), nullable=False, default="expense")
    name = Column(String(120), nullable=False)
    color = Column(String(24), nullable=True)
    parent_id = Column(String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)
    is_archived = Column(Boolean, default=False, nullable=False)
    archived_at = Column(UTCDateTime(), nullable=True)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint(_in_list("flow", POSTING_KINDS), name="ck_categories_flow"),
        Index("ix_categories_owner_flow", "owner_id", "flow"),
    )


# Active names are unique among siblings, and among roots of the same flow.
Index(
    "uq_categories_sibling_name_active",
    Category.owner_id,
    Category.flow,
    Category.parent_id,
    Category.name,
    unique=True,
    sqlite_where=(Category.parent_id.isnot(None)) & (Category.is_archived == false()),
    postgresql_where=(Category.parent_id.isnot(None)) & (Category.is_archived == false()),
)
Index(
    "uq_categories_root_name_active",
    Category.owner_id,
    Category.flow,
    Category.name,
    unique=True,
    sqlite_where=(Category.parent_id.is_(None)) & (Category.is_archived == false()),
    postgresql_where=(Category.parent_id.is_(None)) & (Category.is_archived == false()),
)


class Expense(Base):
    """Expense source record; its movement carries the negated amount."""

    __tablename__ = "expenses"

    id = Column(String(36), primary_key=True, default=_new_id)
    owner_id = Column(String, nullable=False, index=True)
    account_id = Column(String(36), ForeignKey("accounts.id", ondelete="RESTRICT"), nullable=False, index=True)
    description = Column(String(255), nullable=False)
    amount = Column(BigInteger, nullable=False)
    occurred_at = Column(UTCDateTime(), nullable=False)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)

    __table_args__ = (CheckConstraint("amount >= 0", name="ck_expenses_amount_non_negative"),)


class Income(Base):
    """Income source record."""

    __tablename__ = "incomes"

    id = Column(String(36), primary_key=True, default=_new_id)
    owner_id = Column(String, nullable=False, index=True)
    account_id = Column(String(36), ForeignKey("accounts.id", ondelete="RESTRICT"), nullable=False, index=True)
    description = Column(String(255), nullable=False)
    amount = Column(BigInteger, nullable=False)
    occurred_at = Column(UTCDateTime(), nullable=False)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)

    __table_args__ = (CheckConstraint("amount >= 0", name="ck_incomes_amount_non_negative"),)


POSTING_MODELS = {"expense": Expense, "income": Income}


def create_session_factory(database_url: str, isolation_level: str | None = None) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory.

    Args:
        database_url: SQLAlchemy database URL
        isolation_level: Optional default isolation level for the engine

    Raises:
        ValueError: If the isolation level would let readers see uncommitted movements
    """
    engine_kwargs = {}
    if isolation_level is not None:
        if isolation_level.upper() in UNSAFE_ISOLATION_LEVELS:
            raise ValueError(f"Isolation level '{isolation_level}' is not supported")
        engine_kwargs["isolation_level"] = isolation_level.upper()
    engine = create_engine(database_url, echo=False, **engine_kwargs)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
