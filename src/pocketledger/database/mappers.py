"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so domain entities stay stable
when the schema changes.
"""

from pocketledger.domain import entities as domain
from pocketledger.database.models import (
    Account as ORMAccount,
    Movement as ORMMovement,
    Opening as ORMOpening,
    Transfer as ORMTransfer,
    Expense as ORMExpense,
    Income as ORMIncome,
    Category as ORMCategory,
)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        owner_id=orm_account.owner_id,
        name=orm_account.name,
        type=domain.AccountType(orm_account.type),
        currency=orm_account.currency,
        is_archived=bool(orm_account.is_archived),
        archived_at=orm_account.archived_at,
        created_at=orm_account.created_at,
        updated_at=orm_account.updated_at,
    )


def movement_to_domain(orm_movement: ORMMovement) -> domain.Movement:
    """Convert SQLAlchemy Movement model to domain Movement entity."""
    return domain.Movement(
        id=orm_movement.id,
        owner_id=orm_movement.owner_id,
        account_id=orm_movement.account_id,
        amount=int(orm_movement.amount),
        occurred_at=orm_movement.occurred_at,
        source_type=domain.SourceType(orm_movement.source_type),
        source_id=orm_movement.source_id,
        note=orm_movement.note,
        created_at=orm_movement.created_at,
    )


def opening_to_domain(orm_opening: ORMOpening) -> domain.Opening:
    """Convert SQLAlchemy Opening model to domain Opening entity."""
    return domain.Opening(
        id=orm_opening.id,
        owner_id=orm_opening.owner_id,
        account_id=orm_opening.account_id,
        amount=int(orm_opening.amount),
        occurred_at=orm_opening.occurred_at,
        note=orm_opening.note,
        created_at=orm_opening.created_at,
    )


def transfer_to_domain(orm_transfer: ORMTransfer) -> domain.Transfer:
    """Convert SQLAlchemy Transfer model to domain Transfer entity."""
    return domain.Transfer(
        id=orm_transfer.id,
        owner_id=orm_transfer.owner_id,
        from_account_id=orm_transfer.from_account_id,
        to_account_id=orm_transfer.to_account_id,
        amount=int(orm_transfer.amount),
        occurred_at=orm_transfer.occurred_at,
        description=orm_transfer.description,
        created_at=orm_transfer.created_at,
    )


def posting_to_domain(orm_posting: ORMExpense | ORMIncome) -> domain.Posting:
    """Convert SQLAlchemy Expense or Income model to domain Posting entity."""
    kind = domain.PostingKind.EXPENSE if isinstance(orm_posting, ORMExpense) else domain.PostingKind.INCOME
    return domain.Posting(
        id=orm_posting.id,
        owner_id=orm_posting.owner_id,
        kind=kind,
        account_id=orm_posting.account_id,
        description=orm_posting.description,
        amount=int(orm_posting.amount),
        occurred_at=orm_posting.occurred_at,
        created_at=orm_posting.created_at,
        category_id=orm_posting.category_id,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        owner_id=orm_category.owner_id,
        flow=domain.PostingKind(orm_category.flow),
        name=orm_category.name,
        color=orm_category.color,
        parent_id=orm_category.parent_id,
        is_archived=bool(orm_category.is_archived),
        archived_at=orm_category.archived_at,
        created_at=orm_category.created_at,
    )
