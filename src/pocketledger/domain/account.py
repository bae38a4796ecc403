"""Account domain service."""

import logging
from typing import Optional
from pocketledger.database.base import Database
from pocketledger.domain.entities import Account as AccountEntity, AccountType
from pocketledger.domain.errors import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
    account_delete_blocked,
    account_not_found,
    account_not_owned,
    duplicate_active_account,
    require_owner,
)

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = "BRL"
MAX_NAME_LENGTH = 255


def normalize_name(name: str) -> str:
    """Strip an account name and check it is usable."""
    name = (name or "").strip()
    if not name:
        raise ValidationError("Account name is required")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"Account name must be at most {MAX_NAME_LENGTH} characters")
    return name


def normalize_type(account_type: AccountType | str) -> AccountType:
    """Coerce an account type value, rejecting unknown ones."""
    try:
        return AccountType(account_type)
    except ValueError:
        allowed = ", ".join(t.value for t in AccountType)
        raise ValidationError(f"Invalid account type '{account_type}'. Expected one of: {allowed}") from None


def normalize_currency(currency: str) -> str:
    """Upper-case a three-letter currency code."""
    code = (currency or "").strip().upper()
    if len(code) != 3 or not code.isalpha():
        raise ValidationError(f"Invalid currency code '{currency}': expected three letters")
    return code


class AccountService:
    """Service for managing accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        owner_id: str,
        name: str,
        type: AccountType | str = AccountType.BANK,
        currency: str = DEFAULT_CURRENCY,
    ) -> AccountEntity:
        """Create a new active account.

        Args:
            owner_id: Owner of the account
            name: Account name
            type: Account type
            currency: Three-letter currency code

        Returns:
            The created account

        Raises:
            ConflictError: If an active account with the same name exists
            ValidationError: If a field is invalid
        """
        owner_id = require_owner(owner_id)
        name = normalize_name(name)
        account_type = normalize_type(type)
        currency = normalize_currency(currency)

        if self.db.find_active_account_by_name(owner_id, name) is not None:
            raise ConflictError(duplicate_active_account(name))

        account = self.db.create_account(owner_id=owner_id, name=name, type=account_type.value, currency=currency)
        logger.info("Created account %s (%s, %s) for owner %s", account.id, account_type.value, currency, owner_id)
        return account

    def get_account(self, owner_id: str, account_id: str) -> Optional[AccountEntity]:
        """Get account by ID.

        Returns:
            Account entity or None if not found
        """
        owner_id = require_owner(owner_id)
        return self.db.get_account(owner_id, account_id)

    def require_account(self, owner_id: str, account_id: str) -> AccountEntity:
        """Get account by ID or raise NotFoundError."""
        account = self.get_account(owner_id, account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def list_accounts(self, owner_id: str, include_archived: bool = False) -> list[AccountEntity]:
        """List accounts, newest first.

        Args:
            owner_id: Owner of the accounts
            include_archived: Include archived accounts

        Returns:
            List of account entities
        """
        owner_id = require_owner(owner_id)
        return self.db.list_accounts(owner_id, include_archived=include_archived)

    def update_account(
        self,
        owner_id: str,
        account_id: str,
        name: Optional[str] = None,
        type: Optional[AccountType | str] = None,
        currency: Optional[str] = None,
    ) -> AccountEntity:
        """Update name, type and/or currency of an account.

        Omitted fields keep their current value.

        Raises:
            NotFoundError: If the account does not belong to the caller
            ConflictError: If the new name collides with another active account
        """
        account = self.require_account(owner_id, account_id)

        if name is not None:
            name = normalize_name(name)
            if not account.is_archived:
                duplicate = self.db.find_active_account_by_name(account.owner_id, name, exclude_id=account_id)
                if duplicate is not None:
                    raise ConflictError(duplicate_active_account(name))

        return self.db.update_account(
            account.owner_id,
            account_id,
            name=name,
            type=normalize_type(type).value if type is not None else None,
            currency=normalize_currency(currency) if currency is not None else None,
        )

    def archive_account(self, owner_id: str, account_id: str) -> AccountEntity:
        """Archive an account. Its movements stay in the ledger."""
        account = self.require_account(owner_id, account_id)
        archived = self.db.set_account_archived(account.owner_id, account_id, archived=True)
        logger.info("Archived account %s", account_id)
        return archived

    def unarchive_account(self, owner_id: str, account_id: str) -> AccountEntity:
        """Reactivate an archived account.

        Raises:
            ConflictError: If an active account already uses the same name
        """
        account = self.require_account(owner_id, account_id)
        if account.is_archived:
            duplicate = self.db.find_active_account_by_name(account.owner_id, account.name, exclude_id=account_id)
            if duplicate is not None:
                raise ConflictError(duplicate_active_account(account.name))
        restored = self.db.set_account_archived(account.owner_id, account_id, archived=False)
        logger.info("Unarchived account %s", account_id)
        return restored

    def delete_account(self, owner_id: str, account_id: str) -> AccountEntity:
        """Delete an account that has never been used.

        Returns:
            The deleted account

        Raises:
            NotFoundError: If the account does not belong to the caller
            InvalidStateError: If any movement references the account
        """
        with self.db.transaction(serializable=True):
            account = self.require_account(owner_id, account_id)
            movement_count = self.db.count_account_movements(account_id)
            if movement_count > 0:
                raise InvalidStateError(account_delete_blocked(account_id, movement_count))
            self.db.delete_account(account.owner_id, account_id)

        logger.info("Deleted account %s", account_id)
        return account


def require_owned_account(db: Database, owner_id: str, account_id: str) -> AccountEntity:
    """Return the caller's account or raise ForbiddenError.

    Used by ledger writes, which report a foreign or missing account the same way.
    """
    owner_id = require_owner(owner_id)
    account = db.get_account(owner_id, account_id)
    if account is None:
        raise ForbiddenError(account_not_owned(account_id))
    return account


def require_int(value: object, field: str) -> int:
    """Check that a cents value is a plain integer."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer number of cents")
    return value
