"""Movement ledger service.

Balances are always recomputed from ``account_movements``; nothing caches
or stores them.
"""

from pocketledger.database.base import Database
from pocketledger.domain.entities import AccountBalance, CurrencyTotal, Movement
from pocketledger.domain.errors import NotFoundError, account_not_found, require_owner


class LedgerService:
    """Read-side queries over the movement ledger."""

    def __init__(self, db: Database):
        """Initialize ledger service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_visible_account(self, owner_id: str, account_id: str) -> str:
        owner_id = require_owner(owner_id)
        if self.db.get_account(owner_id, account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        return owner_id

    def balance_of(self, owner_id: str, account_id: str) -> int:
        """Return the running balance of an account in cents.

        Every movement counts regardless of when it occurred.

        Raises:
            NotFoundError: If the account does not belong to the caller
        """
        owner_id = self._require_visible_account(owner_id, account_id)
        return self.db.get_balance(owner_id, account_id)

    def list_accounts_with_balance(self, owner_id: str, include_archived: bool = False) -> list[AccountBalance]:
        """List the caller's accounts with their balances, newest first."""
        owner_id = require_owner(owner_id)
        return self.db.list_account_balances(owner_id, include_archived=include_archived)

    def get_account_with_balance(self, owner_id: str, account_id: str) -> AccountBalance:
        """Return one account (archived or not) with its balance."""
        owner_id = require_owner(owner_id)
        rows = self.db.list_account_balances(owner_id, include_archived=True, account_id=account_id)
        if not rows:
            raise NotFoundError(account_not_found(account_id))
        return rows[0]

    def total_balances(self, owner_id: str) -> list[CurrencyTotal]:
        """Sum active account balances per currency. Currencies are never converted."""
        owner_id = require_owner(owner_id)
        return self.db.get_currency_totals(owner_id)

    def list_movements(self, owner_id: str, account_id: str) -> list[Movement]:
        """List the movements of an account, newest first."""
        owner_id = self._require_visible_account(owner_id, account_id)
        return self.db.list_movements(owner_id, account_id=account_id)
