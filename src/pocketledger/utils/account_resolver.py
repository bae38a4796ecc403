"""Utility for resolving account names to IDs."""

from pocketledger.domain.account import AccountService


def resolve_account(account_service: AccountService, owner_id: str, account: str) -> str:
    """Resolve account name or ID to account ID.

    IDs are matched exactly. Names are matched case-insensitively, preferring
    the active account over archived ones with the same name.

    Args:
        account_service: AccountService instance
        owner_id: Owner whose accounts are searched
        account: Account name or ID

    Returns:
        Account ID

    Raises:
        ValueError: If account is not found
    """
    account = (account or "").strip()
    if account_service.get_account(owner_id, account) is not None:
        return account

    matches = [
        acc
        for acc in account_service.list_accounts(owner_id, include_archived=True)
        if acc.name.lower() == account.lower()
    ]
    if not matches:
        raise ValueError(f"Account '{account}' not found")

    active = [acc for acc in matches if not acc.is_archived]
    return (active or matches)[0].id
