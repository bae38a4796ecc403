"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Each subclass carries a machine-readable ``kind`` used by the procedure
    boundary when building error payloads. Subclasses keep ValueError
    compatibility so callers can keep catching ValueError.
    """

    kind = "BadRequest"


class UnauthorizedError(DomainError):
    """No authenticated caller."""

    kind = "Unauthorized"


class ForbiddenError(DomainError):
    """Caller is authenticated but does not own the resource."""

    kind = "Forbidden"


class ValidationError(DomainError):
    """Invalid input or a violated precondition."""

    kind = "BadRequest"


class NotFoundError(DomainError):
    """Requested entity does not exist or is not visible to the caller."""

    kind = "NotFound"


class ConflictError(DomainError):
    """Uniqueness violation, such as a duplicate active account name."""

    kind = "Conflict"


class InvalidStateError(DomainError):
    """Operation disallowed given the current ledger contents."""

    kind = "InvalidState"


def require_owner(owner_id: str | None) -> str:
    """Return the owner id, or raise UnauthorizedError when it is missing."""
    if not owner_id:
        raise UnauthorizedError("Authentication required")
    return owner_id


def account_not_found(account_id: str) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def account_not_owned(account_id: str) -> str:
    """Return message for an account that is missing or owned by someone else."""
    return f"Account {account_id} does not exist or does not belong to the caller"


def duplicate_active_account(name: str) -> str:
    """Return message for an active account name collision."""
    return f"An active account named '{name}' already exists"


def account_delete_blocked(account_id: str, movement_count: int) -> str:
    """Return message when an account still has ledger movements."""
    return (
        f"Cannot delete account {account_id}: it has {movement_count} "
        f"movement{'s' if movement_count != 1 else ''}. Archive it instead."
    )


def opening_not_found(account_id: str) -> str:
    """Return message for an account without an opening balance."""
    return f"No opening balance found for account {account_id}"


def opening_locked(account_id: str, action: str) -> str:
    """Return message when other movements pin the opening balance."""
    return f"Cannot {action} the opening balance of account {account_id}: other movements exist"


def transfer_not_found(transfer_id: str) -> str:
    """Return message for missing transfer."""
    return f"Transfer {transfer_id} not found"


def posting_not_found(kind: str, posting_id: str) -> str:
    """Return message for missing expense or income."""
    return f"{kind.capitalize()} {posting_id} not found"


def category_not_found(category_id: str) -> str:
    """Return message for missing category."""
    return f"Category {category_id} not found"


def duplicate_active_category(name: str) -> str:
    """Return message for an active category name collision among siblings."""
    return f"An active category named '{name}' already exists at this level"
