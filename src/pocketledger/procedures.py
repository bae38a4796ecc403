"""Typed procedure boundary over the ledger services.

Each procedure takes a name, a mapping payload and the calling identity, and
returns a JSON-friendly envelope::

    {"ok": True, "data": ...}
    {"ok": False, "error": {"kind": "NotFound", "message": "..."}}

Payload keys and result keys are camelCase. Amount fields ending in ``Cents``
are integer minor units; ``amount`` on transfers is in major units.
"""

import dataclasses
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, UTC
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Optional
from pocketledger.database.base import Database
from pocketledger.domain.account import AccountService
from pocketledger.domain.adjustment import AdjustmentService
from pocketledger.domain.category import CategoryService
from pocketledger.domain.entities import PostingKind
from pocketledger.domain.errors import DomainError, NotFoundError, ValidationError, require_owner
from pocketledger.domain.ledger import LedgerService
from pocketledger.domain.opening import OpeningService
from pocketledger.domain.posting import PostingService
from pocketledger.domain.transfer import TransferService
from pocketledger.utils.date_parser import parse_date, parse_datetime

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class Caller:
    """Identity of whoever invokes a procedure. ``owner_id`` is None when unauthenticated."""

    owner_id: Optional[str]


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def to_payload(value: Any) -> Any:
    """Convert entities and results into JSON-friendly data."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {_camel(f.name): to_payload(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        # Stored timestamps are naive UTC
        return (value if value.tzinfo is not None else value.replace(tzinfo=UTC)).isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [to_payload(item) for item in value]
    if isinstance(value, dict):
        return {key: to_payload(item) for key, item in value.items()}
    return value


class Payload:
    """Read and coerce fields of a procedure payload.

    Every accessor raises ValidationError when a required field is missing or
    a value has the wrong shape.
    """

    def __init__(self, data: Any):
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise ValidationError("Payload must be an object")
        self.data = data

    def _get(self, key: str, required: bool) -> Any:
        value = self.data.get(key, _MISSING)
        if value is _MISSING or value is None:
            if required:
                raise ValidationError(f"Field '{key}' is required")
            return None
        return value

    def text(self, key: str, required: bool = True) -> Optional[str]:
        value = self._get(key, required)
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValidationError(f"Field '{key}' must be a string")
        return value

    def integer(self, key: str, required: bool = True) -> Optional[int]:
        value = self._get(key, required)
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"Field '{key}' must be an integer")
        return value

    def flag(self, key: str, default: bool = False) -> bool:
        value = self._get(key, required=False)
        if value is None:
            return default
        if not isinstance(value, bool):
            raise ValidationError(f"Field '{key}' must be a boolean")
        return value

    def number(self, key: str, required: bool = True) -> Optional[Decimal]:
        value = self._get(key, required)
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
            raise ValidationError(f"Field '{key}' must be a number")
        try:
            return value if isinstance(value, Decimal) else Decimal(str(value))
        except InvalidOperation:
            raise ValidationError(f"Field '{key}' must be a number") from None

    def texts(self, key: str, required: bool = True) -> Optional[list[str]]:
        value = self._get(key, required)
        if value is None:
            return None
        if not isinstance(value, (list, tuple)) or not all(isinstance(item, str) for item in value):
            raise ValidationError(f"Field '{key}' must be a list of strings")
        return list(value)

    def timestamp(self, key: str, required: bool = True) -> Optional[datetime]:
        value = self._get(key, required)
        if value is None:
            return None
        try:
            return parse_datetime(value)
        except ValueError as e:
            raise ValidationError(f"Field '{key}' must be an ISO-8601 timestamp: {e}") from e

    def day(self, key: str, required: bool = False) -> Optional[date]:
        value = self._get(key, required)
        if value is None:
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if not isinstance(value, str):
            raise ValidationError(f"Field '{key}' must be a date")
        try:
            return parse_date(value)
        except ValueError as e:
            raise ValidationError(f"Field '{key}' must be a date: {e}") from e


class LedgerProcedures:
    """Dispatch named procedures to the ledger services of one database handle."""

    def __init__(self, db: Database):
        """Initialize the procedure table.

        Args:
            db: Database instance, scoped to the current request
        """
        self.db = db
        self.accounts = AccountService(db)
        self.ledger = LedgerService(db)
        self.openings = OpeningService(db)
        self.transfers = TransferService(db)
        self.adjustments = AdjustmentService(db)
        self.postings = PostingService(db)
        self.categories = CategoryService(db)

        self._procedures: dict[str, Callable[[str, Payload], Any]] = {
            "accounts.create": self._accounts_create,
            "accounts.update": self._accounts_update,
            "accounts.archive": lambda owner, p: self.accounts.archive_account(owner, p.text("id")),
            "accounts.unarchive": lambda owner, p: self.accounts.unarchive_account(owner, p.text("id")),
            "accounts.delete": lambda owner, p: self.accounts.delete_account(owner, p.text("id")),
            "accounts.get": lambda owner, p: self.accounts.require_account(owner, p.text("id")),
            "accounts.list": lambda owner, p: self.accounts.list_accounts(
                owner, include_archived=p.flag("includeArchived")
            ),
            "accounts.listWithBalance": lambda owner, p: self.ledger.list_accounts_with_balance(
                owner, include_archived=p.flag("includeArchived")
            ),
            "accounts.getWithBalance": lambda owner, p: self.ledger.get_account_with_balance(owner, p.text("id")),
            "balances.totals": lambda owner, p: self.ledger.total_balances(owner),
            "balances.movements": lambda owner, p: self.ledger.list_movements(owner, p.text("accountId")),
            "openings.ensure": self._openings_ensure,
            "openings.get": lambda owner, p: self.openings.get_opening(owner, p.text("accountId")),
            "openings.list": lambda owner, p: self.openings.list_openings(owner),
            "openings.update": self._openings_update,
            "openings.delete": lambda owner, p: self.openings.delete_opening(owner, p.text("accountId")),
            "openings.applyAdjustment": self._openings_apply_adjustment,
            "transfers.create": self._transfers_create,
            "transfers.update": self._transfers_update,
            "transfers.delete": lambda owner, p: self.transfers.delete_transfer(owner, p.text("id")),
            "transfers.get": lambda owner, p: self.transfers.get_transfer(owner, p.text("id")),
            "transfers.list": lambda owner, p: self.transfers.list_transfers(owner),
            "categories.create": lambda owner, p: self.categories.create_category(
                owner,
                p.text("flow"),
                p.text("name"),
                parent_id=p.text("parentId", required=False),
                color=p.text("color", required=False),
            ),
            "categories.update": lambda owner, p: self.categories.update_category(
                owner,
                p.text("id"),
                name=p.text("name", required=False),
                color=p.text("color", required=False),
                parent_id=p.text("parentId", required=False),
                clear_parent=p.flag("clearParent"),
            ),
            "categories.archive": lambda owner, p: self.categories.archive_category(owner, p.text("id")),
            "categories.unarchive": lambda owner, p: self.categories.unarchive_category(owner, p.text("id")),
            "categories.get": lambda owner, p: self.categories.require_category(owner, p.text("id")),
            "categories.list": lambda owner, p: self.categories.list_categories(
                owner, flow=p.text("flow", required=False), include_archived=p.flag("includeArchived")
            ),
            "categories.tree": lambda owner, p: self.categories.get_category_tree(
                owner, flow=p.text("flow", required=False), include_archived=p.flag("includeArchived")
            ),
        }
        for kind in PostingKind:
            self._register_posting_procedures(kind)

    @property
    def names(self) -> list[str]:
        """Sorted names of every registered procedure."""
        return sorted(self._procedures)

    def call(self, name: str, payload: Optional[Mapping] = None, caller: Optional[Caller] = None) -> dict:
        """Run one procedure and wrap its outcome in a result envelope.

        Args:
            name: Procedure name, e.g. ``transfers.create``
            payload: Input fields
            caller: Calling identity

        Returns:
            ``{"ok": True, "data": ...}`` or ``{"ok": False, "error": {...}}``
        """
        try:
            procedure = self._procedures.get(name)
            if procedure is None:
                raise NotFoundError(f"Unknown procedure '{name}'")
            owner_id = require_owner(caller.owner_id if caller is not None else None)
            result = procedure(owner_id, Payload(payload))
        except DomainError as e:
            logger.info("Procedure %s failed with %s: %s", name, e.kind, e)
            return {"ok": False, "error": {"kind": e.kind, "message": str(e)}}
        except ValueError as e:
            logger.info("Procedure %s rejected input: %s", name, e)
            return {"ok": False, "error": {"kind": ValidationError.kind, "message": str(e)}}
        return {"ok": True, "data": to_payload(result)}

    def _accounts_create(self, owner_id: str, p: Payload):
        kwargs = {}
        if p.text("type", required=False) is not None:
            kwargs["type"] = p.text("type")
        if p.text("currency", required=False) is not None:
            kwargs["currency"] = p.text("currency")
        return self.accounts.create_account(owner_id, p.text("name"), **kwargs)

    def _accounts_update(self, owner_id: str, p: Payload):
        return self.accounts.update_account(
            owner_id,
            p.text("id"),
            name=p.text("name", required=False),
            type=p.text("type", required=False),
            currency=p.text("currency", required=False),
        )

    def _openings_ensure(self, owner_id: str, p: Payload):
        return self.openings.ensure_opening(
            owner_id,
            p.text("accountId"),
            amount_cents=p.integer("amountCents"),
            occurred_at=p.timestamp("occurredAt"),
            note=p.text("note", required=False),
        )

    def _openings_update(self, owner_id: str, p: Payload):
        return self.openings.update_opening(
            owner_id,
            p.text("accountId"),
            amount_cents=p.integer("amountCents", required=False),
            occurred_at=p.timestamp("occurredAt", required=False),
            note=p.text("note", required=False),
        )

    def _openings_apply_adjustment(self, owner_id: str, p: Payload):
        return self.adjustments.apply_adjustment(
            owner_id,
            p.text("accountId"),
            diff_cents=p.integer("diffCents"),
            occurred_at=p.timestamp("occurredAt"),
            note=p.text("note", required=False),
        )

    def _transfers_create(self, owner_id: str, p: Payload):
        return self.transfers.create_transfer(
            owner_id,
            p.text("fromAccountId"),
            p.text("toAccountId"),
            amount=p.number("amount"),
            occurred_at=p.timestamp("occurredAt"),
            description=p.text("description", required=False),
        )

    def _transfers_update(self, owner_id: str, p: Payload):
        return self.transfers.update_transfer(
            owner_id,
            p.text("id"),
            from_account_id=p.text("fromAccountId", required=False),
            to_account_id=p.text("toAccountId", required=False),
            amount=p.number("amount", required=False),
            occurred_at=p.timestamp("occurredAt", required=False),
            description=p.text("description", required=False),
        )

    def _register_posting_procedures(self, kind: PostingKind) -> None:
        prefix = f"{kind.value}s"
        postings = self.postings
        postings_by_category = self.categories.get_category_totals

        def create(owner_id: str, p: Payload):
            return postings.create_posting(
                owner_id,
                kind,
                p.text("accountId"),
                p.text("description"),
                amount_cents=p.integer("amountCents"),
                occurred_at=p.timestamp("occurredAt", required=False),
                category_id=p.text("categoryId", required=False),
            )

        def update(owner_id: str, p: Payload):
            return postings.update_posting(
                owner_id,
                kind,
                p.text("id"),
                account_id=p.text("accountId", required=False),
                description=p.text("description", required=False),
                amount_cents=p.integer("amountCents", required=False),
                occurred_at=p.timestamp("occurredAt", required=False),
                category_id=p.text("categoryId", required=False),
                clear_category=p.flag("clearCategory"),
            )

        def total(owner_id: str, p: Payload):
            return {"total": postings.total(owner_id, kind, start=p.day("startDate"), end=p.day("endDate"))}

        self._procedures.update(
            {
                f"{prefix}.create": create,
                f"{prefix}.update": update,
                f"{prefix}.delete": lambda owner, p: postings.delete_posting(owner, kind, p.text("id")),
                f"{prefix}.list": lambda owner, p: postings.list_postings(
                    owner, kind, start=p.day("startDate"), end=p.day("endDate")
                ),
                f"{prefix}.total": total,
                f"{prefix}.totalsByCategory": lambda owner, p: postings_by_category(
                    owner, kind, start=p.day("startDate"), end=p.day("endDate")
                ),
                f"{prefix}.deleteMany": lambda owner, p: {"ids": postings.delete_postings(owner, kind, p.texts("ids"))},
            }
        )
