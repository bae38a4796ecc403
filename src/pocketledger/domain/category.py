"""Category domain service."""

import logging
from datetime import date
from typing import Optional
from pocketledger.database.base import Database
from pocketledger.domain.entities import Category, CategoryNode, CategoryTotal, PostingKind
from pocketledger.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    category_not_found,
    duplicate_active_category,
    require_owner,
)
from pocketledger.domain.posting import normalize_kind
from pocketledger.utils.date_parser import day_bounds

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 120
MAX_COLOR_LENGTH = 24


def build_category_tree(categories: list[Category]) -> list[CategoryNode]:
    """Nest categories under their parents.

    Categories whose parent is not in the list become roots.
    """
    known = {cat.id for cat in categories}

    def build(parent_id: Optional[str]) -> list[CategoryNode]:
        return [
            CategoryNode(category=cat, subcategories=build(cat.id))
            for cat in categories
            if (cat.parent_id if cat.parent_id in known else None) == parent_id
        ]

    return build(None)


def _check_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Category name is required")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"Category name must be at most {MAX_NAME_LENGTH} characters")
    return name


def _check_color(color: Optional[str]) -> Optional[str]:
    if color is not None and len(color) > MAX_COLOR_LENGTH:
        raise ValidationError(f"Color must be at most {MAX_COLOR_LENGTH} characters")
    return color


class CategoryService:
    """Service for managing expense and income categories.

    Categories form a tree per flow: a subcategory always has the same flow
    as its parent. Categories are archived rather than deleted so past
    postings keep their category.
    """

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def _require_parent(self, owner_id: str, flow: PostingKind, parent_id: str) -> Category:
        parent = self.db.get_category(owner_id, parent_id)
        if parent is None:
            raise ValidationError(f"Parent category {parent_id} not found")
        if parent.flow is not flow:
            raise ValidationError(f"Parent category '{parent.name}' is not an {flow.value} category")
        if parent.is_archived:
            raise ValidationError(f"Parent category '{parent.name}' is archived")
        return parent

    def _check_unique(
        self, owner_id: str, flow: PostingKind, name: str, parent_id: Optional[str], exclude_id: Optional[str] = None
    ) -> None:
        existing = self.db.find_active_category(owner_id, flow, name, parent_id=parent_id)
        if existing is not None and existing.id != exclude_id:
            raise ConflictError(duplicate_active_category(name))

    def create_category(
        self,
        owner_id: str,
        flow: PostingKind | str,
        name: str,
        parent_id: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Category:
        """Create a category.

        Args:
            owner_id: Caller
            flow: expense or income
            name: Category name
            parent_id: Optional parent category, which must share the flow
            color: Optional display color

        Returns:
            The created category

        Raises:
            ValidationError: If a field or the parent is invalid
            ConflictError: If an active sibling already has this name
        """
        owner_id = require_owner(owner_id)
        flow = normalize_kind(flow)
        name = _check_name(name)
        color = _check_color(color)
        if parent_id is not None:
            self._require_parent(owner_id, flow, parent_id)
        self._check_unique(owner_id, flow, name, parent_id)

        category = self.db.create_category(owner_id, flow, name, parent_id=parent_id, color=color)
        logger.info("Created %s category %s (%s)", flow.value, category.id, name)
        return category

    def get_category(self, owner_id: str, category_id: str) -> Optional[Category]:
        """Get category by ID.

        Returns:
            Category or None if missing or owned by someone else
        """
        owner_id = require_owner(owner_id)
        return self.db.get_category(owner_id, category_id)

    def require_category(self, owner_id: str, category_id: str) -> Category:
        """Get category by ID, raising NotFoundError when it is not visible."""
        category = self.get_category(owner_id, category_id)
        if category is None:
            raise NotFoundError(category_not_found(category_id))
        return category

    def get_category_by_path(self, owner_id: str, flow: PostingKind | str, path: str) -> Optional[Category]:
        """Get an active category by path.

        Args:
            owner_id: Caller
            flow: expense or income
            path: Category path (e.g., "Food > Groceries")

        Returns:
            Category or None if not found
        """
        owner_id = require_owner(owner_id)
        flow = normalize_kind(flow)
        cat = None
        for part in (p.strip() for p in (path or "").split(">")):
            cat = self.db.find_active_category(owner_id, flow, part, parent_id=cat.id if cat else None)
            if cat is None:
                return None
        return cat

    def list_categories(
        self, owner_id: str, flow: Optional[PostingKind | str] = None, include_archived: bool = False
    ) -> list[Category]:
        """List categories ordered by name."""
        owner_id = require_owner(owner_id)
        flow = normalize_kind(flow) if flow is not None else None
        return self.db.list_categories(owner_id, flow=flow, include_archived=include_archived)

    def get_category_tree(
        self, owner_id: str, flow: Optional[PostingKind | str] = None, include_archived: bool = False
    ) -> list[CategoryNode]:
        """Get categories nested under their parents.

        Returns:
            Root categories with their subcategories
        """
        return build_category_tree(self.list_categories(owner_id, flow=flow, include_archived=include_archived))

    def update_category(
        self,
        owner_id: str,
        category_id: str,
        name: Optional[str] = None,
        color: Optional[str] = None,
        parent_id: Optional[str] = None,
        clear_parent: bool = False,
    ) -> Category:
        """Rename, recolor or move a category.

        Omitted fields keep their current value. ``clear_parent`` turns the
        category into a root.

        Raises:
            NotFoundError: If the category does not belong to the caller
            ValidationError: If the new parent is invalid or would create a cycle
            ConflictError: If an active sibling already has the name
        """
        current = self.require_category(owner_id, category_id)
        new_name = _check_name(name) if name is not None else current.name
        new_color = _check_color(color) if color is not None else current.color
        new_parent_id = None if clear_parent else (parent_id if parent_id is not None else current.parent_id)

        if parent_id is not None and not clear_parent:
            if parent_id == category_id:
                raise ValidationError("A category cannot be its own parent")
            parent = self._require_parent(current.owner_id, current.flow, parent_id)
            while parent.parent_id is not None:
                if parent.parent_id == category_id:
                    raise ValidationError("A category cannot be moved under one of its subcategories")
                parent = self.db.get_category(current.owner_id, parent.parent_id)
                if parent is None:
                    break
        if not current.is_archived:
            self._check_unique(current.owner_id, current.flow, new_name, new_parent_id, exclude_id=category_id)

        updated = self.db.update_category(
            current.owner_id, category_id, name=new_name, color=new_color, parent_id=new_parent_id
        )
        logger.info("Updated category %s", category_id)
        return updated

    def archive_category(self, owner_id: str, category_id: str) -> Category:
        """Archive a category. Postings keep referring to it."""
        current = self.require_category(owner_id, category_id)
        archived = self.db.set_category_archived(current.owner_id, category_id, True)
        logger.info("Archived category %s", category_id)
        return archived

    def unarchive_category(self, owner_id: str, category_id: str) -> Category:
        """Reactivate a category.

        Raises:
            ConflictError: If an active sibling took the name meanwhile
        """
        current = self.require_category(owner_id, category_id)
        self._check_unique(current.owner_id, current.flow, current.name, current.parent_id, exclude_id=category_id)
        restored = self.db.set_category_archived(current.owner_id, category_id, False)
        logger.info("Unarchived category %s", category_id)
        return restored

    def format_category_path(self, owner_id: str, category_id: str) -> str:
        """Get full path for a category.

        Args:
            owner_id: Caller
            category_id: Category ID

        Returns:
            Full category path (e.g., "Food > Groceries"), or "" when unknown
        """
        owner_id = require_owner(owner_id)
        cat = self.db.get_category(owner_id, category_id)
        if cat is None:
            return ""

        path_parts = [cat.name]
        seen = {cat.id}
        current_parent_id = cat.parent_id

        while current_parent_id is not None and current_parent_id not in seen:
            parent = self.db.get_category(owner_id, current_parent_id)
            if parent is None:
                break
            path_parts.append(parent.name)
            seen.add(parent.id)
            current_parent_id = parent.parent_id

        return " > ".join(reversed(path_parts))

    def get_category_totals(
        self,
        owner_id: str,
        kind: PostingKind | str,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[CategoryTotal]:
        """Total expenses or incomes per category between two dates, both inclusive.

        Archived categories are included since past postings may use them.
        Postings without a category are not counted.

        Returns:
            Root categories with their own total, the total including all
            subcategories, and the subcategory totals nested below
        """
        owner_id = require_owner(owner_id)
        kind = normalize_kind(kind)
        start_at, end_at = day_bounds(start, end)
        totals = self.db.get_posting_totals_by_category(owner_id, kind, start=start_at, end=end_at)
        tree = build_category_tree(self.db.list_categories(owner_id, flow=kind, include_archived=True))

        def with_totals(node: CategoryNode) -> CategoryTotal:
            children = [with_totals(child) for child in node.subcategories]
            own = totals.get(node.category.id, 0)
            return CategoryTotal(
                category=node.category,
                total=own,
                tree_total=own + sum(child.tree_total for child in children),
                subcategories=children,
            )

        return [with_totals(node) for node in tree]
