"""CLI helpers for category resolution."""

from __future__ import annotations

import click
from pocketledger.domain.category import CategoryService
from pocketledger.domain.entities import PostingKind


def resolve_category_or_exit(ctx: click.Context, flow: PostingKind, category: str) -> str:
    """Resolve a category path or ID of the given flow, or exit with a CLI error."""
    service = CategoryService(ctx.obj["db"])
    owner = ctx.obj["owner"]
    category = (category or "").strip()

    found = service.get_category(owner, category)
    if found is None or found.flow is not flow:
        found = service.get_category_by_path(owner, flow, category)
    if found is None:
        click.echo(f"Error: {flow.value.capitalize()} category '{category}' not found", err=True)
        ctx.exit(1)
    return found.id
