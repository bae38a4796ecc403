"""Expense and income commands."""

import click
from pocketledger.cli.account_resolution import resolve_account_or_exit
from pocketledger.cli.category_resolution import resolve_category_or_exit
from pocketledger.cli.date_filters import date_range_options, resolve_cli_date_range
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.cli.parsing import parse_cents_or_exit, parse_when_or_exit
from pocketledger.domain.account import AccountService
from pocketledger.domain.category import CategoryService
from pocketledger.domain.entities import CategoryTotal, PostingKind
from pocketledger.domain.posting import PostingService
from pocketledger.utils.amount_parser import format_cents


def _print_totals(totals: list[CategoryTotal], indent: int = 0) -> None:
    for t in totals:
        if not t.tree_total:
            continue
        name = ("  " * indent) + t.category.name
        click.echo(f"{name:40s} {format_cents(t.tree_total):>16s}")
        _print_totals(t.subcategories, indent + 1)


def _build_group(kind: PostingKind) -> click.Group:
    label = kind.value

    @click.group(name=label, help=f"Record {label}s against an account.")
    def group():
        pass

    @group.command("add")
    @click.argument("account", metavar="ACCOUNT")
    @click.argument("amount", metavar="AMOUNT")
    @click.argument("description", metavar="DESCRIPTION")
    @click.option("--date", "when", default="today", show_default=True, help=f"Date of the {label}")
    @click.option("--category", help="Category path or ID")
    @click.pass_context
    def add_posting(ctx, account: str, amount: str, description: str, when: str, category: str | None):
        """Record an amount with a description.

        Examples:
            pocketledger expense add "Nubank" 45.90 "Groceries"
            pocketledger expense add "Nubank" 45.90 "Groceries" --category "Food > Groceries"
            pocketledger income add "Nubank" 5000 "Salary" --date 2024-01-05
        """
        service = PostingService(ctx.obj["db"])
        account_id = resolve_account_or_exit(ctx, account)
        amount_cents = parse_cents_or_exit(ctx, amount)
        occurred_at = parse_when_or_exit(ctx, when)
        category_id = resolve_category_or_exit(ctx, kind, category) if category else None

        try:
            posting = service.create_posting(
                ctx.obj["owner"],
                kind,
                account_id,
                description,
                amount_cents,
                occurred_at=occurred_at,
                category_id=category_id,
            )
            click.echo(f"Recorded {label} of {format_cents(posting.amount)} (ID: {posting.id})")
        except ValueError as e:
            handle_domain_error(ctx, e)

    @group.command("list")
    @date_range_options
    @click.pass_context
    def list_postings(ctx, start_date: str | None, end_date: str | None, period: str | None):
        """List entries in a date range with their total."""
        db = ctx.obj["db"]
        owner = ctx.obj["owner"]
        start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, period=period)
        service = PostingService(db)

        postings = service.list_postings(owner, kind, start=start, end=end)
        if not postings:
            click.echo(f"No {label}s found.")
            return

        names = {acc.id: acc.name for acc in AccountService(db).list_accounts(owner, include_archived=True)}
        categories = CategoryService(db)
        click.echo(f"\n{label.capitalize()}s:")
        click.echo("-" * 80)
        for p in postings:
            click.echo(
                f"{p.occurred_at.date().isoformat()} | {names.get(p.account_id, p.account_id):20s} | "
                f"{format_cents(p.amount):>12s} | {p.description}"
                + (f" [{categories.format_category_path(owner, p.category_id)}]" if p.category_id else "")
            )
        click.echo("-" * 80)
        click.echo(f"Total: {format_cents(service.total(owner, kind, start=start, end=end))}")

    @group.command("by-category")
    @date_range_options
    @click.pass_context
    def by_category(ctx, start_date: str | None, end_date: str | None, period: str | None):
        """Show totals per category in a date range."""
        owner = ctx.obj["owner"]
        start, end = resolve_cli_date_range(ctx, start_date=start_date, end_date=end_date, period=period)

        service = CategoryService(ctx.obj["db"])
        totals = [t for t in service.get_category_totals(owner, kind, start=start, end=end) if t.tree_total]
        if not totals:
            click.echo(f"No categorized {label}s found.")
            return

        click.echo(f"\n{label.capitalize()}s by category:")
        click.echo("-" * 60)
        _print_totals(totals)
        click.echo("-" * 60)
        click.echo(f"Total: {format_cents(sum(t.tree_total for t in totals))}")

    @group.command("delete")
    @click.argument("posting_ids", nargs=-1, required=True, metavar="ID...")
    @click.pass_context
    def delete_postings(ctx, posting_ids: tuple[str, ...]):
        """Delete one or more entries by ID. Nothing is deleted if any ID is unknown."""
        service = PostingService(ctx.obj["db"])

        try:
            deleted = service.delete_postings(ctx.obj["owner"], kind, list(posting_ids))
            click.echo(f"Deleted {len(deleted)} {label}(s)")
        except ValueError as e:
            handle_domain_error(ctx, e)

    return group


def register_commands(cli):
    """Register expense and income commands with main CLI."""
    for kind in PostingKind:
        cli.add_command(_build_group(kind), name=kind.value)
