"""Category management commands."""

import click
from pocketledger.cli.category_resolution import resolve_category_or_exit
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.category import CategoryService
from pocketledger.domain.entities import CategoryNode, PostingKind

FLOWS = [k.value for k in PostingKind]


def print_category_tree(nodes: list[CategoryNode], indent: int = 0) -> None:
    """Recursively print category tree."""
    for node in nodes:
        prefix = "  " * indent
        cat = node.category
        status = " (archived)" if cat.is_archived else ""
        click.echo(f"{prefix}{cat.name}{status} (ID: {cat.id})")
        print_category_tree(node.subcategories, indent + 1)


@click.group()
def category_group():
    """Manage expense and income categories."""
    pass


@category_group.command("list")
@click.option("--flow", type=click.Choice(FLOWS), help="Only show expense or income categories")
@click.option("--all", "include_archived", is_flag=True, help="Include archived categories")
@click.pass_context
def list_categories(ctx, flow: str | None, include_archived: bool):
    """List categories in tree format."""
    service = CategoryService(ctx.obj["db"])
    flows = [PostingKind(flow)] if flow else list(PostingKind)

    shown = False
    for kind in flows:
        tree = service.get_category_tree(ctx.obj["owner"], flow=kind, include_archived=include_archived)
        if not tree:
            continue
        shown = True
        click.echo(f"\n{kind.value.capitalize()} categories:")
        print_category_tree(tree)

    if not shown:
        click.echo("No categories found.")


@category_group.command("create")
@click.argument("name")
@click.option("--flow", type=click.Choice(FLOWS), default=PostingKind.EXPENSE.value, show_default=True)
@click.option("--parent", help="Parent category path (e.g., 'Food')")
@click.option("--color", help="Display color")
@click.pass_context
def create_category(ctx, name: str, flow: str, parent: str | None, color: str | None):
    """Create a new category.

    Examples:
        pocketledger category create "Food"
        pocketledger category create "Groceries" --parent "Food"
        pocketledger category create "Salary" --flow income
    """
    service = CategoryService(ctx.obj["db"])
    kind = PostingKind(flow)
    parent_id = resolve_category_or_exit(ctx, kind, parent) if parent else None

    try:
        category = service.create_category(ctx.obj["owner"], kind, name, parent_id=parent_id, color=color)
        parent_str = f" under '{parent}'" if parent else ""
        click.echo(f"Created category '{category.name}'{parent_str} (ID: {category.id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@category_group.command("update")
@click.argument("category", metavar="CATEGORY")
@click.option("--flow", type=click.Choice(FLOWS), default=PostingKind.EXPENSE.value, show_default=True)
@click.option("--name", help="New name")
@click.option("--color", help="New display color")
@click.option("--parent", help="New parent category path")
@click.option("--root", "make_root", is_flag=True, help="Move the category to the top level")
@click.pass_context
def update_category(
    ctx, category: str, flow: str, name: str | None, color: str | None, parent: str | None, make_root: bool
):
    """Rename, recolor or move a category given by path or ID."""
    if parent and make_root:
        click.echo("Error: Use either --parent or --root, not both", err=True)
        ctx.exit(1)

    service = CategoryService(ctx.obj["db"])
    kind = PostingKind(flow)
    category_id = resolve_category_or_exit(ctx, kind, category)
    parent_id = resolve_category_or_exit(ctx, kind, parent) if parent else None

    try:
        service.update_category(
            ctx.obj["owner"], category_id, name=name, color=color, parent_id=parent_id, clear_parent=make_root
        )
        click.echo(f"Updated category '{service.format_category_path(ctx.obj['owner'], category_id)}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@category_group.command("archive")
@click.argument("category", metavar="CATEGORY")
@click.option("--flow", type=click.Choice(FLOWS), default=PostingKind.EXPENSE.value, show_default=True)
@click.pass_context
def archive_category(ctx, category: str, flow: str):
    """Archive a category. Existing postings keep it."""
    service = CategoryService(ctx.obj["db"])
    category_id = resolve_category_or_exit(ctx, PostingKind(flow), category)

    try:
        archived = service.archive_category(ctx.obj["owner"], category_id)
        click.echo(f"Archived category '{archived.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@category_group.command("unarchive")
@click.argument("category_id", metavar="CATEGORY_ID")
@click.pass_context
def unarchive_category(ctx, category_id: str):
    """Reactivate an archived category by ID."""
    service = CategoryService(ctx.obj["db"])

    try:
        restored = service.unarchive_category(ctx.obj["owner"], category_id)
        click.echo(f"Unarchived category '{restored.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
