"""Main CLI entry point."""

import click
from pocketledger.database.factories import create_database, create_sqlite_database
from pocketledger.logging_config import setup_logging

# Import and register all commands at module level
from pocketledger.cli.commands import (
    account,
    opening,
    transfer,
    adjust,
    posting,
    balance,
    category,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides POCKETLEDGER_DB_PATH environment variable)",
    envvar="POCKETLEDGER_DB_PATH",
)
@click.option(
    "--owner",
    default="local",
    show_default=True,
    help="Owner whose ledger is used (overrides POCKETLEDGER_OWNER environment variable)",
    envvar="POCKETLEDGER_OWNER",
)
@click.option("--verbose", "-v", is_flag=True, help="Log what the ledger is doing to stderr")
@click.pass_context
def cli(ctx, db_path: str | None, owner: str, verbose: bool):
    """Pocketledger - account balances for personal finance.

    Keep accounts, opening balances, expenses, incomes, transfers and
    reconciliation adjustments in one ledger. Balances are always computed
    from the recorded movements.
    """
    ctx.ensure_object(dict)
    setup_logging("DEBUG" if verbose else None)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path) if db_path else create_database()
        db.connect()
        db.initialize_schema()
        ctx.call_on_close(db.disconnect)
        ctx.obj["db"] = db
        ctx.obj["owner"] = owner


# Register all commands
account.register_commands(cli)
opening.register_commands(cli)
transfer.register_commands(cli)
adjust.register_commands(cli)
posting.register_commands(cli)
balance.register_commands(cli)
category.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
