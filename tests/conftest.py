"""Shared pytest fixtures for pocketledger tests."""

import logging
import tempfile
import os
from datetime import datetime
import pytest

from pocketledger.database.factories import create_sqlite_database
from pocketledger.domain.account import AccountService
from pocketledger.domain.adjustment import AdjustmentService
from pocketledger.domain.category import CategoryService
from pocketledger.domain.ledger import LedgerService
from pocketledger.domain.opening import OpeningService
from pocketledger.domain.posting import PostingService
from pocketledger.domain.transfer import TransferService
from pocketledger.logging_config import remove_handlers

OWNER = "user-1"
OTHER_OWNER = "user-2"
JAN_1 = datetime(2024, 1, 1, 9, 0)
JAN_15 = datetime(2024, 1, 15, 12, 30)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def ledger_service(temp_db):
    """Create a LedgerService with a temporary database."""
    return LedgerService(temp_db)


@pytest.fixture
def opening_service(temp_db):
    """Create an OpeningService with a temporary database."""
    return OpeningService(temp_db)


@pytest.fixture
def transfer_service(temp_db):
    """Create a TransferService with a temporary database."""
    return TransferService(temp_db)


@pytest.fixture
def adjustment_service(temp_db):
    """Create an AdjustmentService with a temporary database."""
    return AdjustmentService(temp_db)


@pytest.fixture
def posting_service(temp_db):
    """Create a PostingService with a temporary database."""
    return PostingService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)

@pytest.fixture
def sample_account(account_service):
    """Create a sample bank account for OWNER."""
    return account_service.create_account(OWNER, name="Nubank")


@pytest.fixture
def second_account(account_service):
    """Create a second account for OWNER."""
    return account_service.create_account(OWNER, name="Wallet", type="cash")


@pytest.fixture
def foreign_account(account_service):
    """Create an account that belongs to OTHER_OWNER."""
    return account_service.create_account(OTHER_OWNER, name="Someone else's")


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def invoke(cli_runner, temp_db):
    """Run the CLI against the temporary database as OWNER."""
    from pocketledger.cli.main import cli

    def _invoke(*args, input=None):
        return cli_runner.invoke(
            cli, ["--db-path", temp_db.database_path, "--owner", OWNER, *args], input=input
        )

    return _invoke


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo logging configured by CLI invocations."""
    root = logging.getLogger()
    level = root.level
    yield
    remove_handlers()
    root.setLevel(level)
