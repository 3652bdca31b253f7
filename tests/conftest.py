"""Shared pytest fixtures for ledgerbook tests."""

import tempfile
import os
from datetime import date
import pytest

from ledgerbook.database.factories import create_memory_database, create_sqlite_database
from ledgerbook.domain.external import ExternalAccountService
from ledgerbook.domain.fx import StaticRatesConverter
from ledgerbook.domain.ledger import LedgerEngine
from ledgerbook.domain.reports import ReportService
from ledgerbook.domain.snapshot import SnapshotService

OWNER = "test-owner"


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
def memory_db():
    """Create an empty in-memory database."""
    db = create_memory_database()
    db.connect()
    db.initialize_schema()
    return db


@pytest.fixture(params=["memory", "sqlite"])
def any_db(request):
    """Run a test against both database backends."""
    if request.param == "memory":
        return request.getfixturevalue("memory_db")
    return request.getfixturevalue("temp_db")


@pytest.fixture
def converter():
    """Display converter with MXN as base: 1 MXN = 0.057 USD."""
    return StaticRatesConverter("MXN", {"USD": "0.057", "EUR": "0.05"})


@pytest.fixture
def engine(memory_db, converter):
    """Ledger engine with the default chart of accounts."""
    ledger = LedgerEngine(memory_db, OWNER, base_currency="MXN", converter=converter)
    ledger.initialize_default_accounts()
    return ledger


@pytest.fixture
def today():
    """Fixed clock for services that depend on the current date."""
    return lambda: date(2025, 11, 15)


@pytest.fixture
def reports(engine, today):
    """Report service over the default engine."""
    return ReportService(engine, today=today)


@pytest.fixture
def external_service(memory_db):
    """External account service sharing the engine's database."""
    return ExternalAccountService(memory_db, OWNER)


@pytest.fixture
def snapshot_service(memory_db, reports, today):
    """Snapshot service sharing the engine's database."""
    return SnapshotService(memory_db, OWNER, reports, today=today)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
