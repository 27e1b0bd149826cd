"""Shared pytest fixtures for bankimport tests."""

import io
import os
import tempfile
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pytest

from bankimport.config import Settings, sqlite_url
from bankimport.database.factories import create_database
from bankimport.domain.account import AccountService
from bankimport.domain.category import CategoryService
from bankimport.domain.statement_import import StatementImportService
from bankimport.jobs.database_queue import DatabaseJobQueue
from bankimport.storage.local import LocalObjectStorage

TENANT_ID = "tenant-1"
OTHER_TENANT_ID = "tenant-2"
USER_ID = "user-1"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep tests away from the developer's environment and home directory."""
    for name in list(os.environ):
        if name.startswith("BANKIMPORT_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("BANKIMPORT_STORAGE_DIR", str(tmp_path / "env-objects"))


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_database(Settings(database_url=sqlite_url(db_path), storage_dir=None))
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    db.session_factory.kw["bind"].dispose()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def storage_dir(tmp_path):
    """Directory used as the object storage root."""
    return tmp_path / "objects"


@pytest.fixture
def settings(temp_db, storage_dir):
    """Settings pointing at the temporary database and storage."""
    return Settings(database_url=temp_db.database_url, storage_dir=str(storage_dir))


@pytest.fixture
def storage(storage_dir):
    """Local object storage in a temporary directory."""
    return LocalObjectStorage(storage_dir)


@pytest.fixture
def queue(temp_db):
    """Job queue backed by the temporary database."""
    return DatabaseJobQueue(temp_db)


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def import_service(temp_db, storage, queue, settings):
    """Statement import service with storage and queue configured."""
    return StatementImportService(temp_db, storage=storage, queue=queue, settings=settings)


@pytest.fixture
def sync_import_service(temp_db, settings):
    """Statement import service without storage or queue."""
    return StatementImportService(temp_db, settings=settings)


@pytest.fixture
def sample_account(account_service):
    """Create a GBP account with an opening balance of 1000.00."""
    account_id = account_service.create_account(
        tenant_id=TENANT_ID, name="Current Account", balance=Decimal("1000.00")
    )
    return account_service.get_account(TENANT_ID, account_id)


@pytest.fixture
def usd_account(account_service):
    """Create a USD account with a zero balance."""
    account_id = account_service.create_account(
        tenant_id=TENANT_ID, name="Checking", currency="USD"
    )
    return account_service.get_account(TENANT_ID, account_id)


@pytest.fixture
def default_category(category_service):
    """The tenant's Uncategorized category."""
    return category_service.resolve_default_category(TENANT_ID)


@pytest.fixture
def make_pdf():
    """Return a function that renders text lines into PDF bytes."""
    from reportlab.lib.pagesizes import A4
    from reportlab.pdfgen import canvas

    def _make_pdf(lines: list[str]) -> bytes:
        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=A4)
        pdf.setFont("Helvetica", 10)
        y = 800
        for line in lines:
            pdf.drawString(40, y, line)
            y -= 16
        pdf.showPage()
        pdf.save()
        return buffer.getvalue()

    return _make_pdf


@pytest.fixture
def make_xlsx():
    """Return a function that writes rows into XLSX bytes."""
    import openpyxl

    def _make_xlsx(rows: list[list]) -> bytes:
        workbook = openpyxl.Workbook()
        sheet = workbook.active
        for row in rows:
            sheet.append(row)
        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    return _make_xlsx


@pytest.fixture
def make_xls():
    """Return a function that writes rows into legacy XLS bytes.

    datetime values are written as date-formatted number cells, the way
    Excel stores them.
    """
    import xlwt

    date_style = xlwt.easyxf(num_format_str="DD/MM/YYYY")

    def _make_xls(rows: list[list]) -> bytes:
        workbook = xlwt.Workbook()
        sheet = workbook.add_sheet("Statement")
        for row_idx, row in enumerate(rows):
            for col_idx, value in enumerate(row):
                if isinstance(value, datetime):
                    sheet.write(row_idx, col_idx, value, date_style)
                elif value is not None:
                    sheet.write(row_idx, col_idx, value)
        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    return _make_xls


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
