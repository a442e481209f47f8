"""Pytest configuration and fixtures."""

from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from openpyxl import Workbook
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from ctr_invoice.main import app
from ctr_invoice.models import get_db
from ctr_invoice.models.base import Base
from ctr_invoice.services.storage import storage_service


# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Invoice fixture geometry, in PDF points (y upward). Every word uses the
# same font size so the sheet anchor and the words share one descent.
FONT_SIZE = 9
ANCHOR_X = 50
ANCHOR_Y = 740


@pytest_asyncio.fixture
async def test_db() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(engine, expire_on_commit=False)

    async with async_session() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def client(test_db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client."""

    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def temp_storage(tmp_path: Path, monkeypatch) -> Path:
    """Point the storage service at a temporary directory."""
    storage_root = tmp_path / "storage"
    storage_root.mkdir()
    monkeypatch.setattr(storage_service, "storage_path", storage_root)
    return storage_root


@pytest.fixture
def ctr_template(tmp_path: Path) -> Path:
    """Create a CTR workbook template with a header row."""
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = "CTR"
    for cell, header in {
        "A3": "Tax District",
        "B3": "Invoice End Date",
        "D3": "Contract",
        "F3": "Invoice Number",
    }.items():
        worksheet[cell] = header

    path = tmp_path / "templates" / "ctr_template.xlsx"
    path.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(path)
    return path


def draw_invoice(c: canvas.Canvas) -> None:
    """Draw a two-page draft invoice laid out like the real one."""
    c.setFont("Helvetica", FONT_SIZE)

    # Top-left word defines the sheet anchor
    c.drawString(ANCHOR_X, ANCHOR_Y, "INVOICE")

    # Header values 442 right of the anchor, 97 and 115 below it
    c.drawString(ANCHOR_X + 442, ANCHOR_Y - 97, "INV-1001")
    c.drawString(ANCHOR_X + 442, ANCHOR_Y - 115, "C-7788")

    # Billing address block
    c.drawString(ANCHOR_X + 10, ANCHOR_Y - 200, "Louisville,")
    c.drawString(ANCHOR_X + 70, ANCHOR_Y - 200, "KY")
    c.drawString(ANCHOR_X + 90, ANCHOR_Y - 200, "40202")

    # Invoice period end
    c.drawString(ANCHOR_X + 102, ANCHOR_Y - 282, "31-Jan-2025")

    c.drawString(ANCHOR_X, 60, "Page 1")
    c.showPage()

    c.setFont("Helvetica", FONT_SIZE)
    c.drawString(ANCHOR_X, ANCHOR_Y, "Continued")
    c.drawString(ANCHOR_X + 442, ANCHOR_Y - 97, "INV-9999")
    c.drawString(ANCHOR_X, 60, "Page 2")
    c.showPage()


@pytest.fixture
def invoice_pdf(tmp_path: Path) -> Path:
    """Create a draft invoice PDF."""
    path = tmp_path / "invoice.pdf"
    c = canvas.Canvas(str(path), pagesize=letter)
    draw_invoice(c)
    c.save()
    return path


@pytest.fixture
def blank_pdf(tmp_path: Path) -> Path:
    """Create a PDF with one page and no text."""
    path = tmp_path / "blank.pdf"
    c = canvas.Canvas(str(path), pagesize=letter)
    c.showPage()
    c.save()
    return path
