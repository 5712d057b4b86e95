from datetime import datetime, timezone
from decimal import Decimal

import pytest
from PIL import ImageFont

from pos.config import PRINTER_WIDTH_PX
from pos.models import Transaction, TransactionLine
from pos.printer import export_receipt_pdf, render_receipt_images, resolve_printer_font_path
from pos.receipt import compose_receipt


@pytest.fixture
def document():
    transaction = Transaction(
        transaction_id=1,
        transaction_number="TRX20261019143015123-0011223344",
        subtotal=Decimal("10000"),
        discount_rate=Decimal("0"),
        discount_amount=Decimal("0"),
        tax_rate=Decimal("10"),
        tax_amount=Decimal("1000"),
        total_amount=Decimal("11000"),
        payment_method="cash",
        cashier_id="cashier-01",
        created_at=datetime(2026, 10, 19, 9, 5, tzinfo=timezone.utc),
    )
    lines = [TransactionLine(1, "kopi", "Kopi Tubruk Spesial Dengan Gula Aren", 1, Decimal("10000"), Decimal("10000"))]
    return compose_receipt(transaction, lines, "Budi")


def test_render_receipt_images_strips(document):
    images = render_receipt_images(document, ImageFont.load_default())
    assert images
    assert all(img.width == PRINTER_WIDTH_PX for img in images)
    assert all(img.mode == "1" for img in images)


def test_export_receipt_pdf(tmp_path, document):
    path = export_receipt_pdf(document, tmp_path / "out", font=ImageFont.load_default())
    assert path.name == "receipt-TRX20261019143015123-0011223344.pdf"
    assert path.read_bytes().startswith(b"%PDF")


def test_font_override_from_environment(tmp_path, monkeypatch):
    font_file = tmp_path / "receipt.ttf"
    font_file.write_bytes(b"")
    monkeypatch.setenv("RECEIPT_PRINTER_FONT_PATH", str(font_file))
    assert resolve_printer_font_path() == str(font_file)


def test_missing_font_raises(monkeypatch):
    monkeypatch.delenv("RECEIPT_PRINTER_FONT_PATH", raising=False)
    monkeypatch.setattr("pos.printer.PRINTER_FONT_PATH", "/nonexistent/font.ttf")
    monkeypatch.setattr("pos.printer._LINUX_FONT_FALLBACKS", ())
    with pytest.raises(RuntimeError):
        resolve_printer_font_path()
