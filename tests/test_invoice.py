from datetime import datetime
from decimal import Decimal

from isp_billing.domain.models import Fee, Role, User
from reportlab.pdfbase.pdfmetrics import stringWidth

from isp_billing.domain.services.invoice_service import (
    fit_to_width,
    format_money,
    invoice_filename,
    invoice_number,
    line_item_description,
    payment_status,
    recipient_name,
    render_invoice,
)

NOW = datetime(2025, 6, 15, 9, 30)


def make_owner(**kwargs):
    values = dict(
        id=7,
        username="alice",
        hashed_password="x",
        email="alice@example.com",
        role=Role.CLIENT,
    )
    values.update(kwargs)
    return User(**values)


def make_fee(**kwargs):
    values = dict(
        id=42,
        user_id=7,
        amount=Decimal("1234.50"),
        due_date=datetime(2025, 7, 1),
        created_at=datetime(2025, 6, 1),
    )
    values.update(kwargs)
    return Fee(**values)


def test_render_returns_single_page_pdf():
    pdf = render_invoice(make_fee(description="Fiber 100"), make_owner(), NOW)
    assert pdf.startswith(b"%PDF")
    assert b"/Count 1" in pdf
    assert b"Fiber 100" in pdf
    assert b"#000042" in pdf
    assert b"$1,234.50" in pdf


def test_empty_description_falls_back_to_default_line_item():
    fee = make_fee(description="")
    assert line_item_description(fee) == "Monthly Service Fee"
    assert b"Monthly Service Fee" in render_invoice(fee, make_owner(), NOW)


def test_recipient_uses_full_name_then_username():
    assert recipient_name(make_owner(first_name="Alice", last_name="Smith")) == "Alice Smith"
    assert recipient_name(make_owner()) == "alice"


def test_status_block():
    paid = make_fee(paid=True, payment_date=datetime(2025, 6, 2))
    overdue = make_fee(due_date=datetime(2025, 6, 1))
    assert payment_status(paid, NOW) == "PAID"
    assert payment_status(overdue, NOW) == "OVERDUE"
    assert payment_status(make_fee(), NOW) == "UNPAID"
    assert b"OVERDUE" in render_invoice(overdue, make_owner(), NOW)
    assert b"Payment Date: June 02, 2025" in render_invoice(paid, make_owner(), NOW)


def test_formatting_helpers():
    assert invoice_number(5) == "#000005"
    assert invoice_filename(5, NOW) == "Invoice_5_20250615.pdf"
    assert format_money(Decimal("10")) == "$10.00"


def test_long_description_is_clipped_to_its_column():
    long_text = "Fiber 1000 with static IP " * 20
    clipped = fit_to_width(long_text, "Helvetica", 12, 300)
    assert clipped.endswith("...")
    assert stringWidth(clipped, "Helvetica", 12) <= 300
    assert fit_to_width("Fiber 100", "Helvetica", 12, 300) == "Fiber 100"

    pdf = render_invoice(make_fee(description=long_text[:500]), make_owner(), NOW)
    assert b"/Count 1" in pdf
    assert long_text[:500].encode() not in pdf
