"""
Single-page PDF invoices for one fee and its owner.
"""

import io
from datetime import datetime
from decimal import Decimal
from typing import Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from isp_billing.domain.models import Fee, User

ISSUER_NAME = "ISP BILLING SYSTEM"
DEFAULT_LINE_ITEM = "Monthly Service Fee"

PRIMARY_COLOR = colors.Color(41 / 255, 128 / 255, 185 / 255)
LIGHT_GRAY = colors.Color(245 / 255, 245 / 255, 245 / 255)
PAID_COLOR = colors.Color(39 / 255, 174 / 255, 96 / 255)
UNPAID_COLOR = colors.Color(231 / 255, 76 / 255, 60 / 255)

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
MARGIN = 50


def invoice_number(fee_id: int) -> str:
    return f"#{fee_id:06d}"


def line_item_description(fee: Fee) -> str:
    return fee.description or DEFAULT_LINE_ITEM


def fit_to_width(text: str, font: str, size: float, max_width: float) -> str:
    """Trim text with a trailing ellipsis so it renders within max_width points."""
    if stringWidth(text, font, size) <= max_width:
        return text
    ellipsis = "..."
    while text and stringWidth(text + ellipsis, font, size) > max_width:
        text = text[:-1]
    return text.rstrip() + ellipsis


def format_money(amount: Decimal) -> str:
    return f"${amount:,.2f}"


def format_date(value: Optional[datetime]) -> str:
    return value.strftime("%B %d, %Y") if value else ""


def recipient_name(owner: User) -> str:
    return owner.full_name or owner.username or "Unknown"


def invoice_filename(fee_id: int, now: Optional[datetime] = None) -> str:
    now = now or datetime.utcnow()
    return f"Invoice_{fee_id}_{now:%Y%m%d}.pdf"


def payment_status(fee: Fee, now: datetime) -> str:
    if fee.paid:
        return "PAID"
    if fee.is_overdue(now):
        return "OVERDUE"
    return "UNPAID"


def render_invoice(fee: Fee, owner: User, now: Optional[datetime] = None) -> bytes:
    """
    Draw the invoice for `fee` billed to `owner` and return the PDF bytes.
    Nothing is written to disk.
    """
    now = now or datetime.utcnow()
    buffer = io.BytesIO()
    # Uncompressed page streams keep the text searchable in the raw bytes
    pdf = canvas.Canvas(buffer, pagesize=letter, pageCompression=0)
    pdf.setTitle(f"Invoice {invoice_number(fee.id)}")
    pdf.setAuthor("ISP Billing System")

    width, height = letter
    left = MARGIN
    right = width - MARGIN
    y = height - MARGIN - 24

    # Issuer header
    pdf.setFillColor(PRIMARY_COLOR)
    pdf.setFont(FONT_BOLD, 24)
    pdf.drawString(left, y, ISSUER_NAME)

    y -= 40
    pdf.setFillColor(colors.black)
    pdf.setFont(FONT_BOLD, 18)
    pdf.drawString(left, y, "INVOICE")
    pdf.drawRightString(right, y, invoice_number(fee.id))

    y -= 20
    pdf.setStrokeColor(PRIMARY_COLOR)
    pdf.setLineWidth(2)
    pdf.line(left, y, right, y)

    y -= 25
    for label, value in (
        ("Invoice Date:", format_date(fee.created_at)),
        ("Due Date:", format_date(fee.due_date)),
    ):
        pdf.setFont(FONT_BOLD, 14)
        pdf.drawString(left, y, label)
        pdf.setFont(FONT, 12)
        pdf.drawString(left + 120, y, value)
        y -= 25

    # Recipient
    y -= 15
    pdf.setFillColor(PRIMARY_COLOR)
    pdf.setFont(FONT_BOLD, 14)
    pdf.drawString(left, y, "BILL TO:")

    y -= 25
    pdf.setFillColor(colors.black)
    pdf.setFont(FONT, 12)
    pdf.drawString(left, y, recipient_name(owner))
    pdf.setFillColor(colors.gray)
    pdf.setFont(FONT, 10)
    if owner.email:
        y -= 20
        pdf.drawString(left, y, owner.email)
    y -= 20
    pdf.drawString(left, y, f"Username: {owner.username}")

    # Line item table: header row then the single fee row
    y -= 50
    pdf.setFillColor(PRIMARY_COLOR)
    pdf.rect(left, y, right - left, 30, stroke=0, fill=1)
    pdf.setFillColor(colors.white)
    pdf.setFont(FONT_BOLD, 12)
    pdf.drawString(left + 10, y + 10, "Description")
    pdf.drawString(right - 100, y + 10, "Amount")

    y -= 40
    pdf.setFillColor(LIGHT_GRAY)
    pdf.rect(left, y, right - left, 35, stroke=0, fill=1)
    pdf.setFillColor(colors.black)
    pdf.setFont(FONT, 12)
    description_width = (right - 100) - (left + 10) - 15
    pdf.drawString(
        left + 10, y + 13, fit_to_width(line_item_description(fee), FONT, 12, description_width)
    )
    pdf.drawString(right - 100, y + 13, format_money(fee.amount))

    y -= 20
    pdf.setStrokeColor(colors.lightgrey)
    pdf.setLineWidth(1)
    pdf.line(right - 200, y, right, y)

    y -= 20
    pdf.setFont(FONT_BOLD, 14)
    pdf.drawString(right - 200, y, "Total:")
    pdf.setFont(FONT_BOLD, 16)
    pdf.drawString(right - 100, y, format_money(fee.amount))

    # Status block
    y -= 60
    status = payment_status(fee, now)
    pdf.setFillColor(PAID_COLOR if fee.paid else UNPAID_COLOR)
    pdf.rect(left, y, 100, 35, stroke=0, fill=1)
    pdf.setFillColor(colors.white)
    pdf.setFont(FONT_BOLD, 14)
    pdf.drawCentredString(left + 50, y + 12, "PAID" if fee.paid else "UNPAID")
    if fee.paid and fee.payment_date:
        pdf.setFillColor(colors.black)
        pdf.setFont(FONT, 12)
        pdf.drawString(left + 120, y + 13, f"Payment Date: {format_date(fee.payment_date)}")
    elif status == "OVERDUE":
        pdf.setFillColor(UNPAID_COLOR)
        pdf.setFont(FONT_BOLD, 12)
        pdf.drawString(left + 120, y + 13, "OVERDUE")

    # Footer
    y = 80
    pdf.setStrokeColor(colors.lightgrey)
    pdf.line(left, y, right, y)
    pdf.setFillColor(colors.gray)
    pdf.setFont(FONT, 10)
    pdf.drawCentredString(width / 2, y - 20, "Thank you for your business!")
    pdf.drawCentredString(
        width / 2, y - 35, f"Generated on {now:%B %d, %Y %H:%M} UTC"
    )

    pdf.showPage()
    pdf.save()
    return buffer.getvalue()
