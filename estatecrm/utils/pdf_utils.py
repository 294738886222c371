from decimal import Decimal
from pathlib import Path
from textwrap import wrap
from typing import Iterable, Optional

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from ..config import settings
from .date_utils import utcnow

MARGIN_X = 72  # 1 inch
MARGIN_Y = 72
MAX_CHARS_PER_LINE = 90
ISSUER_NAME = "Real Estate CRM"


def _output_path(filename: str) -> Path:
    base = Path(settings.receipt_output_dir)
    base.mkdir(parents=True, exist_ok=True)
    return base / filename


def _write_pdf(filename: str, lines: Iterable[str]) -> str:
    path = _output_path(filename)
    pdf_canvas = canvas.Canvas(str(path), pagesize=A4)
    width, height = A4
    text_stream = pdf_canvas.beginText(MARGIN_X, height - MARGIN_Y)
    text_stream.setFont("Helvetica", 12)

    for line in lines:
        if line is None:
            line = ""
        normalized = str(line)
        if normalized.strip() == "":
            text_stream.textLine("")
            continue
        wrapped_lines = wrap(normalized, MAX_CHARS_PER_LINE) or [normalized]
        for chunk in wrapped_lines:
            text_stream.textLine(chunk)

    pdf_canvas.drawText(text_stream)
    pdf_canvas.showPage()
    pdf_canvas.save()
    return str(path)


def format_amount(amount: Optional[Decimal]) -> str:
    """Indian-style shorthand used on receipts: Cr above one crore, L above one lakh."""
    value = Decimal(str(amount or 0))
    if value >= Decimal("10000000"):
        return f"Rs {value / Decimal('10000000'):.2f}Cr"
    if value >= Decimal("100000"):
        return f"Rs {value / Decimal('100000'):.2f}L"
    return f"Rs {value:,.2f}"


def generate_token_receipt_pdf(booking) -> str:
    hold_until = booking.hold_expires_at.strftime("%d %b %Y %H:%M UTC") if booking.hold_expires_at else "N/A"
    lines = [
        ISSUER_NAME,
        "TOKEN RECEIPT",
        "",
        f"Booking #: {booking.id}",
        f"Date: {utcnow().date().isoformat()}",
        f"Customer: {booking.customer_name}",
        f"Property: {booking.project_name or 'Project'} - {booking.unit_no}",
        f"Unit Price: {format_amount(booking.total_price)}",
        "",
        f"Token Amount: {format_amount(booking.token_amount)}",
        "",
        "This is a computer-generated receipt and does not require a signature.",
        f"Hold valid until: {hold_until}",
    ]
    return _write_pdf(f"token_booking_{booking.id}.pdf", lines)


def generate_payment_receipt_pdf(payment) -> str:
    lines = [
        ISSUER_NAME,
        "PAYMENT RECEIPT",
        "",
        f"Receipt No: {payment.receipt_no or 'Pending'}",
        f"Date: {payment.date.date().isoformat()}",
        f"Customer: {payment.customer_name or payment.customer_id}",
        f"Unit: {payment.unit_no or 'N/A'}",
        f"Payment Type: {payment.payment_type}",
        f"Payment Method: {payment.method}",
        "",
        f"Amount Paid: {format_amount(payment.amount)}",
        "",
        "This is a computer-generated receipt and does not require a signature.",
    ]
    return _write_pdf(f"payment_{payment.id}.pdf", lines)


def generate_booking_confirmation_pdf(booking) -> str:
    booked_on = booking.booked_at or booking.created_at
    lines = [
        ISSUER_NAME,
        "BOOKING CONFIRMATION",
        "",
        f"Booking ID: {booking.id}",
        f"Date: {booked_on.date().isoformat()}",
        f"Customer: {booking.customer_name}",
        f"Email: {booking.customer_email or 'N/A'}",
        f"Phone: {booking.customer_phone or 'N/A'}",
        f"Project: {booking.project_name or 'N/A'}",
        f"Unit: {booking.unit_no}",
        f"Token Paid: {format_amount(booking.token_amount)}",
        "",
        f"Total Price: {format_amount(booking.total_price)}",
        "",
        "Congratulations on your booking! Please contact us for any queries.",
    ]
    return _write_pdf(f"booking_{booking.id}_confirmation.pdf", lines)
