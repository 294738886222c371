from __future__ import annotations

import logging
from typing import Literal

from sqlalchemy.orm import Session

from ..core.errors import InvalidStateError
from ..models.models import Booking, Payment
from ..services.store import get_or_raise
from ..utils.pdf_utils import (
    generate_booking_confirmation_pdf,
    generate_payment_receipt_pdf,
    generate_token_receipt_pdf,
)

logger = logging.getLogger(__name__)

ReceiptKind = Literal["token", "payment", "booking"]


def issue_receipt(session: Session, kind: ReceiptKind, entity_id: int) -> str:
    if kind == "token":
        booking = get_or_raise(session, Booking, entity_id)
        path = generate_token_receipt_pdf(booking)
    elif kind == "payment":
        payment = get_or_raise(session, Payment, entity_id)
        path = generate_payment_receipt_pdf(payment)
    elif kind == "booking":
        booking = get_or_raise(session, Booking, entity_id)
        if booking.status != "BOOKED":
            raise InvalidStateError(f"Booking {booking.id} is {booking.status}; confirmation requires BOOKED.")
        path = generate_booking_confirmation_pdf(booking)
    else:
        raise ValueError(f"Unknown receipt kind '{kind}'.")
    logger.info("Issued %s receipt for %s at %s", kind, entity_id, path)
    return path
