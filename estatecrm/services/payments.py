from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import and_
from sqlalchemy.orm import Session, selectinload

from ..config import settings
from ..models.models import Booking, Payment, PaymentReminder
from ..schemas.schemas import Actor, PaymentDetails, ReminderCreate, ReminderRead
from ..services import audit
from ..services.delivery import deliver_reminder
from ..services.store import get_or_raise, unit_of_work
from ..utils.date_utils import resolve_now, to_naive_utc

logger = logging.getLogger(__name__)


def _ensure_decimal(amount: Decimal | float | int) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    return Decimal(str(amount))


def next_receipt_number(session: Session, year: int) -> str:
    prefix = f"{settings.receipt_prefix}-{year}-"
    issued = (
        session.query(Payment.receipt_no)
        .filter(Payment.receipt_no.like(f"{prefix}%"))
        .all()
    )
    highest = 0
    for (receipt_no,) in issued:
        suffix = receipt_no[len(prefix):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{prefix}{highest + 1:03d}"


def add_payment(
    session: Session,
    details: PaymentDetails,
    booking: Optional[Booking] = None,
    actor: Optional[Actor] = None,
    now: Optional[datetime] = None,
) -> Payment:
    """Stage a payment in the caller's transaction and assign its receipt number."""
    timestamp = resolve_now(now)
    if booking is not None:
        amount = details.amount if details.amount is not None else booking.token_amount
        customer_id = booking.customer_id
        customer_name = booking.customer_name
        unit_id = booking.unit_id
        unit_no = booking.unit_no
        tenant_id = booking.tenant_id
    else:
        if details.amount is None:
            raise ValueError("Payment amount is required when no booking is given.")
        if not details.customer_id:
            raise ValueError("Customer id is required when no booking is given.")
        amount = details.amount
        customer_id = details.customer_id
        customer_name = details.customer_name
        unit_id = details.unit_id
        unit_no = details.unit_no
        tenant_id = details.tenant_id

    paid_on = to_naive_utc(details.paid_on) or timestamp
    payment = Payment(
        tenant_id=tenant_id,
        customer_id=customer_id,
        customer_name=customer_name,
        unit_id=unit_id,
        unit_no=unit_no,
        booking_id=booking.id if booking is not None else None,
        amount=_ensure_decimal(amount),
        payment_type=details.payment_type,
        method=details.method,
        date=paid_on,
        due_date=details.due_date,
        status=details.status,
        notes=details.remarks,
        created_at=timestamp,
        updated_at=timestamp,
    )
    if payment.status == "Received":
        payment.receipt_no = next_receipt_number(session, paid_on.year)
    session.add(payment)
    session.flush()

    audit.record(
        session,
        action="RECORD_PAYMENT",
        entity_type="payments",
        entity_id=payment.id,
        actor=actor,
        timestamp=timestamp,
        details={
            "booking_id": payment.booking_id,
            "amount": str(payment.amount),
            "method": payment.method,
            "status": payment.status,
            "receipt_no": payment.receipt_no,
        },
    )
    logger.info("Recorded payment %s (%s) for customer %s", payment.id, payment.receipt_no, customer_id)
    return payment


def record_payment(
    session: Session,
    details: PaymentDetails,
    booking_id: Optional[int] = None,
    actor: Optional[Actor] = None,
    now: Optional[datetime] = None,
) -> Payment:
    with unit_of_work(session):
        booking = get_or_raise(session, Booking, booking_id) if booking_id is not None else None
        payment = add_payment(session, details, booking=booking, actor=actor, now=now)
    return payment


def recompute_next_reminder(payment: Payment) -> Optional[datetime]:
    pending = [reminder.scheduled_at for reminder in payment.reminders if reminder.status == "SCHEDULED"]
    payment.next_reminder_at = min(pending) if pending else None
    return payment.next_reminder_at


def create_reminder(
    session: Session,
    payment_id: int,
    payload: ReminderCreate,
    actor: Optional[Actor] = None,
    now: Optional[datetime] = None,
) -> PaymentReminder:
    timestamp = resolve_now(now)
    with unit_of_work(session):
        payment = get_or_raise(session, Payment, payment_id)
        if payload.send_now:
            reminder = PaymentReminder(
                channel=payload.type,
                message=payload.message,
                scheduled_at=timestamp,
                status="SENT",
                sent_at=timestamp,
                created_at=timestamp,
            )
        else:
            reminder = PaymentReminder(
                channel=payload.type,
                message=payload.message,
                scheduled_at=to_naive_utc(payload.scheduled_at) or timestamp,
                status="SCHEDULED",
                sent_at=None,
                created_at=timestamp,
            )
        payment.reminders.append(reminder)
        recompute_next_reminder(payment)
        payment.updated_at = timestamp
        session.add(payment)
        session.flush()

        audit.record(
            session,
            action="CREATE_REMINDER",
            entity_type="payments",
            entity_id=payment.id,
            actor=actor,
            timestamp=timestamp,
            details=ReminderRead.model_validate(reminder).model_dump(mode="json"),
        )
        # Delivered last so a failed send leaves nothing recorded.
        if reminder.status == "SENT":
            deliver_reminder(payment, reminder)
    logger.info(
        "Reminder %s for payment %s %s (%s)",
        reminder.id,
        payment_id,
        "sent" if payload.send_now else "scheduled",
        reminder.channel,
    )
    return reminder


def due_reminder_payments(session: Session, now: Optional[datetime] = None) -> List[Payment]:
    """Payments holding at least one ``SCHEDULED`` reminder due by ``now``."""
    timestamp = resolve_now(now)
    return (
        session.query(Payment)
        .filter(
            Payment.reminders.any(
                and_(PaymentReminder.status == "SCHEDULED", PaymentReminder.scheduled_at <= timestamp)
            )
        )
        .options(selectinload(Payment.reminders))
        .order_by(Payment.id.asc())
        .all()
    )


def tick(session: Session, now: Optional[datetime] = None, actor: Optional[Actor] = None) -> int:
    """Send every scheduled reminder that has come due and refresh ``next_reminder_at``.

    Each reminder is delivered on its own. A reminder whose delivery fails stays
    ``SCHEDULED`` for the next tick while the rest of the batch is still sent.
    """
    timestamp = resolve_now(now)
    sent_ids: List[int] = []
    failed_ids: List[int] = []
    with unit_of_work(session):
        for payment in due_reminder_payments(session, timestamp):
            for reminder in payment.reminders:
                if reminder.status != "SCHEDULED" or reminder.scheduled_at > timestamp:
                    continue
                try:
                    deliver_reminder(payment, reminder)
                except Exception:
                    logger.warning("Reminder %s for payment %s left scheduled for retry", reminder.id, payment.id)
                    failed_ids.append(reminder.id)
                    continue
                reminder.status = "SENT"
                reminder.sent_at = timestamp
                sent_ids.append(reminder.id)
            previous = payment.next_reminder_at
            if recompute_next_reminder(payment) != previous:
                payment.updated_at = timestamp
            session.add(payment)

        if sent_ids or failed_ids:
            audit.record(
                session,
                action="SEND_SCHEDULED_REMINDERS",
                entity_type="payments",
                actor=actor,
                timestamp=timestamp,
                details={"reminder_ids": sent_ids, "failed_reminder_ids": failed_ids, "run_at": timestamp.isoformat()},
            )

    if sent_ids:
        logger.info("Sent %d scheduled reminder(s)", len(sent_ids))
    else:
        logger.debug("No scheduled reminders sent at %s", timestamp.isoformat())
    return len(sent_ids)


def mark_overdue_payments(
    session: Session,
    as_of: Optional[date] = None,
    actor: Optional[Actor] = None,
    now: Optional[datetime] = None,
) -> List[int]:
    timestamp = resolve_now(now)
    as_of_date = as_of or timestamp.date()
    overdue_ids: List[int] = []
    with unit_of_work(session):
        payments = (
            session.query(Payment)
            .filter(
                Payment.status == "Pending",
                Payment.due_date.isnot(None),
                Payment.due_date < as_of_date,
            )
            .order_by(Payment.due_date.asc())
            .all()
        )
        for payment in payments:
            payment.status = "Overdue"
            payment.updated_at = timestamp
            session.add(payment)
            overdue_ids.append(payment.id)
        if overdue_ids:
            audit.record(
                session,
                action="MARK_OVERDUE",
                entity_type="payments",
                actor=actor,
                timestamp=timestamp,
                details={"payment_ids": overdue_ids, "as_of": as_of_date.isoformat()},
            )
    return overdue_ids
