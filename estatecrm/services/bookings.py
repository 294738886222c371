from __future__ import annotations

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from ..config import settings
from ..constants import BOOKING_APPROVER_ROLES, HOLD_STATES, PAYMENT_APPROVER_ROLES
from ..core.errors import InvalidStateError, InvalidTransitionError
from ..models.models import Booking, Payment, Unit
from ..schemas.schemas import Actor, BookingRead, CustomerData, PaymentDetails
from ..services import audit
from ..services.booking_states import assert_transition, is_hold, is_terminal
from ..services.inventory import apply_unit_status
from ..services.payments import add_payment
from ..services.store import get_or_raise, unit_of_work
from ..utils.date_utils import resolve_now

logger = logging.getLogger(__name__)

# Targets with side effects beyond the status column; each has a named operation.
GUARDED_TARGETS = {"BOOKED", "BOOKING_CONFIRMED", "CANCELLED", "REFUNDED"}


def _ensure_decimal(amount: Decimal | float | int) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    return Decimal(str(amount))


def _snapshot(booking: Booking) -> dict:
    return BookingRead.model_validate(booking).model_dump(mode="json")


def _set_status(booking: Booking, target_status: str, timestamp: datetime) -> str:
    assert_transition(booking, target_status)
    previous = booking.status
    booking.status = target_status
    if not is_hold(target_status):
        booking.hold_expires_at = None
    booking.updated_at = timestamp
    return previous


def _release_unit(unit: Optional[Unit], timestamp: datetime) -> None:
    if unit is None:
        return
    # Units of a closed project stay closed when their booking ends.
    if unit.status == "CLOSED":
        return
    apply_unit_status(unit, "AVAILABLE", timestamp)


def hold_unit(
    session: Session,
    unit_id: int,
    customer_id: str,
    customer_data: CustomerData,
    token_amount: Decimal | float | int,
    hold_hours: Optional[int] = None,
    actor: Optional[Actor] = None,
    now: Optional[datetime] = None,
) -> Booking:
    """Reserve an available unit for a customer and open a booking in ``HOLD``."""
    timestamp = resolve_now(now)
    hours = settings.default_hold_hours if hold_hours is None else hold_hours
    if hours <= 0:
        raise ValueError("Hold duration must be positive.")
    token = _ensure_decimal(token_amount)

    with unit_of_work(session):
        unit = get_or_raise(session, Unit, unit_id)
        if unit.status != "AVAILABLE":
            raise InvalidStateError("Unit not available")
        price = _ensure_decimal(unit.price)
        if token <= 0:
            raise ValueError("Token amount must be positive.")
        if token > price:
            raise ValueError("Token amount cannot exceed the unit price.")

        project = unit.project
        apply_unit_status(unit, "HOLD", timestamp)
        session.add(unit)

        booking = Booking(
            unit_id=unit.id,
            tenant_id=customer_data.tenant_id or (project.tenant_id if project else None),
            customer_id=customer_id,
            customer_name=customer_data.name,
            customer_email=customer_data.email,
            customer_phone=customer_data.phone,
            project_id=unit.project_id,
            project_name=project.name if project else None,
            unit_no=unit.unit_no,
            token_amount=token,
            total_price=price,
            status="HOLD",
            hold_expires_at=timestamp + timedelta(hours=hours),
            agent_id=actor.id if actor and actor.role == "AGENT" else None,
            agent_name=actor.name if actor and actor.role == "AGENT" else None,
            created_at=timestamp,
            updated_at=timestamp,
        )
        session.add(booking)
        session.flush()

        audit.record(
            session,
            action="HOLD_UNIT",
            entity_type="bookings",
            entity_id=booking.id,
            actor=actor,
            timestamp=timestamp,
            details=_snapshot(booking),
        )

    logger.info("Unit %s held for customer %s as booking %s", unit_id, customer_id, booking.id)
    return booking


def transition_booking(
    session: Session,
    booking_id: int,
    target_status: str,
    actor: Optional[Actor] = None,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Booking:
    """Move a booking along a step that changes nothing but its status."""
    timestamp = resolve_now(now)
    with unit_of_work(session):
        booking = get_or_raise(session, Booking, booking_id)
        if target_status in GUARDED_TARGETS:
            raise InvalidTransitionError(
                booking.status,
                target_status,
                message=f"Use the dedicated operation to move a booking to {target_status}.",
            )
        previous = _set_status(booking, target_status, timestamp)
        if notes:
            booking.notes = notes
        session.add(booking)
        audit.record(
            session,
            action="TRANSITION_BOOKING",
            entity_type="bookings",
            entity_id=booking.id,
            actor=actor,
            timestamp=timestamp,
            details={"before": previous, "after": target_status, "notes": notes},
        )
    logger.info("Booking %s %s -> %s", booking_id, previous, target_status)
    return booking


def submit_for_approval(session: Session, booking_id: int, actor: Optional[Actor] = None, notes: Optional[str] = None) -> Booking:
    return transition_booking(session, booking_id, "BOOKING_PENDING_APPROVAL", actor=actor, notes=notes)


def request_payment(session: Session, booking_id: int, actor: Optional[Actor] = None, notes: Optional[str] = None) -> Booking:
    return transition_booking(session, booking_id, "PAYMENT_PENDING", actor=actor, notes=notes)


def confirm_booking(
    session: Session,
    booking_id: int,
    agent_id: Optional[str] = None,
    agent_name: Optional[str] = None,
    actor: Optional[Actor] = None,
    now: Optional[datetime] = None,
) -> Booking:
    timestamp = resolve_now(now)
    with unit_of_work(session):
        booking = get_or_raise(session, Booking, booking_id, label="Booking")
        previous = _set_status(booking, "BOOKED", timestamp)
        booking.booked_at = timestamp
        booking.agent_id = agent_id or booking.agent_id
        booking.agent_name = agent_name or booking.agent_name
        session.add(booking)

        unit = session.get(Unit, booking.unit_id)
        if unit is not None:
            apply_unit_status(unit, "BOOKED", timestamp)
            session.add(unit)

        audit.record(
            session,
            action="CONFIRM_BOOKING",
            entity_type="bookings",
            entity_id=booking.id,
            actor=actor,
            timestamp=timestamp,
            details={"before": previous, "agent_id": booking.agent_id, "agent_name": booking.agent_name},
        )
    logger.info("Booking %s confirmed (was %s)", booking_id, previous)
    return booking


def _complete_with_payment(
    session: Session,
    booking: Booking,
    payment_details: PaymentDetails,
    actor: Optional[Actor],
    timestamp: datetime,
) -> Payment:
    previous = _set_status(booking, "BOOKED", timestamp)
    payment = add_payment(session, payment_details, booking=booking, actor=actor, now=timestamp)
    booking.booked_at = timestamp
    booking.payment_id = payment.id
    booking.payment_mode = payment.method
    booking.payment_remarks = payment_details.remarks
    booking.payment_recorded_at = timestamp
    session.add(booking)

    unit = session.get(Unit, booking.unit_id)
    if unit is not None:
        apply_unit_status(unit, "SOLD", timestamp)
        session.add(unit)

    audit.record(
        session,
        action="COMPLETE_BOOKING",
        entity_type="bookings",
        entity_id=booking.id,
        actor=actor,
        timestamp=timestamp,
        details={"before": previous, "payment_id": payment.id, "receipt_no": payment.receipt_no},
    )
    logger.info("Booking %s completed with payment %s", booking.id, payment.receipt_no)
    return payment


def record_payment_and_complete(
    session: Session,
    booking_id: int,
    payment_details: Optional[PaymentDetails] = None,
    actor: Optional[Actor] = None,
    now: Optional[datetime] = None,
) -> Booking:
    timestamp = resolve_now(now)
    details = payment_details or PaymentDetails()
    with unit_of_work(session):
        booking = get_or_raise(session, Booking, booking_id, label="Booking")
        _complete_with_payment(session, booking, details, actor, timestamp)
    return booking


def approve(
    session: Session,
    booking_id: int,
    approver_role: str,
    approver: Optional[Actor] = None,
    payment_details: Optional[PaymentDetails] = None,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Booking:
    """Manager sign-off on a pending booking, or admin sign-off by recording payment."""
    timestamp = resolve_now(now)
    role = (approver_role or "").upper()
    with unit_of_work(session):
        booking = get_or_raise(session, Booking, booking_id, label="Booking")

        if role in BOOKING_APPROVER_ROLES and booking.status == "BOOKING_PENDING_APPROVAL":
            previous = _set_status(booking, "BOOKING_CONFIRMED", timestamp)
            if approver is not None:
                booking.manager_id = approver.id
                booking.manager_name = approver.name
            booking.manager_approved_at = timestamp
            if notes:
                booking.manager_notes = notes
            session.add(booking)
            audit.record(
                session,
                action="APPROVE_BOOKING",
                entity_type="bookings",
                entity_id=booking.id,
                actor=approver,
                timestamp=timestamp,
                details={"before": previous, "after": booking.status, "role": role, "notes": notes},
            )
            logger.info("Booking %s approved by manager %s", booking_id, booking.manager_id)
            return booking

        if role in PAYMENT_APPROVER_ROLES and booking.status == "PAYMENT_PENDING":
            details = payment_details or PaymentDetails(remarks=notes)
            _complete_with_payment(session, booking, details, approver, timestamp)
            return booking

        raise InvalidTransitionError(
            booking.status,
            message=f"{role or 'Unknown role'} cannot approve a booking in {booking.status}.",
        )


def _end_booking(
    session: Session,
    booking_id: int,
    target_status: str,
    action: str,
    actor: Optional[Actor],
    now: Optional[datetime],
) -> Booking:
    timestamp = resolve_now(now)
    with unit_of_work(session):
        booking = get_or_raise(session, Booking, booking_id, label="Booking")
        if is_terminal(booking.status):
            raise InvalidTransitionError(booking.status, target_status)
        previous = _set_status(booking, target_status, timestamp)
        session.add(booking)

        refunded_ids: List[int] = []
        if target_status == "REFUNDED":
            for payment in booking.payments:
                if payment.status == "Received":
                    payment.status = "Refunded"
                    session.add(payment)
                    refunded_ids.append(payment.id)

        unit = session.get(Unit, booking.unit_id)
        _release_unit(unit, timestamp)

        audit.record(
            session,
            action=action,
            entity_type="bookings",
            entity_id=booking.id,
            actor=actor,
            timestamp=timestamp,
            details={
                "before": previous,
                "after": target_status,
                "unit_status": unit.status if unit is not None else None,
                "refunded_payment_ids": refunded_ids,
            },
        )
    logger.info("Booking %s %s -> %s", booking_id, previous, target_status)
    return booking


def reject(session: Session, booking_id: int, actor: Optional[Actor] = None, now: Optional[datetime] = None) -> Booking:
    return _end_booking(session, booking_id, "CANCELLED", "REJECT_BOOKING", actor, now)


def refund(session: Session, booking_id: int, actor: Optional[Actor] = None, now: Optional[datetime] = None) -> Booking:
    return _end_booking(session, booking_id, "REFUNDED", "REFUND_BOOKING", actor, now)


def find_expired_holds(session: Session, now: Optional[datetime] = None) -> List[Booking]:
    timestamp = resolve_now(now)
    return (
        session.query(Booking)
        .filter(
            Booking.status.in_(sorted(HOLD_STATES)),
            Booking.hold_expires_at.isnot(None),
            Booking.hold_expires_at <= timestamp,
        )
        .order_by(Booking.hold_expires_at.asc())
        .all()
    )


def release_expired_holds(session: Session, now: Optional[datetime] = None, actor: Optional[Actor] = None) -> List[Booking]:
    timestamp = resolve_now(now)
    released: List[Booking] = []
    for booking in find_expired_holds(session, timestamp):
        released.append(_end_booking(session, booking.id, "CANCELLED", "EXPIRE_HOLD", actor, timestamp))
    if released:
        logger.info("Released %d expired hold(s)", len(released))
    return released
