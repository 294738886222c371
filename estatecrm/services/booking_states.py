from __future__ import annotations

from typing import Dict

from ..constants import BOOKING_STATUSES, HOLD_STATES, TERMINAL_BOOKING_STATES
from ..core.errors import InvalidTransitionError
from ..models.models import Booking

_CLOSING_STATES = {"BOOKED", "CANCELLED", "REFUNDED"}

ALLOWED_TRANSITIONS: Dict[str, set[str]] = {
    "HOLD": {"HOLD_REQUESTED", "HOLD_CONFIRMED", "BOOKING_PENDING_APPROVAL"} | _CLOSING_STATES,
    "HOLD_REQUESTED": {"HOLD_CONFIRMED", "BOOKING_PENDING_APPROVAL"} | _CLOSING_STATES,
    "HOLD_CONFIRMED": {"BOOKING_PENDING_APPROVAL"} | _CLOSING_STATES,
    "BOOKING_PENDING_APPROVAL": {"BOOKING_CONFIRMED"} | _CLOSING_STATES,
    "BOOKING_CONFIRMED": {"PAYMENT_PENDING"} | _CLOSING_STATES,
    "PAYMENT_PENDING": set(_CLOSING_STATES),
    "BOOKED": set(),
    "CANCELLED": set(),
    "REFUNDED": set(),
}


def is_terminal(status: str) -> bool:
    return status in TERMINAL_BOOKING_STATES


def is_hold(status: str) -> bool:
    return status in HOLD_STATES


def can_transition(current_status: str, target_status: str) -> bool:
    return target_status in ALLOWED_TRANSITIONS.get(current_status, set())


def assert_transition(booking: Booking, target_status: str) -> None:
    if target_status not in BOOKING_STATUSES:
        raise ValueError(f"Invalid booking status '{target_status}'.")
    if not can_transition(booking.status, target_status):
        raise InvalidTransitionError(booking.status, target_status)
