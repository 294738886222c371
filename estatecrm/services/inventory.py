from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..config import settings
from ..constants import TERMINAL_BOOKING_STATES, UNIT_STATUSES
from ..models.models import Booking, Project, Unit
from ..schemas.schemas import Actor, UnitRead
from ..services import audit
from ..services.booking_states import assert_transition
from ..services.store import get_or_raise, unit_of_work
from ..utils.date_utils import resolve_now

logger = logging.getLogger(__name__)


def apply_unit_status(unit: Unit, new_status: str, now: Optional[datetime] = None) -> Unit:
    """Overwrite a unit's status in the current transaction without validating the move."""
    if new_status not in UNIT_STATUSES:
        raise ValueError(f"Invalid unit status '{new_status}'.")
    unit.status = new_status
    unit.is_available = new_status == "AVAILABLE"
    unit.updated_at = resolve_now(now)
    return unit


def set_unit_status(
    session: Session,
    unit_id: int,
    new_status: str,
    actor: Optional[Actor] = None,
    now: Optional[datetime] = None,
) -> Unit:
    timestamp = resolve_now(now)
    with unit_of_work(session):
        unit = get_or_raise(session, Unit, unit_id)
        previous = unit.status
        apply_unit_status(unit, new_status, timestamp)
        session.add(unit)
        audit.record(
            session,
            action="UPDATE_UNIT_STATUS",
            entity_type="units",
            entity_id=unit.id,
            actor=actor,
            timestamp=timestamp,
            details={"before": previous, "after": UnitRead.model_validate(unit).model_dump(mode="json")},
        )
    logger.info("Unit %s status %s -> %s", unit_id, previous, new_status)
    return unit


def close_project(
    session: Session,
    project_id: int,
    actor: Optional[Actor] = None,
    cancel_open_bookings: Optional[bool] = None,
    now: Optional[datetime] = None,
) -> Project:
    if cancel_open_bookings is None:
        cancel_open_bookings = settings.cancel_bookings_on_project_close
    timestamp = resolve_now(now)

    with unit_of_work(session):
        project = get_or_raise(session, Project, project_id)
        project.is_closed = True
        project.closed_at = timestamp
        project.status = "CLOSED"
        project.updated_at = timestamp
        session.add(project)

        units = session.query(Unit).filter(Unit.project_id == project.id).all()
        for unit in units:
            apply_unit_status(unit, "CLOSED", timestamp)
            session.add(unit)

        cancelled_ids: List[int] = []
        if cancel_open_bookings and units:
            open_bookings = (
                session.query(Booking)
                .filter(
                    Booking.unit_id.in_([unit.id for unit in units]),
                    Booking.status.notin_(sorted(TERMINAL_BOOKING_STATES)),
                )
                .all()
            )
            for booking in open_bookings:
                assert_transition(booking, "CANCELLED")
                booking.status = "CANCELLED"
                booking.hold_expires_at = None
                booking.updated_at = timestamp
                session.add(booking)
                cancelled_ids.append(booking.id)

        audit.record(
            session,
            action="CLOSE_PROJECT",
            entity_type="projects",
            entity_id=project.id,
            actor=actor,
            timestamp=timestamp,
            details={
                "reason": "Project closed by admin",
                "units_closed": len(units),
                "cancelled_booking_ids": cancelled_ids,
            },
        )

    logger.info(
        "Closed project %s (%d units, %d bookings cancelled)",
        project_id,
        len(units),
        len(cancelled_ids),
    )
    return project


def project_unit_counts(session: Session, project_id: int) -> Dict[str, int]:
    get_or_raise(session, Project, project_id)
    rows = (
        session.query(Unit.status, func.count(Unit.id))
        .filter(Unit.project_id == project_id)
        .group_by(Unit.status)
        .all()
    )
    counts = {status: 0 for status in UNIT_STATUSES}
    for status, count in rows:
        counts[status] = count
    counts["total"] = sum(count for _, count in rows)
    return counts
