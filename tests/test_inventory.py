from datetime import datetime
from decimal import Decimal

import pytest

from estatecrm.core.errors import NotFoundError
from estatecrm.models.models import AuditLog, Unit
from estatecrm.schemas.schemas import CustomerData
from estatecrm.services import store
from estatecrm.services.bookings import hold_unit, record_payment_and_complete
from estatecrm.services.inventory import close_project, project_unit_counts, set_unit_status

NOW = datetime(2026, 5, 11, 9, 0)
CUSTOMER = CustomerData(name="Meera Shah")


def test_set_unit_status_updates_availability_and_audits(db_session, create_unit, admin):
    unit = create_unit()

    set_unit_status(db_session, unit.id, "BOOKED", actor=admin)

    db_session.refresh(unit)
    assert unit.status == "BOOKED"
    assert unit.is_available is False
    entry = db_session.query(AuditLog).filter(AuditLog.action == "UPDATE_UNIT_STATUS").one()
    assert entry.entity_type == "units"
    assert '"before": "AVAILABLE"' in entry.details


def test_set_unit_status_missing_unit(db_session):
    with pytest.raises(NotFoundError, match="Unit not found"):
        set_unit_status(db_session, 404, "SOLD")


def test_set_unit_status_rejects_unknown_status(db_session, create_unit):
    unit = create_unit()

    with pytest.raises(ValueError):
        set_unit_status(db_session, unit.id, "RESERVED")

    db_session.refresh(unit)
    assert unit.status == "AVAILABLE"


def test_close_project_closes_units_and_keeps_bookings(db_session, create_project, create_unit):
    project = create_project()
    held = create_unit(project=project)
    create_unit(project=project)
    booking = hold_unit(db_session, held.id, "cust-1", CUSTOMER, Decimal("100000"), now=NOW)

    close_project(db_session, project.id, now=NOW)

    assert project.is_closed is True
    assert project.closed_at == NOW
    assert all(unit.status == "CLOSED" for unit in project.units)
    assert all(unit.is_available is False for unit in project.units)
    db_session.refresh(booking)
    assert booking.status == "HOLD"


def test_close_project_can_cancel_open_bookings(db_session, create_project, create_unit):
    project = create_project()
    open_unit = create_unit(project=project)
    sold_unit = create_unit(project=project)
    open_booking = hold_unit(db_session, open_unit.id, "cust-1", CUSTOMER, Decimal("100000"), now=NOW)
    sold_booking = hold_unit(db_session, sold_unit.id, "cust-2", CUSTOMER, Decimal("100000"), now=NOW)
    record_payment_and_complete(db_session, sold_booking.id, now=NOW)

    close_project(db_session, project.id, cancel_open_bookings=True, now=NOW)

    db_session.refresh(open_booking)
    db_session.refresh(sold_booking)
    assert open_booking.status == "CANCELLED"
    assert open_booking.hold_expires_at is None
    assert sold_booking.status == "BOOKED"
    entry = db_session.query(AuditLog).filter(AuditLog.action == "CLOSE_PROJECT").one()
    assert f'"cancelled_booking_ids": [{open_booking.id}]' in entry.details


def test_close_project_missing(db_session):
    with pytest.raises(NotFoundError):
        close_project(db_session, 12)


def test_project_unit_counts(db_session, create_project, create_unit):
    project = create_project()
    create_unit(project=project)
    create_unit(project=project)
    create_unit(project=project, status="SOLD")

    counts = project_unit_counts(db_session, project.id)

    assert counts["AVAILABLE"] == 2
    assert counts["SOLD"] == 1
    assert counts["HOLD"] == 0
    assert counts["total"] == 3


def test_store_get_all_and_set_all(db_session, create_project, create_unit):
    project = create_project()
    unit = create_unit(project=project)

    assert [record.id for record in store.get_all(db_session, "units")] == [unit.id]

    replacement = Unit(id=unit.id, project_id=project.id, unit_no="B-900", price=Decimal("1"), status="AVAILABLE")
    store.set_all(db_session, "units", [replacement])
    db_session.commit()

    assert db_session.get(Unit, unit.id).unit_no == "B-900"
    with pytest.raises(TypeError):
        store.set_all(db_session, "units", [project])
    with pytest.raises(NotFoundError):
        store.get_all(db_session, "brochures")
