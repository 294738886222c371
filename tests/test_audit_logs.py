from datetime import datetime, timedelta
from decimal import Decimal

from estatecrm.models.models import AuditLog
from estatecrm.schemas.schemas import Actor, CustomerData, ReminderCreate
from estatecrm.services import audit
from estatecrm.services.bookings import hold_unit, reject
from estatecrm.services.inventory import set_unit_status
from estatecrm.services.payments import create_reminder, tick
from estatecrm.services.store import unit_of_work

NOW = datetime(2026, 4, 20, 8, 0)


def test_record_defaults_to_system_actor(db_session):
    with unit_of_work(db_session):
        entry = audit.record(db_session, action="SYNC", entity_type="units", entity_id=5, details={"count": 2})

    stored = db_session.get(AuditLog, entry.id)
    assert stored.actor_id == "system"
    assert stored.actor_name == "System"
    assert stored.entity_id == "5"
    assert stored.details == '{"count": 2}'


def test_record_is_discarded_with_failed_transaction(db_session):
    try:
        with unit_of_work(db_session):
            audit.record(db_session, action="NEVER", entity_type="units")
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    assert db_session.query(AuditLog).count() == 0


def test_record_serializes_non_json_values(db_session):
    with unit_of_work(db_session):
        entry = audit.record(db_session, action="PRICE", entity_type="units", details={"price": Decimal("10.50")})

    assert entry.details == '{"price": "10.50"}'


def test_list_entries_filters_by_entity(db_session, create_unit):
    unit = create_unit()
    actor = Actor(id="agent-1", name="Agent", role="AGENT", tenant_id="t-9")
    booking = hold_unit(db_session, unit.id, "cust-1", CustomerData(name="Nila"), Decimal("1000"), actor=actor, now=NOW)
    reject(db_session, booking.id, actor=actor, now=NOW + timedelta(hours=1))

    entries = audit.list_entries(db_session, entity_type="bookings", entity_id=booking.id)

    assert [entry.action for entry in entries] == ["REJECT_BOOKING", "HOLD_UNIT"]
    assert {entry.tenant_id for entry in entries} == {"t-9"}
    assert audit.list_entries(db_session, entity_type="payments") == []


def test_entries_are_stamped_with_operation_time(db_session, create_unit, create_payment):
    unit = create_unit()
    later = NOW + timedelta(hours=1)
    booking = hold_unit(db_session, unit.id, "cust-2", CustomerData(name="Ravi"), Decimal("1000"), now=NOW)
    reject(db_session, booking.id, now=later)
    set_unit_status(db_session, unit.id, "SOLD", now=later)
    payment = create_payment()
    create_reminder(db_session, payment.id, ReminderCreate(type="email", message="Due", scheduled_at=NOW), now=NOW)
    tick(db_session, now=later)

    stamps = {entry.action: entry.timestamp for entry in db_session.query(AuditLog).all()}

    assert stamps["HOLD_UNIT"] == NOW
    assert stamps["REJECT_BOOKING"] == later
    assert stamps["UPDATE_UNIT_STATUS"] == later
    assert stamps["CREATE_REMINDER"] == NOW
    assert stamps["SEND_SCHEDULED_REMINDERS"] == later
