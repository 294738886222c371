from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship as orm_relationship

from ..config import Base
from ..utils.date_utils import utcnow


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    tenant_id = Column(String, nullable=True, index=True)
    location = Column(String, nullable=True)
    status = Column(String, nullable=False, default="Active")
    is_closed = Column(Boolean, default=False, nullable=False)
    closed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    units = orm_relationship("Unit", back_populates="project", order_by="Unit.id")


class Unit(Base):
    __tablename__ = "units"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    unit_no = Column(String, nullable=False)
    price = Column(Numeric(14, 2), nullable=False)
    status = Column(String, nullable=False, default="AVAILABLE", index=True)
    is_available = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    project = orm_relationship("Project", back_populates="units")
    bookings = orm_relationship("Booking", back_populates="unit", order_by="Booking.id")


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (Index("ix_bookings_unit_status", "unit_id", "status"),)

    id = Column(Integer, primary_key=True, index=True)
    unit_id = Column(Integer, ForeignKey("units.id"), nullable=False)
    tenant_id = Column(String, nullable=True, index=True)

    customer_id = Column(String, nullable=False, index=True)
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=True)
    customer_phone = Column(String, nullable=True)

    # Display copies of the unit/project taken when the hold is placed.
    project_id = Column(Integer, nullable=True)
    project_name = Column(String, nullable=True)
    unit_no = Column(String, nullable=True)

    token_amount = Column(Numeric(14, 2), nullable=False)
    total_price = Column(Numeric(14, 2), nullable=False)
    status = Column(String, nullable=False, default="HOLD", index=True)
    hold_expires_at = Column(DateTime, nullable=True)

    agent_id = Column(String, nullable=True)
    agent_name = Column(String, nullable=True)
    manager_id = Column(String, nullable=True)
    manager_name = Column(String, nullable=True)
    manager_approved_at = Column(DateTime, nullable=True)
    manager_notes = Column(Text, nullable=True)

    payment_id = Column(Integer, nullable=True)
    payment_mode = Column(String, nullable=True)
    payment_remarks = Column(Text, nullable=True)
    payment_recorded_at = Column(DateTime, nullable=True)

    notes = Column(Text, nullable=True)
    booked_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    unit = orm_relationship("Unit", back_populates="bookings")
    payments = orm_relationship("Payment", back_populates="booking", order_by="Payment.id")


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(String, nullable=True, index=True)
    customer_id = Column(String, nullable=False, index=True)
    customer_name = Column(String, nullable=True)
    unit_id = Column(Integer, ForeignKey("units.id"), nullable=True)
    unit_no = Column(String, nullable=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=True, index=True)
    amount = Column(Numeric(14, 2), nullable=False)
    payment_type = Column(String, nullable=False, default="Booking")
    method = Column(String, nullable=False, default="Bank Transfer")
    date = Column(DateTime, default=utcnow, nullable=False)
    due_date = Column(Date, nullable=True)
    status = Column(String, nullable=False, default="Pending", index=True)
    receipt_no = Column(String, nullable=True, unique=True)
    notes = Column(Text, nullable=True)
    next_reminder_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    booking = orm_relationship("Booking", back_populates="payments")
    unit = orm_relationship("Unit")
    reminders = orm_relationship(
        "PaymentReminder",
        back_populates="payment",
        cascade="all, delete-orphan",
        order_by="PaymentReminder.id",
    )


class PaymentReminder(Base):
    __tablename__ = "payment_reminders"

    id = Column(Integer, primary_key=True, index=True)
    payment_id = Column(Integer, ForeignKey("payments.id", ondelete="CASCADE"), nullable=False, index=True)
    channel = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    scheduled_at = Column(DateTime, nullable=False)
    status = Column(String, nullable=False, default="SCHEDULED", index=True)
    sent_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    payment = orm_relationship("Payment", back_populates="reminders")


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    timestamp = Column(DateTime, default=utcnow, index=True, nullable=False)
    actor_id = Column(String, nullable=False, default="system")
    actor_name = Column(String, nullable=True)
    tenant_id = Column(String, nullable=True)
    action = Column(String, nullable=False)
    entity_type = Column(String, nullable=False)
    entity_id = Column(String, nullable=True)
    details = Column(Text, nullable=True)
