from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from ..constants import SYSTEM_ACTOR_ID, SYSTEM_ACTOR_NAME

PaymentMethod = Literal["Bank Transfer", "Cash", "Cheque", "Online", "UPI", "RTGS", "Card", "Net Banking"]
PaymentType = Literal["Token", "Booking", "Down Payment", "Milestone", "Final"]
PaymentStatus = Literal["Pending", "Received", "Overdue", "Refunded"]
ReminderChannel = Literal["email", "sms", "whatsapp"]


class Actor(BaseModel):
    id: str = SYSTEM_ACTOR_ID
    name: str = SYSTEM_ACTOR_NAME
    role: Optional[str] = None
    tenant_id: Optional[str] = None


SYSTEM_ACTOR = Actor()


class CustomerData(BaseModel):
    name: str = Field(min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    tenant_id: Optional[str] = None


class PaymentDetails(BaseModel):
    amount: Optional[Decimal] = Field(default=None, gt=0)
    method: PaymentMethod = "Bank Transfer"
    payment_type: PaymentType = "Booking"
    status: PaymentStatus = "Received"
    paid_on: Optional[datetime] = None
    due_date: Optional[date] = None
    remarks: Optional[str] = None

    # Only used when recording a payment that is not tied to a booking.
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    unit_id: Optional[int] = None
    unit_no: Optional[str] = None
    tenant_id: Optional[str] = None


class ReminderCreate(BaseModel):
    type: ReminderChannel
    message: str = Field(min_length=1)
    scheduled_at: Optional[datetime] = None
    send_now: bool = False

    @model_validator(mode="after")
    def _reject_blank_message(self) -> "ReminderCreate":
        if not self.message.strip():
            raise ValueError("Reminder message cannot be blank.")
        return self


class UnitRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    project_id: int
    unit_no: str
    price: Decimal
    status: str
    is_available: bool


class BookingRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    unit_id: int
    unit_no: Optional[str]
    project_id: Optional[int]
    project_name: Optional[str]
    customer_id: str
    customer_name: str
    token_amount: Decimal
    total_price: Decimal
    status: str
    hold_expires_at: Optional[datetime]
    manager_id: Optional[str]
    manager_approved_at: Optional[datetime]
    payment_id: Optional[int]
    booked_at: Optional[datetime]


class ReminderRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    channel: str
    message: str
    scheduled_at: datetime
    status: str
    sent_at: Optional[datetime]


class PaymentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_id: str
    unit_id: Optional[int]
    booking_id: Optional[int]
    amount: Decimal
    payment_type: str
    method: str
    status: str
    receipt_no: Optional[str]
    next_reminder_at: Optional[datetime]
    reminders: List[ReminderRead] = []
