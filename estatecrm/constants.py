# Roles allowed to finalize a sale by recording payment.
PAYMENT_APPROVER_ROLES = {"ADMIN", "SUPER_ADMIN"}
BOOKING_APPROVER_ROLES = {"MANAGER"}

SYSTEM_ACTOR_ID = "system"
SYSTEM_ACTOR_NAME = "System"

# --- Units ---
UNIT_STATUSES = ("AVAILABLE", "HOLD", "BOOKED", "SOLD", "CLOSED")

# --- Bookings ---
BOOKING_STATUSES = (
    "HOLD",
    "HOLD_REQUESTED",
    "HOLD_CONFIRMED",
    "BOOKING_PENDING_APPROVAL",
    "BOOKING_CONFIRMED",
    "PAYMENT_PENDING",
    "BOOKED",
    "CANCELLED",
    "REFUNDED",
)
HOLD_STATES = frozenset({"HOLD", "HOLD_REQUESTED", "HOLD_CONFIRMED"})
TERMINAL_BOOKING_STATES = frozenset({"BOOKED", "CANCELLED", "REFUNDED"})
