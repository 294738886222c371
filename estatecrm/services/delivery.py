import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..config import settings
from ..models.models import Payment, PaymentReminder
from ..utils.date_utils import utcnow

logger = logging.getLogger(__name__)

MAX_MESSAGE_PREVIEW = 24


@dataclass
class DeliveryResult:
    backend: str
    channel: str
    recipient: Optional[str]
    outbox_path: Optional[str]


def _mask_recipient(value: Optional[str]) -> str:
    if not value:
        return "<none>"
    if "@" in value:
        name, domain = value.split("@", 1)
        masked = f"{name[0]}***" if name else "***"
        return f"{masked}@{domain}"
    digits = "".join(ch for ch in value if ch.isdigit())
    if len(digits) <= 4:
        return "***"
    return f"***{digits[-4:]}"


def _preview(message: str) -> str:
    if len(message) <= MAX_MESSAGE_PREVIEW:
        return message
    return f"{message[:MAX_MESSAGE_PREVIEW]}... (len={len(message)})"


def _resolve_recipient(payment: Payment, channel: str) -> Optional[str]:
    booking = payment.booking
    if booking is None:
        return None
    if channel == "email":
        return booking.customer_email
    return booking.customer_phone


def _write_local_reminder(payment: Payment, reminder: PaymentReminder, recipient: Optional[str]) -> str:
    timestamp = utcnow().strftime("%Y%m%d%H%M%S%f")
    filename = f"{timestamp}_payment{payment.id}_reminder{reminder.id}_{reminder.channel}.txt"
    output_dir = Path(settings.reminder_outbox_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / filename
    contents = "\n".join(
        [
            f"Channel: {reminder.channel}",
            f"Recipient: {recipient or 'unknown'}",
            f"Customer: {payment.customer_name or payment.customer_id}",
            f"Payment: {payment.id} ({payment.amount})",
            "",
            reminder.message,
        ]
    )
    path.write_text(contents)
    logger.info("[LOCAL REMINDER] %s", path)
    return str(path)


def deliver_reminder(payment: Payment, reminder: PaymentReminder) -> DeliveryResult:
    """Dispatch a reminder through the configured backend."""
    backend = (settings.reminder_backend or "log").strip().lower()
    recipient = _resolve_recipient(payment, reminder.channel)
    logger.info(
        "Dispatching reminder backend=%s channel=%s payment=%s to=%s message=%s",
        backend,
        reminder.channel,
        payment.id,
        _mask_recipient(recipient),
        _preview(reminder.message),
    )

    try:
        if backend == "log":
            return DeliveryResult(backend="log", channel=reminder.channel, recipient=recipient, outbox_path=None)
        if backend != "local":
            logger.warning("Unknown reminder backend '%s'. Defaulting to local outbox.", backend)
        path = _write_local_reminder(payment, reminder, recipient)
    except Exception:
        logger.exception("Reminder dispatch failed for backend=%s.", backend)
        raise
    return DeliveryResult(backend="local", channel=reminder.channel, recipient=recipient, outbox_path=path)
