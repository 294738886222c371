#!/usr/bin/env python3
"""Run one maintenance pass: send due payment reminders, flag overdue payments, expire holds."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from estatecrm.config import SessionLocal  # noqa: E402
from estatecrm.core.logging import configure_logging  # noqa: E402
from estatecrm.services.maintenance import run_maintenance_cycle  # noqa: E402


def main() -> None:
    configure_logging()
    with SessionLocal() as session:
        result = run_maintenance_cycle(session)
    print(f"Reminders sent: {result.reminders_sent}")
    if result.overdue_payment_ids:
        print(f"Payments marked overdue: {', '.join(str(pid) for pid in result.overdue_payment_ids)}")
    if result.released_booking_ids:
        print(f"Expired holds released: {', '.join(str(bid) for bid in result.released_booking_ids)}")


if __name__ == "__main__":
    main()
