#!/usr/bin/env python3
"""Keep the maintenance cycle running on an interval until interrupted."""

from __future__ import annotations

import argparse
import signal
import sys
import threading
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from estatecrm.core.logging import configure_logging  # noqa: E402
from estatecrm.services.maintenance import MaintenanceScheduler  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description="Run payment reminder and booking upkeep on a schedule.")
    parser.add_argument("--interval", type=int, default=None, help="Seconds between runs (defaults to settings)")
    args = parser.parse_args()

    configure_logging()
    scheduler = MaintenanceScheduler(interval_seconds=args.interval)
    stop = threading.Event()

    def _handle_signal(signum, frame):  # noqa: ARG001
        stop.set()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    scheduler.start()
    try:
        stop.wait()
    finally:
        scheduler.shutdown()


if __name__ == "__main__":
    main()
