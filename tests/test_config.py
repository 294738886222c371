import json
import logging

from estatecrm.config import Settings
from estatecrm.core.logging import configure_logging


def test_settings_defaults(monkeypatch):
    for name in ("CRM_DEFAULT_HOLD_HOURS", "CRM_RECEIPT_PREFIX", "CRM_REMINDER_BACKEND"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.default_hold_hours == 48
    assert settings.receipt_prefix == "RCP"
    assert settings.reminder_backend == "log"
    assert settings.cancel_bookings_on_project_close is False
    assert settings.auto_release_expired_holds is False


def test_settings_read_prefixed_environment(monkeypatch):
    monkeypatch.setenv("CRM_DEFAULT_HOLD_HOURS", "24")
    monkeypatch.setenv("CRM_REMINDER_BACKEND", "local")
    monkeypatch.setenv("CRM_CANCEL_BOOKINGS_ON_PROJECT_CLOSE", "true")

    settings = Settings(_env_file=None)

    assert settings.default_hold_hours == 24
    assert settings.reminder_backend == "local"
    assert settings.cancel_bookings_on_project_close is True


def test_configure_logging_json_output(capsys):
    root = logging.getLogger()
    previous_handlers = list(root.handlers)
    previous_level = root.level
    try:
        configure_logging(level="INFO", json_output=True)
        logging.getLogger("estatecrm.test").info("hold placed", extra={"booking_id": 7})
        line = capsys.readouterr().err.strip().splitlines()[-1]
        payload = json.loads(line)
        assert payload["message"] == "hold placed"
        assert payload["booking_id"] == 7
        assert payload["levelname"] == "INFO"
        assert logging.getLogger("apscheduler").level == logging.WARNING
    finally:
        root.handlers = previous_handlers
        root.setLevel(previous_level)
