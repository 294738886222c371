from pathlib import Path

from alembic import command
from alembic.config import Config
import estatecrm.config as app_config
from estatecrm.models.models import Booking, PaymentReminder
import sqlalchemy as sa

ROOT = Path(__file__).resolve().parents[1]


def test_initial_migration_creates_schema(tmp_path, monkeypatch):
    db_path = tmp_path / "migrations.db"
    db_url = f"sqlite:///{db_path}"
    monkeypatch.setattr(app_config.settings, "database_url", db_url, raising=False)
    monkeypatch.chdir(ROOT)

    config = Config(str(Path("estatecrm/alembic.ini")))
    config.set_main_option("script_location", "estatecrm/migrations")
    command.upgrade(config, "head")

    engine = sa.create_engine(db_url)
    try:
        inspector = sa.inspect(engine)
        tables = set(inspector.get_table_names())
        assert {"projects", "units", "bookings", "payments", "payment_reminders", "audit_logs"} <= tables
        booking_columns = {column["name"] for column in inspector.get_columns("bookings")}
        assert {"hold_expires_at", "manager_approved_at", "payment_recorded_at"} <= booking_columns
        index_names = {index["name"] for index in inspector.get_indexes("bookings")}
        assert "ix_bookings_unit_status" in index_names

        with sa.orm.Session(engine) as session:
            session.query(Booking).all()
            session.query(PaymentReminder).all()
    finally:
        engine.dispose()

    command.downgrade(config, "base")
    engine = sa.create_engine(db_url)
    try:
        assert "bookings" not in sa.inspect(engine).get_table_names()
    finally:
        engine.dispose()
