import sys
from collections.abc import Callable, Generator
from decimal import Decimal
from pathlib import Path
from typing import Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from estatecrm.config import Base  # noqa: E402
import estatecrm.config as app_config  # noqa: E402
# Import the full models module so all tables (including audit_logs) register with Base metadata.
from estatecrm.models import models as _all_models  # noqa: E402,F401
from estatecrm.models.models import Payment, Project, Unit  # noqa: E402
from estatecrm.schemas.schemas import Actor  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_output_dirs(tmp_path, monkeypatch):
    """Keep receipts and reminder outbox files inside the test's temp directory."""
    monkeypatch.setattr(app_config.settings, "receipt_output_dir", str(tmp_path / "receipts"))
    monkeypatch.setattr(app_config.settings, "reminder_outbox_dir", str(tmp_path / "reminders"))
    monkeypatch.setattr(app_config.settings, "reminder_backend", "log")


@pytest.fixture
def db_session(tmp_path) -> Generator[Session, None, None]:
    """Provide a fresh SQLite database for each test."""
    db_path = tmp_path / "test.db"
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def session_factory(db_session: Session) -> Callable[[], Session]:
    """Session factory bound to the per-test database, for code that opens its own sessions."""
    return sessionmaker(bind=db_session.get_bind())


@pytest.fixture
def create_project(db_session: Session) -> Callable[..., Project]:
    counter = {"value": 0}

    def _create(name: Optional[str] = None, tenant_id: str = "tenant-1") -> Project:
        counter["value"] += 1
        project = Project(name=name or f"Skyline Towers {counter['value']}", tenant_id=tenant_id, location="Pune")
        db_session.add(project)
        db_session.commit()
        return project

    return _create


@pytest.fixture
def create_unit(db_session: Session, create_project: Callable[..., Project]) -> Callable[..., Unit]:
    counter = {"value": 0}

    def _create(
        project: Optional[Project] = None,
        price: Decimal = Decimal("8500000"),
        status: str = "AVAILABLE",
    ) -> Unit:
        counter["value"] += 1
        project = project or create_project()
        unit = Unit(
            project_id=project.id,
            unit_no=f"A-{100 + counter['value']}",
            price=price,
            status=status,
            is_available=status == "AVAILABLE",
        )
        db_session.add(unit)
        db_session.commit()
        return unit

    return _create


@pytest.fixture
def create_payment(db_session: Session) -> Callable[..., Payment]:
    def _create(
        amount: Decimal = Decimal("250000"),
        status: str = "Pending",
        customer_id: str = "cust-1",
        **fields,
    ) -> Payment:
        payment = Payment(customer_id=customer_id, amount=amount, status=status, **fields)
        db_session.add(payment)
        db_session.commit()
        return payment

    return _create


@pytest.fixture
def agent() -> Actor:
    return Actor(id="agent-7", name="Asha Agent", role="AGENT", tenant_id="tenant-1")


@pytest.fixture
def manager() -> Actor:
    return Actor(id="mgr-1", name="Mohan Manager", role="MANAGER", tenant_id="tenant-1")


@pytest.fixture
def admin() -> Actor:
    return Actor(id="adm-1", name="Anita Admin", role="ADMIN", tenant_id="tenant-1")
