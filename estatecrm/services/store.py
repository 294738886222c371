"""Record store access shared by the booking, inventory and payment services.

Collections are addressed by their entity-type name, mirroring how callers
refer to them in audit entries. Every compound operation runs inside
``unit_of_work`` so the unit, booking, payment and audit rows it touches are
committed together or not at all.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional, Type

from sqlalchemy.orm import Session

from ..config import Base
from ..core.errors import NotFoundError
from ..models.models import AuditLog, Booking, Payment, Project, Unit

ENTITY_MODELS: Dict[str, Type[Base]] = {
    "projects": Project,
    "units": Unit,
    "bookings": Booking,
    "payments": Payment,
    "audit_logs": AuditLog,
}


def _model_for(entity_type: str) -> Type[Base]:
    model = ENTITY_MODELS.get(entity_type)
    if model is None:
        raise NotFoundError(f"Unknown entity type '{entity_type}'", entity_type=entity_type)
    return model


def get_all(session: Session, entity_type: str) -> List[Base]:
    model = _model_for(entity_type)
    return session.query(model).order_by(model.id.asc()).all()


def set_all(session: Session, entity_type: str, records: Iterable[Base]) -> List[Base]:
    model = _model_for(entity_type)
    stored: List[Base] = []
    for record in records:
        if not isinstance(record, model):
            raise TypeError(f"{entity_type} expects {model.__name__} records, got {type(record).__name__}.")
        stored.append(session.merge(record))
    session.flush()
    return stored


def get_or_raise(session: Session, model: Type[Base], entity_id: object, label: Optional[str] = None) -> Base:
    instance = session.get(model, entity_id)
    if instance is None:
        name = label or model.__name__
        raise NotFoundError(f"{name} not found", entity_type=model.__name__, entity_id=entity_id)
    return instance


@contextmanager
def unit_of_work(session: Session) -> Iterator[Session]:
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
