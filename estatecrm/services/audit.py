import json
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy.orm import Session

from ..models.models import AuditLog
from ..schemas.schemas import SYSTEM_ACTOR, Actor
from ..utils.date_utils import to_naive_utc, utcnow


def _serialize(data: Any) -> Optional[str]:
    if data is None:
        return None
    if isinstance(data, str):
        return data
    try:
        return json.dumps(data, default=str)
    except TypeError:
        return str(data)


def record(
    db_session: Session,
    action: str,
    entity_type: str,
    entity_id: Any = None,
    actor: Optional[Actor] = None,
    details: Any = None,
    timestamp: Optional[datetime] = None,
) -> AuditLog:
    """Append an audit entry to the caller's transaction, stamped with the operation's time."""
    actor = actor or SYSTEM_ACTOR
    entry = AuditLog(
        timestamp=to_naive_utc(timestamp) if timestamp is not None else utcnow(),
        actor_id=actor.id,
        actor_name=actor.name,
        tenant_id=actor.tenant_id,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else None,
        details=_serialize(details),
    )
    db_session.add(entry)
    db_session.flush()
    return entry


def list_entries(
    db_session: Session,
    entity_type: Optional[str] = None,
    entity_id: Any = None,
    limit: int = 50,
) -> List[AuditLog]:
    query = db_session.query(AuditLog)
    if entity_type:
        query = query.filter(AuditLog.entity_type == entity_type)
    if entity_id is not None:
        query = query.filter(AuditLog.entity_id == str(entity_id))
    return query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(limit).all()
