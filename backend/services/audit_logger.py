import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import get_settings
from ..models.audit import AuditEvent, AuditAction

logger = logging.getLogger(__name__)


def create_audit_event(
    db: Session,
    actor: str,
    action: AuditAction,
    entity_type: str,
    entity_id: str,
    details: dict[str, Any] | None,
    request: Request | None,
    *,
    commit: bool = True,
) -> AuditEvent | None:
    """Record an audit event. Audit failures are logged, never raised to the caller."""
    settings = get_settings()
    event = AuditEvent(
        actor=actor,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        request_id=getattr(request.state, "request_id", "") if request is not None else "",
        ip_address=(
            getattr(request.client, "host", "") if request is not None and request.client else ""
        ),
        details=details or {},
        timestamp=datetime.now(timezone.utc),
    )
    db.add(event)
    if commit:
        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to store audit event for %s %s", entity_type, action.value)
            return None

    if settings.AUDIT_EXPORT_PATH:
        _write_audit_export(settings.AUDIT_EXPORT_PATH, event)

    return event


def _write_audit_export(path: str, event: AuditEvent) -> None:
    export_path = Path(path)
    export_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "timestamp": event.timestamp.isoformat(),
        "actor": event.actor,
        "action": event.action.value,
        "entity_type": event.entity_type,
        "entity_id": event.entity_id,
        "request_id": event.request_id,
        "ip_address": event.ip_address,
        "details": event.details,
    }
    with export_path.open("a", encoding="utf-8") as f:
        f.write(json.dumps(payload) + "\n")
