"""
Audit trail for session bookings, cancellations, status changes, notes edits
and check-ins. Rows are written after the business change has committed.
"""
import json
import logging
from typing import Any, Optional

from mindflow.extensions import db
from mindflow.models import AuditLog, Session

logger = logging.getLogger(__name__)


def log_audit(
    entity_type: str,
    action: str,
    user_id: Optional[int] = None,
    entity_id: Optional[Any] = None,
    details: Optional[dict] = None,
) -> Optional[AuditLog]:
    """
    Append an audit log entry in its own commit.

    A failed audit write is logged and rolled back; the caller's change already
    stands, so nothing is raised.
    """
    entry = AuditLog(
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else None,
        action=action,
        user_id=user_id,
        details=json.dumps(details, default=str) if details else None,
    )
    try:
        db.session.add(entry)
        db.session.commit()
    except Exception as e:
        logger.warning("Audit log failed for %s %s/%s: %s", action, entity_type, entity_id, e)
        db.session.rollback()
        return None
    return entry


def audit_session(action: str, session: Session, user_id: Optional[int] = None, **details) -> Optional[AuditLog]:
    """log_audit() for a Session, keyed by its human id and stamped with its current status"""
    details.setdefault('status', session.status.value)
    return log_audit('session', action, user_id=user_id, entity_id=session.session_id, details=details)
