"""
Service for authentication audit logging
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from authlab.core.time import utcnow
from authlab.db.repository import Repository
from authlab.models import AuthEvent, AuthEventType
from authlab.schemas.events import EventDetails

logger = logging.getLogger(__name__)

events = Repository(AuthEvent)


def log_event(
    db: Session,
    event_type: AuthEventType,
    user_id: Optional[str] = None,
    details: Optional[EventDetails] = None,
) -> AuthEvent:
    """
    Append an entry to the audit trail.

    Args:
        db: Database session
        event_type: Type of authentication event
        user_id: Subject of the event, if known
        details: Typed payload describing the decision

    Returns:
        Created AuthEvent entry
    """
    logger.info("auth event %s user=%s", event_type.value, user_id)
    return events.create(
        db,
        user_id=user_id,
        event_type=event_type,
        details=details.model_dump() if details is not None else None,
        created_at_utc=utcnow(),
    )


def list_events(db: Session, limit: int = 100) -> List[AuthEvent]:
    return events.list_all(db, limit=limit)


def list_events_for_user(db: Session, user_id: str, limit: int = 50) -> List[AuthEvent]:
    return events.list_by_owner(db, user_id, limit=limit)
