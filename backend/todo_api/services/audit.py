import logging

from sqlalchemy.orm import Session

from todo_api.models import AuditLog

logger = logging.getLogger(__name__)


def log_event(db: Session, action: str, status: str, message: str = "", user_id: str | None = None, details: dict | None = None) -> None:
    entry = AuditLog(
        user_id=user_id,
        action=action,
        status=status,
        message=message,
        details=details or {},
    )
    db.add(entry)
    db.commit()
    logger.debug("audit %s %s user=%s", action, status, user_id)
