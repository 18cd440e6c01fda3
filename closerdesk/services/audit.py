from typing import Optional

from sqlalchemy.orm import Session

from closerdesk.models.closer_audit_log import CloserAuditLog


def record_closer_action(
    db: Session,
    closer_id: str,
    action: str,
    details: dict,
    context: Optional[dict] = None,
) -> CloserAuditLog:
    """Adds an audit row to the session; the caller owns the commit."""
    context = context or {}
    entry = CloserAuditLog(
        closer_id=closer_id,
        action=action,
        details=details,
        ip_address=context.get("ip_address") or "unknown",
        user_agent=context.get("user_agent") or "unknown",
    )
    db.add(entry)
    return entry
