from datetime import datetime

from sqlalchemy import Column, String, TIMESTAMP, JSON

from closerdesk.core.database import Base
from closerdesk.models.appointment import new_id


class CloserAuditLog(Base):
    __tablename__ = "closer_audit_logs"

    id = Column(String(36), primary_key=True, default=new_id)

    # Plain column, not a FK: the trail outlives a deleted closer
    closer_id = Column(String(36), nullable=False, index=True)

    # 'appointment_assigned', 'appointment_outcome_updated', 'approved',
    # 'activated', 'deactivated', 'calendly_link_updated', 'deleted'
    action = Column(String, nullable=False)
    details = Column(JSON, nullable=True)

    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)

    created_at = Column(TIMESTAMP, default=datetime.utcnow)
