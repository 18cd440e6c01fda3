from datetime import datetime
from decimal import Decimal

from sqlalchemy import Column, String, Boolean, Numeric, TIMESTAMP
from sqlalchemy.orm import relationship

from closerdesk.core.config import settings
from closerdesk.core.database import Base
from closerdesk.models.appointment import new_id


class Closer(Base):
    __tablename__ = "closers"

    id = Column(String(36), primary_key=True, default=new_id)

    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    phone = Column(String, nullable=True)
    calendly_link = Column(String, nullable=True)

    # Only active AND approved closers receive new appointments
    is_active = Column(Boolean, default=False, nullable=False)
    is_approved = Column(Boolean, default=False, nullable=False)

    commission_rate = Column(Numeric(5, 4), default=lambda: Decimal(settings.DEFAULT_COMMISSION_RATE))

    created_at = Column(TIMESTAMP, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)

    # No stored totals: call/conversion/revenue figures are derived from appointments
    appointments = relationship("Appointment", back_populates="closer", passive_deletes=True)
    tasks = relationship("Task", back_populates="closer", passive_deletes=True)

    @property
    def is_eligible(self):
        return bool(self.is_active and self.is_approved)
