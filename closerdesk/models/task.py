from datetime import datetime

from sqlalchemy import Column, String, Text, TIMESTAMP, ForeignKey
from sqlalchemy.orm import relationship

from closerdesk.core.database import Base
from closerdesk.models.appointment import new_id

TASK_PRIORITIES = ("low", "medium", "high")
TASK_STATUSES = ("pending", "in_progress", "completed")


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=new_id)

    closer_id = Column(String(36), ForeignKey("closers.id", ondelete="SET NULL"), nullable=True, index=True)
    appointment_id = Column(String(36), ForeignKey("appointments.id", ondelete="SET NULL"), nullable=True)
    lead_email = Column(String, nullable=True, index=True)

    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(String, default="medium")  # 'low', 'medium', 'high'
    status = Column(String, default="pending")  # 'pending', 'in_progress', 'completed'

    due_date = Column(TIMESTAMP, nullable=True)
    completed_at = Column(TIMESTAMP, nullable=True)

    created_at = Column(TIMESTAMP, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)

    closer = relationship("Closer", back_populates="tasks")
    appointment = relationship("Appointment", back_populates="tasks")
