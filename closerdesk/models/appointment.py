import uuid
from datetime import datetime

from sqlalchemy import Column, String, Text, Integer, Numeric, TIMESTAMP, ForeignKey
from sqlalchemy.orm import relationship

from closerdesk.core.database import Base

APPOINTMENT_STATUSES = ("scheduled", "confirmed", "completed", "no_show", "cancelled")

OUTCOMES = (
    "converted",
    "not_interested",
    "needs_follow_up",
    "wrong_number",
    "no_answer",
    "callback_requested",
    "rescheduled",
)

# One column per outcome; a later outcome never overwrites another outcome's link
RECORDING_LINK_FIELDS = {
    "converted": "recording_link_converted",
    "not_interested": "recording_link_not_interested",
    "needs_follow_up": "recording_link_needs_follow_up",
    "wrong_number": "recording_link_wrong_number",
    "no_answer": "recording_link_no_answer",
    "callback_requested": "recording_link_callback_requested",
    "rescheduled": "recording_link_rescheduled",
}

TYPE_APPOINTMENT = "appointment"
TYPE_QUIZ_SESSION = "quiz_session"


def new_id():
    return str(uuid.uuid4())


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(String(36), primary_key=True, default=new_id)

    # 'appointment' or 'quiz_session' (quiz leads share the admin list)
    type = Column(String, nullable=False, default=TYPE_APPOINTMENT)
    quiz_session_id = Column(String, nullable=True, index=True)

    # Customer
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=False, index=True)
    customer_phone = Column(String, nullable=True)

    # Scheduling
    scheduled_at = Column(TIMESTAMP, nullable=False)
    duration = Column(Integer, default=30)  # minutes
    status = Column(String, nullable=False, default="scheduled")

    # Outcome
    outcome = Column(String, nullable=True)
    notes = Column(Text, nullable=True)

    # Commercial
    sale_value = Column(Numeric(10, 2), nullable=True)
    commission_amount = Column(Numeric(10, 2), nullable=True)
    affiliate_code = Column(String, nullable=True, index=True)
    utm_source = Column(String, nullable=True)
    utm_medium = Column(String, nullable=True)
    utm_campaign = Column(String, nullable=True)

    # Assignment
    closer_id = Column(String(36), ForeignKey("closers.id", ondelete="SET NULL"), nullable=True, index=True)

    # Recording links (see RECORDING_LINK_FIELDS)
    recording_link_converted = Column(Text, nullable=True)
    recording_link_not_interested = Column(Text, nullable=True)
    recording_link_needs_follow_up = Column(Text, nullable=True)
    recording_link_wrong_number = Column(Text, nullable=True)
    recording_link_no_answer = Column(Text, nullable=True)
    recording_link_callback_requested = Column(Text, nullable=True)
    recording_link_rescheduled = Column(Text, nullable=True)

    created_at = Column(TIMESTAMP, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    closer = relationship("Closer", back_populates="appointments")
    tasks = relationship("Task", back_populates="appointment")
