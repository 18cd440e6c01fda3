import logging
from typing import Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session, joinedload

from closerdesk.core.config import settings
from closerdesk.core.exceptions import ValidationError
from closerdesk.models.appointment import Appointment, TYPE_APPOINTMENT, TYPE_QUIZ_SESSION
from closerdesk.schemas.appointment import AppointmentCreate

logger = logging.getLogger(__name__)


class AppointmentService:
    def __init__(self, db: Session):
        self.db = db

    def list_appointments(self, closer_id: Optional[str] = None):
        """Newest first. Quiz sessions are listed too (they are only excluded from assignment)."""
        query = self.db.query(Appointment).options(joinedload(Appointment.closer))
        if closer_id is not None:
            query = query.filter(Appointment.closer_id == closer_id)
        return query.order_by(desc(Appointment.scheduled_at)).all()

    def get_appointment(self, appointment_id: str):
        return self.db.query(Appointment).filter(Appointment.id == appointment_id).first()

    def create_appointment(self, data: AppointmentCreate):
        if data.type not in (TYPE_APPOINTMENT, TYPE_QUIZ_SESSION):
            raise ValidationError(f"Unknown appointment type '{data.type}'")
        if not data.customer_name.strip():
            raise ValidationError("Customer name is required")

        appointment = Appointment(
            type=data.type,
            quiz_session_id=data.quiz_session_id,
            customer_name=data.customer_name.strip(),
            customer_email=str(data.customer_email).lower(),
            customer_phone=data.customer_phone,
            scheduled_at=data.scheduled_at,
            duration=data.duration or settings.DEFAULT_APPOINTMENT_DURATION,
            status="scheduled",
            affiliate_code=data.affiliate_code,
            utm_source=data.utm_source,
            utm_medium=data.utm_medium,
            utm_campaign=data.utm_campaign,
        )
        self.db.add(appointment)
        self.db.commit()
        self.db.refresh(appointment)
        logger.info(f"Appointment {appointment.id} created for {appointment.customer_email}")
        return appointment

    def delete_appointment(self, appointment_id: str) -> bool:
        """Idempotent: returns False when the appointment is already gone."""
        appointment = self.get_appointment(appointment_id)
        if not appointment:
            logger.info(f"Appointment {appointment_id} already deleted")
            return False

        closer_id = appointment.closer_id
        self.db.delete(appointment)
        try:
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete appointment {appointment_id}: {e}")
            raise

        logger.info(f"Appointment {appointment_id} deleted (closer={closer_id})")
        return True
