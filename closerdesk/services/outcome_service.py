import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from sqlalchemy.orm import Session

from closerdesk.core.exceptions import NotFoundError, ValidationError
from closerdesk.models.appointment import Appointment, OUTCOMES
from closerdesk.models.closer import Closer
from closerdesk.services.audit import record_closer_action
from closerdesk.services.closer_stats import CloserStatsService
from closerdesk.services.recording_links import set_recording_link

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
# Largest value a Numeric(10, 2) column holds
MAX_SALE_VALUE = Decimal("99999999.99")


def parse_sale_value(raw) -> Optional[Decimal]:
    """None/"" -> None; anything else must be a finite, non-negative number."""
    if raw is None:
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if raw == "":
            return None
    if isinstance(raw, bool):
        raise ValidationError("Sale value must be a number")

    try:
        value = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        raise ValidationError("Sale value must be a number")

    if not value.is_finite():
        raise ValidationError("Sale value must be a number")
    if value < 0:
        raise ValidationError("Sale value cannot be negative")
    if value > MAX_SALE_VALUE:
        raise ValidationError(f"Sale value cannot exceed {MAX_SALE_VALUE}")
    return value.quantize(CENTS)


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class OutcomeService:
    def __init__(self, db: Session):
        self.db = db

    def update_outcome(
        self,
        appointment_id: str,
        outcome: Optional[str],
        notes: Optional[str] = None,
        sale_value=None,
        recording_link: Optional[str] = None,
        closer_id: Optional[str] = None,
        context: Optional[dict] = None,
    ):
        """
        Records a call result. With ``closer_id`` the appointment must belong
        to that closer (closer portal); without it any appointment can be
        updated (admin).

        Returns ``(appointment, closer_stats)``; stats are None for an
        unassigned appointment.
        """
        if not outcome:
            raise ValidationError("Outcome is required")
        if outcome not in OUTCOMES:
            raise ValidationError(f"Unknown outcome '{outcome}'")

        amount = parse_sale_value(sale_value)
        if amount is not None and outcome != "converted":
            raise ValidationError("Sale value can only be recorded for a converted outcome")

        query = self.db.query(Appointment).filter(Appointment.id == appointment_id)
        if closer_id is not None:
            query = query.filter(Appointment.closer_id == closer_id)
        appointment = query.with_for_update().first()
        if not appointment:
            raise NotFoundError("Appointment not found")

        previous_outcome = appointment.outcome

        commission_amount = None
        if amount is not None and appointment.closer_id:
            closer = self.db.query(Closer).filter(Closer.id == appointment.closer_id).first()
            if closer and closer.commission_rate is not None:
                commission_amount = (amount * Decimal(str(closer.commission_rate))).quantize(CENTS)

        link = _blank_to_none(recording_link)

        appointment.outcome = outcome
        appointment.notes = _blank_to_none(notes)
        appointment.sale_value = amount
        appointment.commission_amount = commission_amount
        appointment.status = "completed"
        appointment.updated_at = datetime.utcnow()
        set_recording_link(appointment, outcome, link)

        if appointment.closer_id:
            record_closer_action(self.db, appointment.closer_id, "appointment_outcome_updated", {
                "appointmentId": appointment.id,
                "customerName": appointment.customer_name,
                "affiliateCode": appointment.affiliate_code,
                "previousOutcome": previous_outcome,
                "outcome": outcome,
                "saleValue": float(amount) if amount is not None else None,
                "commissionAmount": float(commission_amount) if commission_amount is not None else None,
                "recordingLink": link,
                "notes": appointment.notes,
            }, context)

        try:
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update outcome for appointment {appointment_id}: {e}")
            raise

        self.db.refresh(appointment)
        logger.info(
            f"Appointment {appointment.id} outcome {previous_outcome} -> {outcome} "
            f"(sale={amount}, closer={appointment.closer_id})"
        )

        stats = None
        if appointment.closer_id:
            stats = CloserStatsService(self.db).stats_for(appointment.closer_id)
        return appointment, stats
