import logging
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import case, update
from sqlalchemy.orm import Session

from closerdesk.core.exceptions import NotFoundError, ValidationError
from closerdesk.models.appointment import Appointment, TYPE_QUIZ_SESSION
from closerdesk.models.closer import Closer
from closerdesk.services.audit import record_closer_action
from closerdesk.services.closer_stats import CloserStats, CloserStatsService

logger = logging.getLogger(__name__)


# ---------------------------------------------------------
# PURE ROUND-ROBIN
# ---------------------------------------------------------
def eligible_closers(closers: Sequence) -> list:
    return [c for c in closers if c.is_active and c.is_approved]


def assignable_appointments(appointments: Sequence) -> list:
    return [a for a in appointments if a.closer_id is None and a.type != TYPE_QUIZ_SESSION]


def round_robin(appointments: Sequence, closers: Sequence) -> List[Tuple[object, object]]:
    """
    Pairs the i-th assignable appointment with closer ``i mod N``.

    Both inputs keep their given order; ineligible closers, already-assigned
    appointments and quiz sessions are dropped first. No closers -> no pairs.
    """
    pool = eligible_closers(closers)
    if not pool:
        return []
    targets = assignable_appointments(appointments)
    return [(apt, pool[i % len(pool)]) for i, apt in enumerate(targets)]


def _confirm_if_scheduled():
    return case((Appointment.status == "scheduled", "confirmed"), else_=Appointment.status)


class AssignmentService:
    def __init__(self, db: Session):
        self.db = db

    # ---------------------------------------------------------
    # 1. AUTO-ASSIGN ALL
    # ---------------------------------------------------------
    def _closer_pool(self):
        """Eligible closers, least loaded first."""
        closers = self.db.query(Closer).filter(
            Closer.is_active.is_(True),
            Closer.is_approved.is_(True),
        ).all()
        stats = CloserStatsService(self.db).stats_by_closer()
        closers.sort(key=lambda c: (
            stats.get(c.id, CloserStats()).total_calls,
            c.created_at or datetime.min,
            c.id,
        ))
        return closers

    def auto_assign_all(self, context: Optional[dict] = None) -> dict:
        closers = self._closer_pool()
        if not closers:
            logger.warning("Auto-assign: no active and approved closers, nothing assigned")
            return {"assigned_count": 0, "assignments": []}

        appointments = self.db.query(Appointment).filter(
            Appointment.closer_id.is_(None),
            Appointment.type != TYPE_QUIZ_SESSION,
        ).order_by(Appointment.scheduled_at.asc(), Appointment.created_at.asc()).all()

        pairs = round_robin(appointments, closers)
        logger.info(f"Auto-assign: {len(pairs)} unassigned appointments across {len(closers)} closers")

        assignments = []
        try:
            for apt, closer in pairs:
                # Conditional write: a concurrent manual assignment wins
                result = self.db.execute(
                    update(Appointment)
                    .where(Appointment.id == apt.id, Appointment.closer_id.is_(None))
                    .values(
                        closer_id=closer.id,
                        status=_confirm_if_scheduled(),
                        updated_at=datetime.utcnow(),
                    )
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    logger.warning(f"Auto-assign: appointment {apt.id} was assigned concurrently, skipping")
                    continue

                record_closer_action(self.db, closer.id, "appointment_assigned", {
                    "appointmentId": apt.id,
                    "customerName": apt.customer_name,
                    "scheduledAt": apt.scheduled_at.isoformat() if apt.scheduled_at else None,
                    "assignedBy": "auto",
                    "assignedAt": datetime.utcnow().isoformat(),
                }, context)

                assignments.append({
                    "appointment_id": apt.id,
                    "customer_name": apt.customer_name,
                    "closer_id": closer.id,
                    "closer_name": closer.name,
                })

            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Auto-assign failed, batch rolled back: {e}")
            raise

        logger.info(f"Auto-assign: assigned {len(assignments)} appointments")
        return {"assigned_count": len(assignments), "assignments": assignments}

    # ---------------------------------------------------------
    # 2. MANUAL ASSIGN
    # ---------------------------------------------------------
    def assign(self, appointment_id: str, closer_id: Optional[str], context: Optional[dict] = None):
        """Returns the updated appointment, or None when no closer was chosen."""
        if not closer_id:
            return None

        appointment = (
            self.db.query(Appointment)
            .filter(Appointment.id == appointment_id)
            .with_for_update()
            .first()
        )
        if not appointment:
            raise NotFoundError("Appointment not found")

        closer = self.db.query(Closer).filter(Closer.id == closer_id).first()
        if not closer:
            raise NotFoundError("Closer not found")
        if not closer.is_eligible:
            raise ValidationError("Closer is not active or approved")

        previous_closer_id = appointment.closer_id
        appointment.closer_id = closer.id
        if appointment.status == "scheduled":
            appointment.status = "confirmed"

        record_closer_action(self.db, closer.id, "appointment_assigned", {
            "appointmentId": appointment.id,
            "customerName": appointment.customer_name,
            "scheduledAt": appointment.scheduled_at.isoformat() if appointment.scheduled_at else None,
            "previousCloserId": previous_closer_id,
            "assignedBy": "admin",
            "assignedAt": datetime.utcnow().isoformat(),
        }, context)

        try:
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to assign appointment {appointment_id}: {e}")
            raise

        self.db.refresh(appointment)
        logger.info(f"Appointment {appointment.id} assigned to closer {closer.id} ({closer.name})")
        return appointment
