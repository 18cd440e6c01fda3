import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from closerdesk.core.exceptions import NotFoundError
from closerdesk.models.appointment import Appointment
from closerdesk.models.closer import Closer
from closerdesk.models.task import Task
from closerdesk.services.audit import record_closer_action
from closerdesk.services.closer_stats import CloserStats, CloserStatsService, stats_label

logger = logging.getLogger(__name__)


class CloserService:
    def __init__(self, db: Session):
        self.db = db
        self.stats = CloserStatsService(db)

    def get_closer(self, closer_id: str) -> Closer:
        closer = self.db.query(Closer).filter(Closer.id == closer_id).first()
        if not closer:
            raise NotFoundError("Closer not found")
        return closer

    # ---------------------------------------------------------
    # 1. LISTS (closer + derived stats)
    # ---------------------------------------------------------
    def list_closers(self):
        """[(closer, stats)] newest first."""
        closers = self.db.query(Closer).order_by(desc(Closer.created_at)).all()
        stats = self.stats.stats_by_closer()
        return [(c, stats.get(c.id, CloserStats())) for c in closers]

    def list_eligible(self):
        """[(closer, stats, label)] for the manual assignment dropdown."""
        return [
            (closer, stats, stats_label(closer.name, stats))
            for closer, stats in self.list_closers()
            if closer.is_eligible
        ]

    def closer_with_stats(self, closer_id: str):
        closer = self.get_closer(closer_id)
        return closer, self.stats.stats_for(closer.id)

    # ---------------------------------------------------------
    # 2. ADMIN ACTIONS
    # ---------------------------------------------------------
    def _commit(self, what: str):
        try:
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to {what}: {e}")
            raise

    def approve(self, closer_id: str, context: Optional[dict] = None) -> Closer:
        closer = self.get_closer(closer_id)
        closer.is_approved = True
        closer.is_active = True
        record_closer_action(self.db, closer.id, "approved", {
            "approvedBy": "admin",
            "approvedAt": datetime.utcnow().isoformat(),
        }, context)
        self._commit(f"approve closer {closer_id}")
        self.db.refresh(closer)
        logger.info(f"Closer approved: {closer.id} ({closer.email})")
        return closer

    def toggle_active(self, closer_id: str, context: Optional[dict] = None) -> Closer:
        closer = self.get_closer(closer_id)
        previous = bool(closer.is_active)
        closer.is_active = not previous
        action = "activated" if closer.is_active else "deactivated"
        record_closer_action(self.db, closer.id, action, {
            "changedBy": "admin",
            "changedAt": datetime.utcnow().isoformat(),
            "previousStatus": previous,
            "newStatus": closer.is_active,
        }, context)
        self._commit(f"toggle closer {closer_id}")
        self.db.refresh(closer)
        logger.info(f"Closer {action}: {closer.id} ({closer.email})")
        return closer

    def update_calendly_link(self, closer_id: str, link: Optional[str], context: Optional[dict] = None) -> Closer:
        closer = self.get_closer(closer_id)
        closer.calendly_link = (link or "").strip() or None
        record_closer_action(self.db, closer.id, "calendly_link_updated", {
            "calendlyLink": closer.calendly_link,
        }, context)
        self._commit(f"update calendly link for closer {closer_id}")
        self.db.refresh(closer)
        logger.info(f"Calendly link updated for closer {closer.id}")
        return closer

    def delete_closer(self, closer_id: str, context: Optional[dict] = None) -> int:
        """
        Deletes a closer after unassigning its appointments and tasks.
        Appointments are kept. Returns how many were unassigned.
        """
        closer = self.get_closer(closer_id)

        appointment_count = self.db.query(Appointment).filter(Appointment.closer_id == closer.id).count()
        record_closer_action(self.db, closer.id, "deleted", {
            "deletedBy": "admin",
            "deletedAt": datetime.utcnow().isoformat(),
            "closerName": closer.name,
            "closerEmail": closer.email,
            "appointmentCount": appointment_count,
        }, context)

        self.db.query(Appointment).filter(Appointment.closer_id == closer.id).update(
            {Appointment.closer_id: None}, synchronize_session=False
        )
        self.db.query(Task).filter(Task.closer_id == closer.id).update(
            {Task.closer_id: None}, synchronize_session=False
        )
        self.db.delete(closer)
        self._commit(f"delete closer {closer_id}")

        logger.info(f"Closer deleted: {closer_id}, {appointment_count} appointments unassigned")
        return appointment_count
