import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import asc, desc
from sqlalchemy.orm import Session, joinedload

from closerdesk.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from closerdesk.models.appointment import Appointment
from closerdesk.models.closer import Closer
from closerdesk.models.task import Task, TASK_PRIORITIES, TASK_STATUSES
from closerdesk.schemas.task import TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)


def _normalise_email(email: Optional[str]) -> Optional[str]:
    """Lead emails are stored lower-cased, see AppointmentService.create_appointment."""
    if not email:
        return None
    return email.strip().lower() or None


class TaskService:
    def __init__(self, db: Session):
        self.db = db

    # --- HELPERS ---
    def _closer_has_lead(self, closer_id: str, lead_email: str) -> bool:
        return self.db.query(Appointment.id).filter(
            Appointment.customer_email == lead_email,
            Appointment.closer_id == closer_id,
        ).first() is not None

    def _first_appointment_for(self, lead_email: Optional[str]):
        if not lead_email:
            return None
        return self.db.query(Appointment).filter(
            Appointment.customer_email == lead_email
        ).order_by(asc(Appointment.created_at)).first()

    def _validate_fields(self, title, priority, status=None):
        if title is not None and not title.strip():
            raise ValidationError("Task title is required")
        if priority is not None and priority not in TASK_PRIORITIES:
            raise ValidationError(f"Unknown priority '{priority}'")
        if status is not None and status not in TASK_STATUSES:
            raise ValidationError(f"Unknown status '{status}'")

    # --- READ ---
    def list_tasks(self, closer_id: Optional[str] = None, lead_email: Optional[str] = None):
        lead_email = _normalise_email(lead_email)
        query = self.db.query(Task).options(joinedload(Task.closer), joinedload(Task.appointment))
        if closer_id:
            query = query.filter(Task.closer_id == closer_id)
        if lead_email:
            query = query.filter(Task.lead_email == lead_email)
        return query.order_by(asc(Task.status), asc(Task.due_date), desc(Task.created_at)).all()

    def list_for_closer(self, closer_id: str, lead_email: Optional[str] = None):
        """A closer sees their own tasks, or every task on a lead they work."""
        lead_email = _normalise_email(lead_email)
        if lead_email:
            if not self._closer_has_lead(closer_id, lead_email):
                raise ForbiddenError("You are not assigned to this lead.")
            return self.list_tasks(lead_email=lead_email)
        return self.list_tasks(closer_id=closer_id)

    # --- CREATE ---
    def _create(self, data: TaskCreate, closer_id: str) -> Task:
        lead_email = _normalise_email(data.lead_email)
        appointment = self._first_appointment_for(lead_email)
        task = Task(
            closer_id=closer_id,
            appointment_id=appointment.id if appointment else None,
            lead_email=lead_email,
            title=data.title.strip(),
            description=data.description or None,
            priority=data.priority or "medium",
            status="pending",
            due_date=data.due_date,
        )
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)
        logger.info(f"Task {task.id} created for closer {closer_id}")
        return task

    def create_for_admin(self, data: TaskCreate) -> Task:
        if not data.title or not data.title.strip():
            raise ValidationError("Task title is required")
        if not data.priority:
            raise ValidationError("Priority is required")
        self._validate_fields(data.title, data.priority)

        lead_email = _normalise_email(data.lead_email)
        closer_id = data.closer_id
        if not closer_id and lead_email:
            appointment = self.db.query(Appointment).filter(
                Appointment.customer_email == lead_email,
                Appointment.closer_id.isnot(None),
            ).first()
            if appointment:
                closer_id = appointment.closer_id
        if not closer_id:
            raise ValidationError("Closer assignment is required. This lead may not have an assigned closer.")

        closer = self.db.query(Closer).filter(Closer.id == closer_id).first()
        if not closer or not closer.is_eligible:
            raise ValidationError("Invalid or inactive closer")

        return self._create(data, closer.id)

    def create_for_closer(self, closer_id: str, data: TaskCreate) -> Task:
        if not data.title or not data.title.strip():
            raise ValidationError("Task title is required")
        if not data.priority:
            raise ValidationError("Priority is required")
        if not data.due_date:
            raise ValidationError("Due date is required")
        self._validate_fields(data.title, data.priority)

        lead_email = _normalise_email(data.lead_email)
        if lead_email and not self._closer_has_lead(closer_id, lead_email):
            raise ForbiddenError("You are not assigned to this lead.")

        return self._create(data, closer_id)

    # --- UPDATE / DELETE ---
    def _owned_task(self, closer_id: str, task_id: str) -> Task:
        task = self.db.query(Task).filter(Task.id == task_id).first()
        if not task or task.closer_id != closer_id:
            raise NotFoundError("Task not found")
        return task

    def update_for_closer(self, closer_id: str, task_id: str, data: TaskUpdate) -> Task:
        task = self._owned_task(closer_id, task_id)
        changes = data.model_dump(exclude_unset=True)
        if "title" in changes and not (changes["title"] or "").strip():
            raise ValidationError("Task title is required")
        for key in ("priority", "status"):
            if key in changes and changes[key] is None:
                raise ValidationError(f"Task {key} cannot be empty")
        self._validate_fields(changes.get("title"), changes.get("priority"), changes.get("status"))

        if "status" in changes:
            if changes["status"] == "completed":
                if not task.completed_at:
                    task.completed_at = datetime.utcnow()
            else:
                task.completed_at = None

        for key, value in changes.items():
            setattr(task, key, value)

        self.db.commit()
        self.db.refresh(task)
        return task

    def delete_for_closer(self, closer_id: str, task_id: str) -> None:
        task = self._owned_task(closer_id, task_id)
        self.db.delete(task)
        self.db.commit()
        logger.info(f"Task {task_id} deleted by closer {closer_id}")
