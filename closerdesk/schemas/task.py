from datetime import datetime
from typing import List, Optional

from closerdesk.schemas.base import CamelModel
from closerdesk.schemas.appointment import CloserSummary


class TaskAppointmentSummary(CamelModel):
    id: str
    customer_name: str
    customer_email: str


class TaskCreate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[datetime] = None
    lead_email: Optional[str] = None
    # Admin only; closers always create tasks for themselves
    closer_id: Optional[str] = None


class TaskUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    due_date: Optional[datetime] = None


class TaskResponse(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    priority: str
    status: str
    lead_email: Optional[str] = None
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    closer_id: Optional[str] = None
    appointment_id: Optional[str] = None
    closer: Optional[CloserSummary] = None
    appointment: Optional[TaskAppointmentSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TaskListResponse(CamelModel):
    tasks: List[TaskResponse]


class TaskAction(CamelModel):
    success: bool = True
    task: TaskResponse
