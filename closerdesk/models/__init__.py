from .appointment import Appointment
from .closer import Closer
from .task import Task
from .closer_audit_log import CloserAuditLog

__all__ = [
    "Appointment",
    "Closer",
    "Task",
    "CloserAuditLog",
]
