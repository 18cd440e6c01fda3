from datetime import datetime
from typing import Any, List, Optional

from pydantic import EmailStr, computed_field

from closerdesk.schemas.base import CamelModel
from closerdesk.schemas.closer import CloserStatsResponse
from closerdesk.services.recording_links import get_recording_link


class CloserSummary(CamelModel):
    id: str
    name: str
    email: str


# --- REQUESTS ---
class AppointmentCreate(CamelModel):
    customer_name: str
    customer_email: EmailStr
    customer_phone: Optional[str] = None
    scheduled_at: datetime
    duration: Optional[int] = None
    affiliate_code: Optional[str] = None
    type: str = "appointment"
    quiz_session_id: Optional[str] = None
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None


class AssignRequest(CamelModel):
    closer_id: Optional[str] = None


class OutcomeUpdate(CamelModel):
    # Everything optional here so the service can answer 400 instead of 422.
    # sale_value stays raw: pydantic would coerce booleans to floats.
    outcome: Optional[str] = None
    notes: Optional[str] = None
    sale_value: Any = None
    recording_link: Optional[str] = None


# --- RESPONSES ---
class AppointmentResponse(CamelModel):
    id: str
    type: str
    quiz_session_id: Optional[str] = None

    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None

    scheduled_at: datetime
    duration: Optional[int] = None
    status: str

    outcome: Optional[str] = None
    notes: Optional[str] = None
    sale_value: Optional[float] = None
    commission_amount: Optional[float] = None
    affiliate_code: Optional[str] = None
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None

    closer_id: Optional[str] = None
    closer: Optional[CloserSummary] = None

    recording_link_converted: Optional[str] = None
    recording_link_not_interested: Optional[str] = None
    recording_link_needs_follow_up: Optional[str] = None
    recording_link_wrong_number: Optional[str] = None
    recording_link_no_answer: Optional[str] = None
    recording_link_callback_requested: Optional[str] = None
    recording_link_rescheduled: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field(alias="recordingLink")
    @property
    def recording_link(self) -> Optional[str]:
        return get_recording_link(self)


class AppointmentListResponse(CamelModel):
    appointments: List[AppointmentResponse]


class AppointmentAction(CamelModel):
    success: bool = True
    appointment: AppointmentResponse


class AssignmentItem(CamelModel):
    appointment_id: str
    customer_name: str
    closer_id: str
    closer_name: str


class AutoAssignResponse(CamelModel):
    success: bool = True
    assigned_count: int
    assignments: List[AssignmentItem] = []


class DeleteResponse(CamelModel):
    success: bool = True
    deleted: bool


class OutcomeResponse(CamelModel):
    success: bool = True
    appointment: AppointmentResponse
    closer_stats: Optional[CloserStatsResponse] = None
