from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from closerdesk.api.deps import audit_context, current_closer_id
from closerdesk.core.database import get_db
from closerdesk.schemas.appointment import AppointmentListResponse, OutcomeResponse, OutcomeUpdate
from closerdesk.schemas.closer import CloserAction, CloserResponse
from closerdesk.services.appointment_service import AppointmentService
from closerdesk.services.closer_service import CloserService
from closerdesk.services.outcome_service import OutcomeService

router = APIRouter(prefix="/api/closer", tags=["Closer Portal"])


@router.get("/appointments", response_model=AppointmentListResponse)
def my_appointments(closer_id: str = Depends(current_closer_id), db: Session = Depends(get_db)):
    return {"appointments": AppointmentService(db).list_appointments(closer_id=closer_id)}


@router.get("/stats", response_model=CloserAction)
def my_stats(closer_id: str = Depends(current_closer_id), db: Session = Depends(get_db)):
    closer, stats = CloserService(db).closer_with_stats(closer_id)
    return {"success": True, "closer": CloserResponse.from_closer(closer, stats)}


@router.put("/appointments/{appointment_id}/outcome", response_model=OutcomeResponse)
def update_outcome(
    appointment_id: str,
    payload: OutcomeUpdate,
    request: Request,
    closer_id: str = Depends(current_closer_id),
    db: Session = Depends(get_db),
):
    appointment, stats = OutcomeService(db).update_outcome(
        appointment_id,
        outcome=payload.outcome,
        notes=payload.notes,
        sale_value=payload.sale_value,
        recording_link=payload.recording_link,
        closer_id=closer_id,
        context=audit_context(request),
    )
    return {"success": True, "appointment": appointment, "closer_stats": stats}
