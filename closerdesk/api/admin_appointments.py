from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from closerdesk.api.deps import audit_context, require_admin
from closerdesk.core.database import get_db
from closerdesk.schemas.appointment import (
    AppointmentAction,
    AppointmentCreate,
    AppointmentListResponse,
    AssignRequest,
    AutoAssignResponse,
    DeleteResponse,
    OutcomeResponse,
    OutcomeUpdate,
)
from closerdesk.services.appointment_service import AppointmentService
from closerdesk.services.assignment_service import AssignmentService
from closerdesk.services.outcome_service import OutcomeService

router = APIRouter(prefix="/api/admin", tags=["Admin Appointments"], dependencies=[Depends(require_admin)])


# =========================================================
# 1. LIST & CREATE
# =========================================================

@router.get("/appointments", response_model=AppointmentListResponse)
def list_appointments(db: Session = Depends(get_db)):
    return {"appointments": AppointmentService(db).list_appointments()}


@router.post("/appointments", response_model=AppointmentAction)
def create_appointment(payload: AppointmentCreate, db: Session = Depends(get_db)):
    appointment = AppointmentService(db).create_appointment(payload)
    return {"success": True, "appointment": appointment}


# =========================================================
# 2. ASSIGNMENT
# =========================================================

@router.put("/appointments/{appointment_id}/assign", response_model=AppointmentAction)
def assign_appointment(
    appointment_id: str,
    payload: AssignRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    if not payload.closer_id:
        raise HTTPException(status_code=400, detail="Closer ID is required")
    appointment = AssignmentService(db).assign(appointment_id, payload.closer_id, audit_context(request))
    return {"success": True, "appointment": appointment}


@router.post("/auto-assign-appointments", response_model=AutoAssignResponse)
def auto_assign_appointments(request: Request, db: Session = Depends(get_db)):
    return AssignmentService(db).auto_assign_all(audit_context(request))


# =========================================================
# 3. OUTCOME (admin variant, no ownership check)
# =========================================================

@router.put("/appointments/{appointment_id}/outcome", response_model=OutcomeResponse)
def update_outcome(
    appointment_id: str,
    payload: OutcomeUpdate,
    request: Request,
    db: Session = Depends(get_db),
):
    appointment, stats = OutcomeService(db).update_outcome(
        appointment_id,
        outcome=payload.outcome,
        notes=payload.notes,
        sale_value=payload.sale_value,
        recording_link=payload.recording_link,
        context=audit_context(request),
    )
    return {"success": True, "appointment": appointment, "closer_stats": stats}


# =========================================================
# 4. DELETE (idempotent)
# =========================================================

@router.delete("/appointments/{appointment_id}", response_model=DeleteResponse)
def delete_appointment(appointment_id: str, db: Session = Depends(get_db)):
    deleted = AppointmentService(db).delete_appointment(appointment_id)
    return {"success": True, "deleted": deleted}
