from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from closerdesk.api.deps import audit_context, require_admin
from closerdesk.core.database import get_db
from closerdesk.schemas.closer import (
    CalendlyLinkUpdate,
    CloserAction,
    CloserListResponse,
    CloserResponse,
    EligibleCloserListResponse,
    EligibleCloserResponse,
)
from closerdesk.services.closer_service import CloserService

router = APIRouter(prefix="/api/admin/closers", tags=["Admin Closers"], dependencies=[Depends(require_admin)])


def _closer_action(service: CloserService, closer):
    _, stats = service.closer_with_stats(closer.id)
    return {"success": True, "closer": CloserResponse.from_closer(closer, stats)}


@router.get("", response_model=CloserListResponse)
def list_closers(db: Session = Depends(get_db)):
    """All closers with stats derived from their appointments."""
    rows = CloserService(db).list_closers()
    return {"closers": [CloserResponse.from_closer(c, s) for c, s in rows]}


@router.get("/eligible", response_model=EligibleCloserListResponse)
def list_eligible_closers(db: Session = Depends(get_db)):
    """Active + approved closers, labelled for the assignment dropdown."""
    rows = CloserService(db).list_eligible()
    return {
        "closers": [
            EligibleCloserResponse(**CloserResponse.from_closer(c, s).model_dump(), label=label)
            for c, s, label in rows
        ]
    }


@router.put("/{closer_id}/approve", response_model=CloserAction)
def approve_closer(closer_id: str, request: Request, db: Session = Depends(get_db)):
    service = CloserService(db)
    return _closer_action(service, service.approve(closer_id, audit_context(request)))


@router.put("/{closer_id}/deactivate", response_model=CloserAction)
def toggle_closer_active(closer_id: str, request: Request, db: Session = Depends(get_db)):
    service = CloserService(db)
    return _closer_action(service, service.toggle_active(closer_id, audit_context(request)))


@router.put("/{closer_id}/calendly-link", response_model=CloserAction)
def update_calendly_link(
    closer_id: str,
    payload: CalendlyLinkUpdate,
    request: Request,
    db: Session = Depends(get_db),
):
    service = CloserService(db)
    closer = service.update_calendly_link(closer_id, payload.calendly_link, audit_context(request))
    return _closer_action(service, closer)


@router.delete("/{closer_id}")
def delete_closer(closer_id: str, request: Request, db: Session = Depends(get_db)):
    unassigned = CloserService(db).delete_closer(closer_id, audit_context(request))
    return {
        "success": True,
        "message": "Closer deleted successfully",
        "unassignedAppointments": unassigned,
    }
