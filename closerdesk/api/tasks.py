from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from closerdesk.api.deps import current_closer_id, require_admin
from closerdesk.core.database import get_db
from closerdesk.schemas.task import TaskAction, TaskCreate, TaskListResponse, TaskUpdate
from closerdesk.services.task_service import TaskService

router = APIRouter(tags=["Tasks"])


# =========================================================
# ADMIN
# =========================================================

@router.get("/api/admin/tasks", response_model=TaskListResponse, dependencies=[Depends(require_admin)])
def admin_list_tasks(
    closerId: Optional[str] = Query(None),
    leadEmail: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    closer_filter = closerId if closerId and closerId != "all" else None
    return {"tasks": TaskService(db).list_tasks(closer_id=closer_filter, lead_email=leadEmail)}


@router.post("/api/admin/tasks", response_model=TaskAction, dependencies=[Depends(require_admin)])
def admin_create_task(payload: TaskCreate, db: Session = Depends(get_db)):
    return {"success": True, "task": TaskService(db).create_for_admin(payload)}


# =========================================================
# CLOSER
# =========================================================

@router.get("/api/closer/tasks", response_model=TaskListResponse)
def closer_list_tasks(
    leadEmail: Optional[str] = Query(None),
    closer_id: str = Depends(current_closer_id),
    db: Session = Depends(get_db),
):
    return {"tasks": TaskService(db).list_for_closer(closer_id, lead_email=leadEmail)}


@router.post("/api/closer/tasks", response_model=TaskAction)
def closer_create_task(
    payload: TaskCreate,
    closer_id: str = Depends(current_closer_id),
    db: Session = Depends(get_db),
):
    return {"success": True, "task": TaskService(db).create_for_closer(closer_id, payload)}


@router.put("/api/closer/tasks/{task_id}", response_model=TaskAction)
def closer_update_task(
    task_id: str,
    payload: TaskUpdate,
    closer_id: str = Depends(current_closer_id),
    db: Session = Depends(get_db),
):
    return {"success": True, "task": TaskService(db).update_for_closer(closer_id, task_id, payload)}


@router.delete("/api/closer/tasks/{task_id}")
def closer_delete_task(
    task_id: str,
    closer_id: str = Depends(current_closer_id),
    db: Session = Depends(get_db),
):
    TaskService(db).delete_for_closer(closer_id, task_id)
    return {"success": True}
