from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..config import get_settings
from ..db import get_db
from ..schemas.project import ProjectCreate, ProjectUpdate
from ..services import projects as project_service
from ..services import timer as timer_service
from ..services.access import Principal, policy_for
from ..services.timecalc import now_ms
from ..services.views import build_project_view, build_project_views
from .auth import get_current_principal

router = APIRouter(prefix="/api/projects", tags=["projects"])
settings = get_settings()


def _view_response(db: Session, project_id: int, principal: Principal, now: int, status_code: int = 200) -> JSONResponse:
    project = timer_service.get_project(db, project_id)
    policy_for(principal).ensure_view(project)
    view = build_project_view(project, project.sessions, now, principal, settings.default_timezone)
    return JSONResponse(view.model_dump(mode="json"), status_code=status_code)


@router.get("")
async def list_projects(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    projects = project_service.list_projects(db, principal)
    views = build_project_views(projects, now_ms(), principal, settings.default_timezone)
    return JSONResponse([view.model_dump(mode="json") for view in views])


@router.post("")
async def create_project(
    payload: ProjectCreate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    project = project_service.create_project(db, principal, payload)
    return _view_response(db, project.id, principal, now_ms(), status.HTTP_201_CREATED)


@router.get("/{project_id}")
async def get_project(
    project_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return _view_response(db, project_id, principal, now_ms())


@router.patch("/{project_id}")
async def update_project(
    project_id: int,
    payload: ProjectUpdate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    project_service.update_project(db, project_id, principal, payload)
    return _view_response(db, project_id, principal, now_ms())


@router.delete("/{project_id}")
async def delete_project(
    project_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    timer_service.delete_project(db, project_id, principal)
    return JSONResponse({"status": "deleted", "project_id": project_id})


@router.post("/{project_id}/start")
async def start_timer(
    project_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    now = now_ms()
    timer_service.start_timer(db, project_id, principal, now)
    return _view_response(db, project_id, principal, now)


@router.post("/{project_id}/stop")
async def stop_timer(
    project_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    now = now_ms()
    timer_service.stop_timer(db, project_id, principal, now)
    return _view_response(db, project_id, principal, now)


@router.post("/{project_id}/reset-week")
async def reset_week(
    project_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    now = now_ms()
    timer_service.reset_week(db, project_id, principal, now, settings.default_timezone)
    return _view_response(db, project_id, principal, now)


@router.post("/{project_id}/reconcile")
async def reconcile_project(
    project_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    timer_service.reconcile_project(db, project_id, principal)
    return _view_response(db, project_id, principal, now_ms())
