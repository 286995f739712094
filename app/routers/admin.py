from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..config import get_settings
from ..db import get_db
from ..services import projects as project_service
from ..services import users as user_service
from ..services.access import Principal, policy_for
from ..services.reporting import get_admin_stats
from ..services.timecalc import now_ms
from ..services.views import build_project_views
from .auth import get_current_principal

router = APIRouter(prefix="/admin", tags=["admin"])
settings = get_settings()


def _require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    policy_for(principal).ensure_user_management()
    return principal


@router.get("/users")
async def list_users(
    principal: Principal = Depends(_require_admin),
    db: Session = Depends(get_db),
):
    users = user_service.list_users(db, principal)
    return JSONResponse([user.model_dump(mode="json") for user in users])


@router.get("/users/{user_id}/projects")
async def user_projects(
    user_id: int,
    principal: Principal = Depends(_require_admin),
    db: Session = Depends(get_db),
):
    user = user_service.get_user(db, user_id)
    projects = project_service.list_projects(db, principal, owner_id=user.id)
    views = build_project_views(projects, now_ms(), principal, settings.default_timezone)
    return JSONResponse(
        {
            "user": {"id": user.id, "email": user.email, "role": user.role},
            "projects": [view.model_dump(mode="json") for view in views],
        }
    )


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: int,
    principal: Principal = Depends(_require_admin),
    db: Session = Depends(get_db),
):
    result = user_service.delete_user(db, user_id, principal)
    return JSONResponse({"status": "deleted", **result})


@router.get("/stats")
async def stats(
    principal: Principal = Depends(_require_admin),
    db: Session = Depends(get_db),
):
    return JSONResponse(get_admin_stats(db).model_dump())
