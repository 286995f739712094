from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..config import get_settings
from ..db import get_db
from ..services import projects as project_service
from ..services.access import Principal
from ..services.reporting import build_dashboard
from ..services.timecalc import now_ms
from .auth import get_current_principal

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])
settings = get_settings()


@router.get("")
async def dashboard(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    projects = project_service.list_projects(db, principal)
    summary = build_dashboard(projects, now_ms(), settings.default_timezone)
    return JSONResponse(summary.model_dump())
