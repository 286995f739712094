from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..db import get_db
from ..schemas.session import SessionEdit, SessionRead
from ..services import timer as timer_service
from ..services.access import Principal
from .auth import get_current_principal

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


@router.patch("/{session_id}")
async def edit_session(
    session_id: int,
    payload: SessionEdit,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    session = timer_service.edit_session(db, session_id, payload.start_time, payload.end_time, principal)
    project = session.project
    return JSONResponse(
        {
            "status": "updated",
            "session": SessionRead.model_validate(session).model_dump(),
            "project_total_time": project.total_time,
        }
    )


@router.delete("/{session_id}")
async def delete_session(
    session_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    project = timer_service.delete_session(db, session_id, principal)
    return JSONResponse(
        {
            "status": "deleted",
            "session_id": session_id,
            "project_total_time": project.total_time,
            "project_is_running": project.is_running,
        }
    )
