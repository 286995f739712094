import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from .config import get_settings
from .errors import TimeTrackerError
from .migration_runner import run_migrations_once
from .routers import (
    admin,
    auth,
    dashboard,
    projects,
    sessions,
)

settings = get_settings()
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)
app.add_middleware(SessionMiddleware, secret_key=settings.secret_key, session_cookie=settings.session_cookie)


@app.exception_handler(TimeTrackerError)
async def tracker_error_handler(request: Request, exc: TimeTrackerError):
    if exc.status_code >= 409:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse({"detail": exc.detail, "error": type(exc).__name__}, status_code=exc.status_code)


@app.get("/")
async def root():
    return {"app": settings.app_name, "docs": "/docs"}


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.on_event("startup")
async def ensure_schema() -> None:
    if settings.environment == "test":
        return
    try:
        run_migrations_once()
    except Exception:  # pragma: no cover - startup failures should surface
        logger.exception("Database migration failed")
        raise


app.include_router(auth.router)
app.include_router(projects.router)
app.include_router(sessions.router)
app.include_router(dashboard.router)
app.include_router(admin.router)
