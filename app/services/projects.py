from __future__ import annotations

import logging
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from sqlalchemy.orm import Session, selectinload

from ..config import get_settings
from ..constants import SUPPORTED_CURRENCIES
from ..db import atomic
from ..errors import ValidationError
from ..models import Project
from ..schemas.project import ProjectCreate, ProjectUpdate
from .access import Principal, policy_for
from .timer import get_project

logger = logging.getLogger(__name__)
settings = get_settings()

_SCRIPT_BLOCK = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_TAG = re.compile(r"<[^>]*>")
_CENT = Decimal("0.01")


def sanitize_name(value: str | None) -> str:
    """Strip markup from a project name and enforce its length bounds."""
    raw = (value or "").strip()
    cleaned = _TAG.sub("", _SCRIPT_BLOCK.sub("", raw)).strip()
    if not cleaned:
        raise ValidationError("Project name is required")
    if len(cleaned) > settings.max_project_name_length:
        raise ValidationError(f"Project name is too long (max {settings.max_project_name_length} characters)")
    if len(cleaned) < settings.min_project_name_length:
        raise ValidationError(f"Project name must be at least {settings.min_project_name_length} characters")
    return cleaned


def _positive_decimal(value, field: str, upper: float, message: str) -> Decimal:
    try:
        number = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValidationError(f"{field} must be a number") from exc
    if not number.is_finite():
        raise ValidationError(f"{field} must be a number")
    # stored with two decimal places
    number = number.quantize(_CENT, rounding=ROUND_HALF_UP)
    if number <= 0:
        raise ValidationError(f"{field} must be greater than 0")
    if number > Decimal(str(upper)):
        raise ValidationError(message)
    return number


def validate_hourly_rate(value) -> Decimal:
    return _positive_decimal(
        value,
        "Hourly rate",
        settings.max_hourly_rate,
        f"Hourly rate cannot exceed {settings.max_hourly_rate:,.0f}",
    )


def validate_weekly_hours(value) -> Decimal:
    return _positive_decimal(
        value,
        "Weekly hours",
        settings.max_weekly_hours,
        f"Weekly hours cannot exceed {settings.max_weekly_hours:g} (hours in a week)",
    )


def validate_currency(value: str | None) -> str:
    code = (value or settings.default_currency).strip().upper()
    if code not in SUPPORTED_CURRENCIES:
        raise ValidationError(f"Unsupported currency: {code}")
    return code


def create_project(db: Session, principal: Principal, payload: ProjectCreate) -> Project:
    project = Project(
        owner_id=principal.id,
        name=sanitize_name(payload.name),
        hourly_rate=validate_hourly_rate(payload.hourly_rate),
        rate_currency=validate_currency(payload.rate_currency),
        committed_weekly_hours=validate_weekly_hours(payload.committed_weekly_hours),
        total_time=0,
        is_running=False,
        start_time=None,
    )
    with atomic(db, "create the project"):
        db.add(project)
    logger.info("Created project %s for user %s", project.id, principal.id)
    return project


def update_project(db: Session, project_id: int, principal: Principal, payload: ProjectUpdate) -> Project:
    project = get_project(db, project_id)
    policy_for(principal).ensure_manage(project)

    changes: dict = {}
    if payload.name is not None:
        changes["name"] = sanitize_name(payload.name)
    if payload.hourly_rate is not None:
        changes["hourly_rate"] = validate_hourly_rate(payload.hourly_rate)
    if payload.rate_currency is not None:
        changes["rate_currency"] = validate_currency(payload.rate_currency)
    if payload.committed_weekly_hours is not None:
        changes["committed_weekly_hours"] = validate_weekly_hours(payload.committed_weekly_hours)
    if not changes:
        return project

    with atomic(db, "update the project"):
        for field, value in changes.items():
            setattr(project, field, value)
    logger.info("Updated project %s fields %s", project.id, sorted(changes))
    return project


def list_projects(db: Session, principal: Principal, owner_id: int | None = None) -> list[Project]:
    query = db.query(Project).options(selectinload(Project.sessions), selectinload(Project.owner))
    if not principal.is_privileged:
        query = query.filter(Project.owner_id == principal.id)
    elif owner_id is not None:
        query = query.filter(Project.owner_id == owner_id)
    return query.order_by(Project.created_at.desc(), Project.id.desc()).all()
