from __future__ import annotations

from typing import Iterable

from ..models import Project
from ..schemas.project import ProjectRead, ProjectView
from ..schemas.session import SessionRead
from . import timecalc
from .access import Principal, policy_for


def build_project_view(
    project: Project,
    sessions: Iterable,
    now: int,
    principal: Principal,
    tz: str | None = None,
) -> ProjectView:
    """Assemble the read model for one project as seen by ``principal`` at ``now``."""
    policy = policy_for(principal)
    sessions = list(sessions)
    current = timecalc.current_session_seconds(project, now)
    total = timecalc.total_display_seconds(project, now)
    weekly = timecalc.weekly_elapsed_seconds(sessions, current, now, tz)
    progress = timecalc.weekly_progress_percent(weekly, project.committed_weekly_hours)

    base = ProjectRead.model_validate(project)
    return ProjectView(
        **base.model_dump(),
        owner_email=project.owner.email if project.owner is not None else None,
        sessions=[SessionRead.model_validate(session) for session in sessions],
        current_session_seconds=current,
        total_display_seconds=total,
        elapsed_display=timecalc.format_elapsed(total),
        earnings=timecalc.earnings(total, project.hourly_rate),
        weekly_elapsed_seconds=weekly,
        weekly_progress_percent=round(progress, 2),
        can_control_timer=policy.can_control_timer(project),
        can_manage=policy.can_manage(project),
    )


def build_project_views(
    projects: Iterable[Project],
    now: int,
    principal: Principal,
    tz: str | None = None,
) -> list[ProjectView]:
    return [build_project_view(project, project.sessions, now, principal, tz) for project in projects]
