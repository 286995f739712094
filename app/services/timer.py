"""Timer state machine for projects and their session history.

A project's ``total_time`` is the sum of durations of its closed sessions and
``is_running`` is true iff it has exactly one open session. Every operation
below writes the project row and the session rows inside a single transaction
so those two views never drift apart, and at most one project per owner is
ever running.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from ..constants import MS_PER_SECOND
from ..db import atomic
from ..errors import InvalidRange, NotFound, ValidationError
from ..models import Project, TimeSession, User
from .access import Principal, policy_for
from .timecalc import elapsed_since_start, week_start

logger = logging.getLogger(__name__)


def get_project(db: Session, project_id: int) -> Project:
    project = db.query(Project).filter(Project.id == project_id).one_or_none()
    if not project:
        raise NotFound("Project not found")
    return project


def get_session(db: Session, session_id: int) -> TimeSession:
    session = db.query(TimeSession).filter(TimeSession.id == session_id).one_or_none()
    if not session:
        raise NotFound("Session not found")
    return session


def _lock_project(db: Session, project_id: int) -> Project:
    project = (
        db.query(Project)
        .filter(Project.id == project_id)
        .with_for_update()
        .populate_existing()
        .one_or_none()
    )
    if not project:
        raise NotFound("Project not found")
    return project


def _lock_session(db: Session, session_id: int) -> TimeSession:
    session = (
        db.query(TimeSession)
        .filter(TimeSession.id == session_id)
        .with_for_update()
        .populate_existing()
        .one_or_none()
    )
    if not session:
        raise NotFound("Session not found")
    return session


def _open_sessions(db: Session, project_id: int) -> list[TimeSession]:
    return (
        db.query(TimeSession)
        .filter(TimeSession.project_id == project_id, TimeSession.end_time.is_(None))
        .order_by(TimeSession.id.desc())
        .all()
    )


def _close_running(db: Session, project: Project, now: int) -> int:
    """Close the project's open session at ``now`` and fold it into the aggregate."""
    duration = elapsed_since_start(project.start_time, now)
    open_sessions = _open_sessions(db, project.id)
    if open_sessions:
        latest, stale = open_sessions[0], open_sessions[1:]
        latest.end_time = max(now, latest.start_time)
        latest.duration = duration
        for orphan in stale:
            orphan.end_time = orphan.start_time
            orphan.duration = 0
    elif project.start_time is not None:
        # running flag without a session row; record the interval so the sum still holds
        db.add(
            TimeSession(
                project_id=project.id,
                start_time=project.start_time,
                end_time=max(now, project.start_time),
                duration=duration,
            )
        )
    project.total_time = (project.total_time or 0) + duration
    project.is_running = False
    project.start_time = None
    return duration


def start_timer(db: Session, project_id: int, principal: Principal, now: int) -> Project:
    project = get_project(db, project_id)
    policy_for(principal).ensure_timer_control(project)

    with atomic(db, "start the timer"):
        # serialize concurrent starts for the same owner
        db.query(User).filter(User.id == project.owner_id).with_for_update().one_or_none()
        project = _lock_project(db, project_id)
        running = (
            db.query(Project)
            .filter(
                Project.owner_id == project.owner_id,
                Project.id != project.id,
                Project.is_running.is_(True),
            )
            .with_for_update()
            .populate_existing()
            .all()
        )
        for other in running:
            interrupted = _close_running(db, other, now)
            logger.info(
                "Auto-closed timer on project %s (%ss) before starting project %s",
                other.id,
                interrupted,
                project.id,
            )
        # running flags must be cleared before the target is set
        db.flush()

        project.is_running = True
        project.start_time = now
        open_sessions = _open_sessions(db, project.id)
        if open_sessions:
            # restart overwrites the running interval instead of stacking a second open session
            open_sessions[0].start_time = now
            for orphan in open_sessions[1:]:
                orphan.end_time = orphan.start_time
                orphan.duration = 0
        else:
            db.add(TimeSession(project_id=project.id, start_time=now, end_time=None, duration=0))

    logger.info("Started timer on project %s for user %s", project.id, principal.id)
    return project


def stop_timer(db: Session, project_id: int, principal: Principal, now: int) -> Project:
    project = get_project(db, project_id)
    policy_for(principal).ensure_timer_control(project)
    if not project.is_running or project.start_time is None:
        logger.debug("Stop requested for idle project %s; nothing to do", project_id)
        return project

    with atomic(db, "stop the timer"):
        project = _lock_project(db, project_id)
        if not project.is_running or project.start_time is None:
            return project
        duration = _close_running(db, project, now)

    logger.info("Stopped timer on project %s after %ss", project.id, duration)
    return project


def edit_session(
    db: Session,
    session_id: int,
    new_start: int,
    new_end: int,
    principal: Principal,
) -> TimeSession:
    if new_end <= new_start:
        raise InvalidRange("End time must be after start time")
    session = get_session(db, session_id)
    policy_for(principal).ensure_history_edit(session.project)

    new_duration = (new_end - new_start) // MS_PER_SECOND
    with atomic(db, "update the session"):
        project = _lock_project(db, session.project_id)
        # the delta must come from the row as it is under the lock
        session = _lock_session(db, session_id)
        if session.end_time is None:
            raise ValidationError("Stop the timer before editing a running session")
        diff = new_duration - (session.duration or 0)
        session.start_time = new_start
        session.end_time = new_end
        session.duration = new_duration
        project.total_time = max(0, (project.total_time or 0) + diff)

    logger.info("Edited session %s on project %s (%+ds)", session.id, session.project_id, diff)
    return session


def delete_session(db: Session, session_id: int, principal: Principal) -> Project:
    session = get_session(db, session_id)
    policy_for(principal).ensure_history_edit(session.project)

    with atomic(db, "delete the session"):
        project = _lock_project(db, session.project_id)
        session = _lock_session(db, session_id)
        if session.end_time is None:
            project.is_running = False
            project.start_time = None
        else:
            project.total_time = max(0, (project.total_time or 0) - (session.duration or 0))
        db.delete(session)

    logger.info("Deleted session %s from project %s", session_id, project.id)
    return project


def delete_project(db: Session, project_id: int, principal: Principal) -> None:
    project = get_project(db, project_id)
    policy_for(principal).ensure_manage(project)

    with atomic(db, "delete the project"):
        sessions = db.query(TimeSession).filter(TimeSession.project_id == project.id).all()
        for session in sessions:
            db.delete(session)
        db.flush()
        db.expire(project, ["sessions"])
        db.delete(project)
        removed = len(sessions)

    logger.info("Deleted project %s and %s session(s)", project_id, removed)


def reset_week(db: Session, project_id: int, principal: Principal, now: int, tz: str | None = None) -> Project:
    """Drop this week's closed sessions, then rebuild the aggregate from what is left."""
    project = get_project(db, project_id)
    policy_for(principal).ensure_history_edit(project)
    boundary = week_start(now, tz)

    with atomic(db, "reset the week"):
        project = _lock_project(db, project_id)
        expired = (
            db.query(TimeSession)
            .filter(
                TimeSession.project_id == project.id,
                TimeSession.start_time >= boundary,
                TimeSession.end_time.isnot(None),
            )
            .all()
        )
        for session in expired:
            db.delete(session)
        db.flush()
        _reconcile(db, project)
        removed = len(expired)

    logger.info("Reset week for project %s: removed %s session(s)", project.id, removed)
    return project


def _reconcile(db: Session, project: Project) -> None:
    sessions = (
        db.query(TimeSession)
        .filter(TimeSession.project_id == project.id)
        .order_by(TimeSession.id.asc())
        .all()
    )
    open_sessions = [session for session in sessions if session.end_time is None]
    other_running = (
        db.query(Project)
        .filter(
            Project.owner_id == project.owner_id,
            Project.id != project.id,
            Project.is_running.is_(True),
        )
        .count()
    )
    keep_open = open_sessions[-1] if open_sessions and not other_running else None
    for session in open_sessions:
        if session is not keep_open:
            session.end_time = session.start_time
            session.duration = 0

    project.total_time = sum(session.duration or 0 for session in sessions if session.end_time is not None)
    project.is_running = keep_open is not None
    project.start_time = keep_open.start_time if keep_open else None


def reconcile_project(db: Session, project_id: int, principal: Principal) -> Project:
    """Recompute ``total_time`` and the running flag from the session history."""
    project = get_project(db, project_id)
    policy_for(principal).ensure_manage(project)
    before = (project.total_time, project.is_running)

    with atomic(db, "reconcile the project"):
        project = _lock_project(db, project_id)
        _reconcile(db, project)

    if before != (project.total_time, project.is_running):
        logger.warning(
            "Project %s aggregate repaired: total_time %s -> %s, running %s -> %s",
            project.id,
            before[0],
            project.total_time,
            before[1],
            project.is_running,
        )
    return project
