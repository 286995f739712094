from __future__ import annotations

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..db import atomic
from ..errors import Forbidden, NotFound
from ..models import Project, TimeSession, User
from ..schemas.user import UserDetail
from .access import Principal, policy_for

logger = logging.getLogger(__name__)


def list_users(db: Session, principal: Principal) -> list[UserDetail]:
    policy_for(principal).ensure_user_management()
    counts = dict(
        db.query(Project.owner_id, func.count(Project.id)).group_by(Project.owner_id).all()
    )
    users = db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()
    return [
        UserDetail(
            id=user.id,
            email=user.email,
            full_name=user.full_name,
            role=user.role,
            created_at=user.created_at,
            project_count=counts.get(user.id, 0),
        )
        for user in users
    ]


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).one_or_none()
    if not user:
        raise NotFound("User not found")
    return user


def delete_user(db: Session, user_id: int, principal: Principal) -> dict:
    """Remove a user together with every project and session they own."""
    policy_for(principal).ensure_user_management()
    if user_id == principal.id:
        raise Forbidden("You cannot delete your own account")
    user = get_user(db, user_id)

    project_ids = [row.id for row in db.query(Project.id).filter(Project.owner_id == user.id).all()]
    with atomic(db, "delete the user"):
        removed_sessions = 0
        if project_ids:
            removed_sessions = (
                db.query(TimeSession)
                .filter(TimeSession.project_id.in_(project_ids))
                .delete(synchronize_session=False)
            )
            db.query(Project).filter(Project.id.in_(project_ids)).delete(synchronize_session=False)
        db.delete(user)

    logger.info(
        "User %s deleted user %s with %s project(s) and %s session(s)",
        principal.id,
        user_id,
        len(project_ids),
        removed_sessions,
    )
    return {"removed": user_id, "projects": len(project_ids), "sessions": removed_sessions}
