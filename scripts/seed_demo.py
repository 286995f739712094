"""Seed a demo admin, a freelancer and a couple of tracked projects."""

from __future__ import annotations

import sys
from decimal import Decimal
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from app.constants import ROLE_SUPER_ADMIN, ROLE_USER  # noqa: E402
from app.db import SessionLocal  # noqa: E402
from app.models import Project, TimeSession, User  # noqa: E402
from app.routers.auth import get_password_hash  # noqa: E402
from app.services.timecalc import now_ms  # noqa: E402

ADMIN_EMAIL = "admin@example.com"
FREELANCER_EMAIL = "freelancer@example.com"
DEFAULT_PASSWORD = "demo1234"
HOUR_MS = 3600 * 1000


def ensure_user(session, email: str, full_name: str, role: str) -> User:
    user = session.query(User).filter(User.email == email).one_or_none()
    if user:
        return user
    user = User(
        email=email,
        full_name=full_name,
        password_hash=get_password_hash(DEFAULT_PASSWORD),
        role=role,
    )
    session.add(user)
    session.flush()
    return user


def ensure_project(session, owner: User, name: str, rate: str, weekly_hours: str, hours_logged: list[float]) -> Project:
    project = (
        session.query(Project)
        .filter(Project.owner_id == owner.id, Project.name == name)
        .one_or_none()
    )
    if project:
        return project

    project = Project(
        owner_id=owner.id,
        name=name,
        hourly_rate=Decimal(rate),
        rate_currency="USD",
        committed_weekly_hours=Decimal(weekly_hours),
        total_time=0,
        is_running=False,
    )
    session.add(project)
    session.flush()

    now = now_ms()
    for days_ago, hours in enumerate(hours_logged, start=1):
        start = now - days_ago * 24 * HOUR_MS
        duration = int(hours * 3600)
        session.add(
            TimeSession(
                project_id=project.id,
                start_time=start,
                end_time=start + duration * 1000,
                duration=duration,
            )
        )
        project.total_time += duration
    return project


def main() -> None:
    session = SessionLocal()
    try:
        ensure_user(session, ADMIN_EMAIL, "Demo Admin", ROLE_SUPER_ADMIN)
        freelancer = ensure_user(session, FREELANCER_EMAIL, "Demo Freelancer", ROLE_USER)
        ensure_project(session, freelancer, "Website redesign", "50", "20", [2.5, 4, 1.25])
        ensure_project(session, freelancer, "Mobile app", "75", "10", [3, 0.5])
        session.commit()
        print("Demo data ready:")
        print(f"  Admin login: {ADMIN_EMAIL} / {DEFAULT_PASSWORD}")
        print(f"  Freelancer login: {FREELANCER_EMAIL} / {DEFAULT_PASSWORD}")
    finally:
        session.close()


if __name__ == "__main__":
    main()
