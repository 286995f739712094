from app.models import Project, TimeSession, User
from app.services.access import Principal

HOUR_MS = 3600 * 1000
DAY_MS = 24 * HOUR_MS
# Monday 2024-01-01 00:00:00 UTC
MONDAY_MS = 1_704_067_200_000


def principal_of(user: User) -> Principal:
    return Principal(id=user.id, role=user.role)


def assert_aggregates_consistent(db_session, owner_id: int | None = None) -> None:
    """total_time equals closed durations and each owner has at most one running project."""
    db_session.expire_all()
    query = db_session.query(Project)
    if owner_id is not None:
        query = query.filter(Project.owner_id == owner_id)
    running_by_owner: dict[int, int] = {}
    for project in query.all():
        sessions = db_session.query(TimeSession).filter(TimeSession.project_id == project.id).all()
        closed = sum(s.duration for s in sessions if s.end_time is not None)
        open_count = sum(1 for s in sessions if s.end_time is None)
        assert project.total_time == closed
        assert open_count <= 1
        assert project.is_running == (open_count == 1)
        assert (project.start_time is not None) == project.is_running
        if project.is_running:
            running_by_owner[project.owner_id] = running_by_owner.get(project.owner_id, 0) + 1
    assert all(count <= 1 for count in running_by_owner.values())
