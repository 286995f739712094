from pydantic import BaseModel


class DailyEarnings(BaseModel):
    date: str
    earnings: float


class ProjectEarnings(BaseModel):
    project_id: int
    name: str
    currency: str
    earnings: float


class DashboardSummary(BaseModel):
    currency: str
    total_earnings: float
    totals_by_currency: dict[str, float] = {}
    running_project_id: int | None = None
    daily: list[DailyEarnings]
    by_project: list[ProjectEarnings]


class AdminStats(BaseModel):
    total_users: int
    total_projects: int
