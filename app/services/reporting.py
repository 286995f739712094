from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from typing import Iterable

from sqlalchemy.orm import Session

from ..config import get_settings
from ..constants import SECONDS_PER_HOUR
from ..models import Project, User
from ..schemas.report import AdminStats, DailyEarnings, DashboardSummary, ProjectEarnings
from . import timecalc

settings = get_settings()


def daily_earnings(projects: Iterable[Project], now: int, tz: str | None = None, days: int = 7) -> list[DailyEarnings]:
    """Earnings per local calendar day for the last ``days`` days, oldest first."""
    today = timecalc.local_datetime(now, tz).date()
    buckets: dict = {today - timedelta(days=offset): Decimal("0") for offset in range(days - 1, -1, -1)}
    for project in projects:
        rate = Decimal(str(project.hourly_rate))
        for session in project.sessions:
            if not session.duration:
                continue
            started = timecalc.local_datetime(session.start_time, tz).date()
            if started in buckets:
                buckets[started] += Decimal(session.duration) / SECONDS_PER_HOUR * rate
    return [
        DailyEarnings(date=day.strftime("%b %d").replace(" 0", " "), earnings=round(float(amount), 2))
        for day, amount in buckets.items()
    ]


def earnings_by_project(projects: Iterable[Project], now: int) -> list[ProjectEarnings]:
    return [
        ProjectEarnings(
            project_id=project.id,
            name=project.name,
            currency=project.rate_currency,
            earnings=float(timecalc.earnings_amount(timecalc.total_display_seconds(project, now), project.hourly_rate)),
        )
        for project in projects
    ]


def build_dashboard(projects: list[Project], now: int, tz: str | None = None) -> DashboardSummary:
    """Headline figures are in one currency; other currencies only appear in ``totals_by_currency``."""
    by_project = earnings_by_project(projects, now)
    running = next((project.id for project in projects if project.is_running), None)
    currency = projects[0].rate_currency if projects else settings.default_currency
    totals: dict[str, Decimal] = {}
    for item in by_project:
        totals[item.currency] = totals.get(item.currency, Decimal("0")) + Decimal(str(item.earnings))
    return DashboardSummary(
        currency=currency,
        total_earnings=float(totals.get(currency, Decimal("0"))),
        totals_by_currency={code: float(amount) for code, amount in totals.items()},
        running_project_id=running,
        daily=daily_earnings([project for project in projects if project.rate_currency == currency], now, tz),
        by_project=by_project,
    )


def get_admin_stats(db: Session) -> AdminStats:
    return AdminStats(
        total_users=db.query(User).count(),
        total_projects=db.query(Project).count(),
    )
