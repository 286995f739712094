"""Duration, earnings and weekly-progress arithmetic.

Every function takes ``now`` explicitly (milliseconds since the epoch) so the
results are deterministic; only :func:`now_ms` reads the wall clock and it is
meant to be called once per request by the HTTP layer.
"""

from __future__ import annotations

import time
from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable
from zoneinfo import ZoneInfo

from ..constants import MS_PER_SECOND, SECONDS_PER_HOUR

_CENT = Decimal("0.01")


def now_ms() -> int:
    return int(time.time() * MS_PER_SECOND)


def format_elapsed(seconds: int) -> str:
    seconds = max(0, int(seconds))
    hours, remainder = divmod(seconds, SECONDS_PER_HOUR)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def elapsed_since_start(start_time_ms: int | None, now: int) -> int:
    if start_time_ms is None:
        return 0
    return max(0, (now - start_time_ms) // MS_PER_SECOND)


def current_session_seconds(project, now: int) -> int:
    if not project.is_running or project.start_time is None:
        return 0
    return elapsed_since_start(project.start_time, now)


def total_display_seconds(project, now: int) -> int:
    return (project.total_time or 0) + current_session_seconds(project, now)


def earnings_amount(total_seconds: int, hourly_rate) -> Decimal:
    hours = Decimal(int(total_seconds)) / Decimal(SECONDS_PER_HOUR)
    return (hours * Decimal(str(hourly_rate))).quantize(_CENT, rounding=ROUND_HALF_UP)


def earnings(total_seconds: int, hourly_rate) -> str:
    """Earnings as a two-decimal string, e.g. ``"125.00"``."""
    return f"{earnings_amount(total_seconds, hourly_rate):.2f}"


def _zone(tz: str | ZoneInfo | None) -> ZoneInfo:
    if isinstance(tz, ZoneInfo):
        return tz
    return ZoneInfo(tz or "UTC")


def local_datetime(timestamp_ms: int, tz: str | ZoneInfo | None = None) -> datetime:
    return datetime.fromtimestamp(timestamp_ms / MS_PER_SECOND, tz=timezone.utc).astimezone(_zone(tz))


def week_start(now: int, tz: str | ZoneInfo | None = None) -> int:
    """Monday 00:00:00 local time of the week containing ``now``, in ms."""
    zone = _zone(tz)
    today = local_datetime(now, zone).date()
    monday = today - timedelta(days=today.isoweekday() - 1)
    start = datetime.combine(monday, datetime.min.time(), zone)
    return int(start.timestamp() * MS_PER_SECOND)


def day_start(day: date, tz: str | ZoneInfo | None = None) -> int:
    start = datetime.combine(day, datetime.min.time(), _zone(tz))
    return int(start.timestamp() * MS_PER_SECOND)


def weekly_elapsed_seconds(
    sessions: Iterable,
    current_seconds: int,
    now: int,
    tz: str | ZoneInfo | None = None,
) -> int:
    boundary = week_start(now, tz)
    completed = sum(session.duration or 0 for session in sessions if session.start_time >= boundary)
    return completed + max(0, current_seconds)


def weekly_progress_percent(weekly_seconds: int, committed_weekly_hours) -> float:
    committed = float(committed_weekly_hours or 0)
    if committed <= 0:
        return 0.0
    percentage = (weekly_seconds / SECONDS_PER_HOUR) / committed * 100
    return min(100.0, percentage)
