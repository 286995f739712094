from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from .session import SessionRead


class ProjectCreate(BaseModel):
    name: str
    hourly_rate: Decimal
    rate_currency: str = "USD"
    committed_weekly_hours: Decimal


class ProjectUpdate(BaseModel):
    name: str | None = None
    hourly_rate: Decimal | None = None
    rate_currency: str | None = None
    committed_weekly_hours: Decimal | None = None


class ProjectRead(BaseModel):
    id: int
    owner_id: int
    name: str
    hourly_rate: Decimal
    rate_currency: str
    committed_weekly_hours: Decimal
    total_time: int
    is_running: bool
    start_time: int | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class ProjectView(ProjectRead):
    owner_email: str | None = None
    sessions: list[SessionRead] = Field(default_factory=list)
    current_session_seconds: int = 0
    total_display_seconds: int = 0
    elapsed_display: str = "00:00:00"
    earnings: str = "0.00"
    weekly_elapsed_seconds: int = 0
    weekly_progress_percent: float = 0.0
    can_control_timer: bool = False
    can_manage: bool = False
