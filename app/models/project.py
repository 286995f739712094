from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    func,
    text,
)
from sqlalchemy.orm import relationship

from . import Base


class Project(Base):
    __tablename__ = "projects"
    __table_args__ = (
        CheckConstraint("total_time >= 0", name="ck_projects_total_time_non_negative"),
        # one running project per owner
        Index(
            "uq_projects_owner_running",
            "owner_id",
            unique=True,
            postgresql_where=text("is_running"),
            sqlite_where=text("is_running"),
        ),
    )

    id = Column(Integer, primary_key=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    hourly_rate = Column(Numeric(10, 2), nullable=False)
    rate_currency = Column(String(3), nullable=False, default="USD")
    committed_weekly_hours = Column(Numeric(5, 2), nullable=False)
    # seconds across closed sessions only
    total_time = Column(Integer, nullable=False, default=0)
    is_running = Column(Boolean, nullable=False, default=False)
    # ms since epoch, set iff is_running
    start_time = Column(BigInteger, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    owner = relationship("User")
    sessions = relationship(
        "TimeSession",
        back_populates="project",
        order_by="TimeSession.id",
        cascade="all, delete-orphan",
    )
