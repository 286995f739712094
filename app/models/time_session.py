from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, func
from sqlalchemy.orm import relationship

from . import Base


class TimeSession(Base):
    __tablename__ = "time_sessions"

    id = Column(Integer, primary_key=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    start_time = Column(BigInteger, nullable=False)
    end_time = Column(BigInteger, nullable=True)
    duration = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.now())

    project = relationship("Project", back_populates="sessions")

    @property
    def is_open(self) -> bool:
        return self.end_time is None
