from sqlalchemy.orm import declarative_base

Base = declarative_base()

from .project import Project  # noqa: E402,F401
from .time_session import TimeSession  # noqa: E402,F401
from .user import User  # noqa: E402,F401
