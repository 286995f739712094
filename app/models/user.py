from sqlalchemy import Column, DateTime, Enum, Integer, String, func

from . import Base

user_role_enum = Enum("USER", "SUPER_ADMIN", name="user_role")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    full_name = Column(String, nullable=True)
    role = Column(user_role_enum, nullable=False, default="USER")
    created_at = Column(DateTime, server_default=func.now())
