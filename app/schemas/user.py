from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, constr


class UserBase(BaseModel):
    id: int
    email: EmailStr
    full_name: str | None = None
    role: str

    model_config = ConfigDict(from_attributes=True)


class UserDetail(UserBase):
    created_at: datetime | None = None
    project_count: int = 0


class SignupRequest(BaseModel):
    email: EmailStr
    full_name: str | None = None
    password: constr(min_length=6)


class LoginRequest(BaseModel):
    email: EmailStr
    password: constr(min_length=1)
