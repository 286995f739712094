from pydantic import BaseModel, ConfigDict


class SessionEdit(BaseModel):
    start_time: int
    end_time: int


class SessionRead(BaseModel):
    id: int
    project_id: int
    start_time: int
    end_time: int | None
    duration: int

    model_config = ConfigDict(from_attributes=True)
