"""Pydantic schemas for the caller's own profile."""

from datetime import datetime

from pydantic import BaseModel


class UserResponse(BaseModel):
    id: int
    external_id: str
    email: str | None
    name: str
    created_at: datetime

    model_config = {"from_attributes": True}
