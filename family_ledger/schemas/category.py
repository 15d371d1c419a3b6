"""Pydantic schemas for categories."""

from pydantic import BaseModel, Field

from family_ledger.models.enums import CategoryType


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    type: CategoryType
    icon: str | None = Field(default=None, max_length=50)


class CategoryResponse(BaseModel):
    id: int
    ledger_id: int
    name: str
    type: CategoryType
    icon: str | None

    model_config = {"from_attributes": True}


class SeedResponse(BaseModel):
    message: str
    count: int
