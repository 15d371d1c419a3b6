"""
Pydantic schemas for ledgers and their members.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from family_ledger.models.enums import LedgerRole


# --- Request Schemas ---

class LedgerCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    password: str | None = Field(default=None, max_length=255)


class MemberAdd(BaseModel):
    """Invite an existing user into the ledger by email."""
    email: str = Field(min_length=3, max_length=255)
    role: LedgerRole = LedgerRole.EDITOR


class MemberRoleUpdate(BaseModel):
    role: LedgerRole


# --- Response Schemas ---

class LedgerResponse(BaseModel):
    id: int
    name: str
    has_password: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class LedgerSummary(BaseModel):
    """One row of the caller's ledger list."""
    id: int
    name: str
    role: LedgerRole
    last_accessed_at: datetime
    has_password: bool


class MemberResponse(BaseModel):
    user_id: int
    email: str | None
    name: str
    role: LedgerRole
    last_accessed_at: datetime


class VerifyResponse(BaseModel):
    success: bool = True
