"""
Caller profile endpoint.
"""

from fastapi import APIRouter, Depends

from family_ledger.api.deps import get_current_user
from family_ledger.models.user import User
from family_ledger.schemas.user import UserResponse

router = APIRouter(tags=["Users"])


@router.get("/me", response_model=UserResponse)
def get_me(user: User = Depends(get_current_user)):
    """The caller's profile, created on first request."""
    return user
