"""
Pydantic schemas for Couple entity.
"""
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from pickmate.schemas.user import PartnerResponse


class CoupleResponse(BaseModel):
    """Schema for couple response."""
    id: int
    invite_code: str
    created_by: int
    member_ids: List[int]
    created_at: datetime

    class Config:
        from_attributes = True


class CoupleDetailResponse(CoupleResponse):
    """Couple with the caller's partner, if one has joined."""
    partner: Optional[PartnerResponse] = None


class InviteCodeResponse(BaseModel):
    """Schema returned after creating a couple."""
    couple_id: int
    invite_code: str


class CoupleJoin(BaseModel):
    """Schema for joining a couple by invite code."""
    invite_code: str
