"""
Pydantic schemas for Decision and Option entities.
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from pickmate.models.decision import DecisionStatus, DecisionCategory


class OptionBase(BaseModel):
    """Base option schema."""
    title: str = Field(..., max_length=200)
    description: str = ""
    url: str = ""
    image_url: str = ""
    price: str = ""


class OptionCreate(OptionBase):
    """Schema for option creation."""
    pass


class OptionResponse(OptionBase):
    """Schema for option response."""
    id: int
    decision_id: int
    position: int
    created_at: datetime

    class Config:
        from_attributes = True


class DecisionCreate(BaseModel):
    """Schema for decision creation, optionally with its initial options."""
    title: str = Field(..., max_length=200)
    category: DecisionCategory = DecisionCategory.OTHER
    options: List[OptionCreate] = []


class DecisionStatusUpdate(BaseModel):
    """Schema for a status change."""
    status: DecisionStatus


class DecisionResponse(BaseModel):
    """Schema for decision response."""
    id: int
    couple_id: Optional[int] = None
    owner_id: Optional[int] = None
    title: str
    category: DecisionCategory
    status: DecisionStatus
    created_at: datetime

    class Config:
        from_attributes = True


class DecisionDetailResponse(DecisionResponse):
    """Schema for decision response with its options."""
    options: List[OptionResponse] = []
