"""
Pydantic schemas for ratings, voting progress and ranked results.
"""
from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import datetime
from pickmate.schemas.decision import DecisionResponse, OptionResponse


class RatingSet(BaseModel):
    """Schema for casting or updating a rating."""
    stars: int = Field(..., ge=1, le=3)


class RatingResponse(BaseModel):
    """Schema for rating response."""
    decision_id: int
    option_id: int
    voter_id: str
    stars: int
    updated_at: datetime

    class Config:
        from_attributes = True


class MyRatingsResponse(BaseModel):
    """Stars the caller has given, keyed by option id (0 = not rated)."""
    voter_id: str
    ratings: Dict[int, int]


class RankedOptionResponse(BaseModel):
    """One option's aggregate in a ranking."""
    option_id: int
    title: str
    position: int
    rank: int
    total_stars: int
    voter_count: int
    avg_stars: float


class ResultsResponse(BaseModel):
    """Ranked results of a decision."""
    decision_id: int
    ranking: List[RankedOptionResponse]
    winner_id: Optional[int] = None
    total_stars: int
    total_voters: int


class VotingSessionResponse(BaseModel):
    """What a public voting link shows to a voter."""
    decision: DecisionResponse
    options: List[OptionResponse]
    ratings: Dict[int, int]
    completed: bool


class VoteDoneResponse(BaseModel):
    """Terminal confirmation of a completed vote."""
    decision_id: int
    title: str
    completed: bool
    rated_count: int
