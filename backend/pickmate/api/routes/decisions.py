"""
Decision management routes for couple members.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
from pickmate.db.session import get_db
from pickmate.models.user import User
from pickmate.schemas.decision import (
    DecisionCreate, DecisionResponse, DecisionDetailResponse,
    DecisionStatusUpdate, OptionCreate, OptionResponse
)
from pickmate.schemas.rating import RatingSet, RatingResponse, MyRatingsResponse, ResultsResponse
from pickmate.api.dependencies import get_current_user
from pickmate.services import decision_service, rating_service
from pickmate.services.identity_service import voter_id_for_user
from pickmate.services.ranking_service import build_results
from pickmate.services.results_channel import publish_results

router = APIRouter(prefix="/decisions", tags=["decisions"])


@router.post("", response_model=DecisionDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_decision(
    decision_data: DecisionCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a decision, optionally with its first options."""
    return decision_service.create_decision(
        current_user,
        decision_data.title,
        decision_data.category,
        options=[o.model_dump() for o in decision_data.options],
        db=db
    )


@router.get("", response_model=List[DecisionResponse])
async def list_decisions(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List decisions of the current user's couple."""
    return decision_service.list_decisions(current_user, db)


@router.get("/{decision_id}", response_model=DecisionDetailResponse)
async def get_decision(
    decision_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get decision details with options."""
    return decision_service.check_decision_access(decision_id, current_user, db)


@router.patch("/{decision_id}/status", response_model=DecisionResponse)
async def update_decision_status(
    decision_id: int,
    payload: DecisionStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Open, close or archive a decision."""
    decision = decision_service.check_decision_access(decision_id, current_user, db)
    return decision_service.update_status(decision, payload.status, db)


@router.delete("/{decision_id}")
async def delete_decision(
    decision_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a decision with all its options and ratings."""
    decision = decision_service.check_decision_access(decision_id, current_user, db)
    decision_service.delete_decision(decision, db)
    return {"message": "Decision deleted successfully"}


@router.get("/{decision_id}/options", response_model=List[OptionResponse])
async def list_options(
    decision_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List options in the order they were added."""
    decision_service.check_decision_access(decision_id, current_user, db)
    return decision_service.list_options(decision_id, db)


@router.post("/{decision_id}/options", response_model=OptionResponse, status_code=status.HTTP_201_CREATED)
async def add_option(
    decision_id: int,
    option_data: OptionCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Propose a new option."""
    decision = decision_service.check_decision_access(decision_id, current_user, db)
    option = decision_service.add_option(decision, db=db, **option_data.model_dump())
    publish_results(decision_id, db)
    return option


@router.delete("/{decision_id}/options/{option_id}")
async def remove_option(
    decision_id: int,
    option_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Remove an option and its ratings."""
    decision = decision_service.check_decision_access(decision_id, current_user, db)
    decision_service.remove_option(decision, option_id, db)
    publish_results(decision_id, db)
    return {"message": "Option removed successfully"}


@router.put("/{decision_id}/options/{option_id}/rating", response_model=RatingResponse)
async def rate_option(
    decision_id: int,
    option_id: int,
    payload: RatingSet,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Rate an option 1-3 stars as the current user; re-rating overwrites."""
    decision_service.check_decision_access(decision_id, current_user, db)
    rating = rating_service.set_rating(
        decision_id, option_id, voter_id_for_user(current_user), payload.stars, db
    )
    publish_results(decision_id, db)
    return rating


@router.get("/{decision_id}/ratings/me", response_model=MyRatingsResponse)
async def get_my_ratings(
    decision_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Stars the current user gave each option (0 when not rated)."""
    decision_service.check_decision_access(decision_id, current_user, db)
    voter_id = voter_id_for_user(current_user)
    options = decision_service.list_options(decision_id, db)
    return MyRatingsResponse(
        voter_id=voter_id,
        ratings={o.id: rating_service.get_user_rating(voter_id, o.id, db) for o in options}
    )


@router.get("/{decision_id}/results", response_model=ResultsResponse)
async def get_results(
    decision_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Ranked results: options by total stars, ties in insertion order."""
    decision_service.check_decision_access(decision_id, current_user, db)
    return build_results(decision_id, db).to_dict()
