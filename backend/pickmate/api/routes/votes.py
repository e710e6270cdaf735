"""
Public voting link routes.

Anyone holding ``/vote/{decision_id}`` can rate the decision's options
without an account; the voter is identified by a cookie issued on first
visit (or by their account when a bearer token is sent).
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pickmate.db.session import get_db
from pickmate.schemas.decision import DecisionResponse, OptionResponse
from pickmate.schemas.rating import RatingSet, RatingResponse, VotingSessionResponse, VoteDoneResponse
from pickmate.api.dependencies import get_current_voter_id
from pickmate.services import decision_service, rating_service
from pickmate.services.results_channel import publish_results

router = APIRouter(prefix="/vote", tags=["vote"])


@router.get("/{decision_id}", response_model=VotingSessionResponse)
async def open_voting_link(
    decision_id: int,
    voter_id: str = Depends(get_current_voter_id),
    db: Session = Depends(get_db)
):
    """Decision, its options in display order, and the stars this voter already gave."""
    decision = decision_service.get_decision(decision_id, db)
    options = decision_service.list_options(decision_id, db)
    voter = rating_service.get_voter(decision_id, voter_id, db)

    return VotingSessionResponse(
        decision=DecisionResponse.model_validate(decision),
        options=[OptionResponse.model_validate(o) for o in options],
        ratings=rating_service.get_voter_ratings(decision_id, voter_id, db),
        completed=bool(voter and voter.completed)
    )


@router.put("/{decision_id}/options/{option_id}", response_model=RatingResponse)
async def cast_vote(
    decision_id: int,
    option_id: int,
    payload: RatingSet,
    voter_id: str = Depends(get_current_voter_id),
    db: Session = Depends(get_db)
):
    """Rate one option; voting again on the same option replaces the earlier stars."""
    rating = rating_service.set_rating(decision_id, option_id, voter_id, payload.stars, db)
    publish_results(decision_id, db)
    return rating


@router.post("/{decision_id}/done", response_model=VoteDoneResponse)
async def finish_voting(
    decision_id: int,
    voter_id: str = Depends(get_current_voter_id),
    db: Session = Depends(get_db)
):
    """Mark this voter as finished with the decision."""
    rating_service.mark_completed(decision_id, voter_id, db)
    return _done_summary(decision_id, voter_id, db)


@router.get("/{decision_id}/done", response_model=VoteDoneResponse)
async def get_vote_confirmation(
    decision_id: int,
    voter_id: str = Depends(get_current_voter_id),
    db: Session = Depends(get_db)
):
    """Confirmation view shown after voting."""
    return _done_summary(decision_id, voter_id, db)


def _done_summary(decision_id: int, voter_id: str, db: Session) -> VoteDoneResponse:
    decision = decision_service.get_decision(decision_id, db)
    voter = rating_service.get_voter(decision_id, voter_id, db)
    return VoteDoneResponse(
        decision_id=decision.id,
        title=decision.title,
        completed=bool(voter and voter.completed),
        rated_count=len(rating_service.get_voter_ratings(decision_id, voter_id, db))
    )
