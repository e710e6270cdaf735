"""
Rating service: one rating per (decision, option, voter).
"""
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from datetime import datetime
from typing import Dict, List, Optional
import logging
from pickmate.core.exceptions import ValidationError, NotFoundError
from pickmate.models.decision import DecisionStatus, Option
from pickmate.models.rating import Rating, Voter
from pickmate.services.decision_service import get_decision

logger = logging.getLogger(__name__)

VALID_STARS = (1, 2, 3)


def _validate_stars(stars) -> int:
    # bool is an int subclass; True must not count as one star
    if isinstance(stars, bool) or not isinstance(stars, int) or stars not in VALID_STARS:
        raise ValidationError("Stars must be 1, 2 or 3")
    return stars


def _validate_voter_id(voter_id) -> str:
    voter_id = str(voter_id or "").strip()
    if not voter_id:
        raise ValidationError("Voter id is required")
    return voter_id


def _write_rating(decision_id: int, option_id: int, voter_id: str, stars: int, db: Session) -> Rating:
    rating = db.query(Rating).filter(
        Rating.decision_id == decision_id,
        Rating.option_id == option_id,
        Rating.voter_id == voter_id
    ).first()

    now = datetime.utcnow()
    if rating:
        rating.stars = stars
        rating.updated_at = now
    else:
        rating = Rating(
            decision_id=decision_id,
            option_id=option_id,
            voter_id=voter_id,
            stars=stars
        )
        db.add(rating)

    # Any new rating puts the voter back in progress until they finish again
    voter = db.query(Voter).filter(
        Voter.decision_id == decision_id,
        Voter.voter_id == voter_id
    ).first()
    if voter:
        voter.completed = False
    else:
        db.add(Voter(decision_id=decision_id, voter_id=voter_id, completed=False))

    db.commit()
    db.refresh(rating)
    return rating


def set_rating(decision_id: int, option_id: int, voter_id: str, stars: int, db: Session) -> Rating:
    """
    Cast or update a voter's rating for one option.

    Repeat calls for the same voter and option overwrite the stored stars.
    If a concurrent first vote from the same voter wins the insert, the
    write is retried once as an update.
    """
    stars = _validate_stars(stars)
    voter_id = _validate_voter_id(voter_id)

    decision = get_decision(decision_id, db)
    if decision.status != DecisionStatus.OPEN:
        raise ValidationError("This decision is not open for voting")

    option = db.query(Option).filter(
        Option.id == option_id,
        Option.decision_id == decision_id
    ).first()
    if not option:
        raise NotFoundError("Option not found")

    try:
        rating = _write_rating(decision_id, option_id, voter_id, stars, db)
    except IntegrityError:
        db.rollback()
        rating = _write_rating(decision_id, option_id, voter_id, stars, db)

    logger.debug(f"Voter {voter_id} rated option {option_id} of decision {decision_id}: {stars}")
    return rating


def get_user_rating(voter_id: str, option_id: int, db: Session) -> int:
    """Return the voter's stars for an option, or 0 if they have not rated it."""
    rating = db.query(Rating.stars).filter(
        Rating.voter_id == str(voter_id),
        Rating.option_id == option_id
    ).first()
    return rating.stars if rating else 0


def get_voter_ratings(decision_id: int, voter_id: str, db: Session) -> Dict[int, int]:
    """Map option id -> stars for everything a voter rated in a decision."""
    ratings = db.query(Rating).filter(
        Rating.decision_id == decision_id,
        Rating.voter_id == str(voter_id)
    ).all()
    return {r.option_id: r.stars for r in ratings}


def list_ratings(decision_id: int, db: Session) -> List[Rating]:
    """All ratings cast on a decision."""
    return db.query(Rating).filter(Rating.decision_id == decision_id).all()


def get_voter(decision_id: int, voter_id: str, db: Session) -> Optional[Voter]:
    return db.query(Voter).filter(
        Voter.decision_id == decision_id,
        Voter.voter_id == str(voter_id)
    ).first()


def mark_completed(decision_id: int, voter_id: str, db: Session) -> Voter:
    """Flag a voter as done with a decision. Safe to call repeatedly."""
    voter_id = _validate_voter_id(voter_id)
    get_decision(decision_id, db)

    voter = get_voter(decision_id, voter_id, db)
    if voter is None:
        voter = Voter(decision_id=decision_id, voter_id=voter_id, completed=True)
        db.add(voter)
    elif voter.completed:
        return voter
    else:
        voter.completed = True

    db.commit()
    db.refresh(voter)

    logger.info(f"Voter {voter_id} completed decision {decision_id}")
    return voter
