"""
Decision service for decisions and their options.
"""
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from typing import List, Optional
import logging
from pickmate.core.config import settings
from pickmate.core.exceptions import ValidationError, NotFoundError, ForbiddenError
from pickmate.models.decision import Decision, DecisionStatus, DecisionCategory, Option
from pickmate.models.user import User

logger = logging.getLogger(__name__)

# Allowed status changes; archived is terminal
STATUS_TRANSITIONS = {
    DecisionStatus.OPEN: {DecisionStatus.CLOSED},
    DecisionStatus.CLOSED: {DecisionStatus.OPEN, DecisionStatus.ARCHIVED},
    DecisionStatus.ARCHIVED: set(),
}


def _clean_title(title: Optional[str], what: str) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError(f"{what} title is required")
    return cleaned


def _option_count(decision_id: int, db: Session) -> int:
    return db.query(func.count(Option.id)).filter(Option.decision_id == decision_id).scalar()


def create_decision(
    user: User,
    title: str,
    category: DecisionCategory = DecisionCategory.OTHER,
    options: Optional[list] = None,
    db: Session = None
) -> Decision:
    """
    Create a decision owned by the user's couple, or by the user when unpaired.

    ``options`` is an optional list of dicts (title, description, url,
    image_url, price) created in order as the decision's initial options.
    """
    title = _clean_title(title, "Decision")
    options = options or []
    if len(options) > settings.MAX_OPTIONS_PER_DECISION:
        raise ValidationError(
            f"A decision can have at most {settings.MAX_OPTIONS_PER_DECISION} options"
        )

    decision = Decision(
        couple_id=user.couple_id,
        owner_id=None if user.couple_id else user.id,
        title=title,
        category=category or DecisionCategory.OTHER,
        status=DecisionStatus.OPEN
    )
    db.add(decision)
    db.flush()

    for i, option_data in enumerate(options):
        db.add(_build_option(decision.id, i, **option_data))

    db.commit()
    db.refresh(decision)

    logger.info(f"User {user.id} created decision {decision.id} with {len(options)} option(s)")
    return decision


def list_decisions(user: User, db: Session) -> List[Decision]:
    """List decisions owned by the user's couple or the user, newest first."""
    filters = [Decision.owner_id == user.id]
    if user.couple_id:
        filters.append(Decision.couple_id == user.couple_id)
    return db.query(Decision).filter(or_(*filters)).order_by(
        Decision.created_at.desc(), Decision.id.desc()
    ).all()


def get_decision(decision_id: int, db: Session) -> Decision:
    """Get a decision or raise NotFoundError."""
    decision = db.query(Decision).filter(Decision.id == decision_id).first()
    if not decision:
        raise NotFoundError("Decision not found")
    return decision


def check_decision_access(decision_id: int, user: User, db: Session) -> Decision:
    """Check that the user owns the decision, directly or through their couple."""
    decision = get_decision(decision_id, db)

    if decision.owner_id is not None and decision.owner_id == user.id:
        return decision
    if decision.couple_id is not None and decision.couple_id == user.couple_id:
        return decision

    raise ForbiddenError("Access denied to this decision")


def update_status(decision: Decision, new_status: DecisionStatus, db: Session) -> Decision:
    """Move a decision to a new status along the allowed transitions."""
    new_status = DecisionStatus(new_status)
    if decision.status == new_status:
        return decision

    if new_status not in STATUS_TRANSITIONS[decision.status]:
        raise ValidationError(
            f"Cannot change decision status from {decision.status.value} to {new_status.value}"
        )

    decision.status = new_status
    db.commit()
    db.refresh(decision)
    return decision


def delete_decision(decision: Decision, db: Session) -> None:
    """Delete a decision together with its options, ratings and voters."""
    decision_id = decision.id
    db.delete(decision)
    db.commit()
    logger.info(f"Decision {decision_id} deleted")


def _build_option(
    decision_id: int,
    position: int,
    title: str,
    description: str = "",
    url: str = "",
    image_url: str = "",
    price: str = ""
) -> Option:
    return Option(
        decision_id=decision_id,
        title=_clean_title(title, "Option"),
        description=(description or "").strip(),
        url=(url or "").strip(),
        image_url=(image_url or "").strip(),
        price=(price or "").strip(),
        position=position
    )


def add_option(
    decision: Decision,
    title: str,
    description: str = "",
    url: str = "",
    image_url: str = "",
    price: str = "",
    db: Session = None
) -> Option:
    """Append an option to an open decision, up to the per-decision cap."""
    if decision.status != DecisionStatus.OPEN:
        raise ValidationError("Options can only be added to an open decision")

    if _option_count(decision.id, db) >= settings.MAX_OPTIONS_PER_DECISION:
        raise ValidationError(
            f"A decision can have at most {settings.MAX_OPTIONS_PER_DECISION} options"
        )

    last_position = db.query(func.max(Option.position)).filter(
        Option.decision_id == decision.id
    ).scalar()
    position = 0 if last_position is None else last_position + 1

    option = _build_option(decision.id, position, title, description, url, image_url, price)
    db.add(option)
    db.commit()
    db.refresh(option)
    return option


def list_options(decision_id: int, db: Session) -> List[Option]:
    """List a decision's options in insertion order."""
    return db.query(Option).filter(
        Option.decision_id == decision_id
    ).order_by(Option.position.asc(), Option.id.asc()).all()


def remove_option(decision: Decision, option_id: int, db: Session) -> None:
    """Delete one option of an open decision along with its ratings."""
    if decision.status != DecisionStatus.OPEN:
        raise ValidationError("Options can only be removed from an open decision")

    option = db.query(Option).filter(
        Option.id == option_id,
        Option.decision_id == decision.id
    ).first()
    if not option:
        raise NotFoundError("Option not found")

    db.delete(option)
    db.commit()
