"""
Pairing service for creating, joining and leaving couples.
"""
from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import Optional
import logging
import secrets
import string
from pickmate.core.config import settings
from pickmate.core.exceptions import (
    PickmateError, ValidationError, NotFoundError, FullError, AlreadyMemberError
)
from pickmate.models.couple import Couple, CoupleMember
from pickmate.models.user import User

logger = logging.getLogger(__name__)

MAX_MEMBERS = 2
INVITE_CODE_ALPHABET = string.ascii_uppercase + string.digits


def normalize_invite_code(invite_code: str) -> str:
    """Invite codes match case-insensitively and ignore surrounding whitespace."""
    return (invite_code or "").strip().upper()


def generate_invite_code(db: Session) -> str:
    """
    Generate an invite code no existing couple uses.

    Raises PickmateError if every attempt collided, which only happens when
    the code space is close to exhausted.
    """
    for _ in range(settings.INVITE_CODE_MAX_ATTEMPTS):
        code = "".join(
            secrets.choice(INVITE_CODE_ALPHABET) for _ in range(settings.INVITE_CODE_LENGTH)
        )
        exists = db.query(Couple.id).filter(Couple.invite_code == code).first()
        if not exists:
            return code
        logger.warning(f"Invite code collision on {code}, regenerating")
    raise PickmateError("Could not generate a unique invite code")


def get_couple_for_user(user: User, db: Session) -> Optional[Couple]:
    """Return the couple the user is currently linked to."""
    if not user.couple_id:
        return None
    return db.query(Couple).filter(Couple.id == user.couple_id).first()


def get_partner(couple: Couple, user: User, db: Session) -> Optional[User]:
    """Given one member, return the other member of the couple."""
    partner_id = next((uid for uid in couple.member_ids if uid != user.id), None)
    if partner_id is None:
        return None
    return db.query(User).filter(User.id == partner_id).first()


def _insert_couple(user: User, invite_code: str, db: Session) -> Couple:
    couple = Couple(
        invite_code=invite_code,
        created_by=user.id,
        member_count=1
    )
    db.add(couple)
    db.flush()

    db.add(CoupleMember(couple_id=couple.id, user_id=user.id))
    user.couple_id = couple.id
    db.commit()
    db.refresh(couple)
    return couple


def create_couple(user: User, db: Session) -> Couple:
    """
    Create a couple with the user as its only member and link the user to it.

    Not idempotent: a second call creates another couple and the user ends
    up linked to the newest one. A code taken by a concurrent create between
    generation and commit is regenerated once.
    """
    try:
        couple = _insert_couple(user, generate_invite_code(db), db)
    except IntegrityError:
        db.rollback()
        logger.warning(f"Invite code taken concurrently while user {user.id} created a couple, regenerating")
        couple = _insert_couple(user, generate_invite_code(db), db)

    logger.info(f"User {user.id} created couple {couple.id}")
    return couple


def join_couple(user: User, invite_code: str, db: Session) -> Couple:
    """
    Join the couple identified by an invite code.

    The capacity check and the member append happen in one transaction: the
    member_count increment is conditional on the couple still having a free
    slot, so two concurrent joins cannot both take the last one.
    """
    code = normalize_invite_code(invite_code)
    if len(code) != settings.INVITE_CODE_LENGTH:
        raise ValidationError(f"Invite code must be {settings.INVITE_CODE_LENGTH} characters")

    couple = db.query(Couple).filter(Couple.invite_code == code).first()
    if not couple:
        raise NotFoundError("Invalid invite code")

    if couple.member_count >= MAX_MEMBERS:
        logger.warning(f"User {user.id} tried to join full couple {couple.id}")
        raise FullError("This couple already has two members")
    if user.id in couple.member_ids:
        raise AlreadyMemberError("You are already in this couple")

    result = db.execute(
        update(Couple)
        .where(Couple.id == couple.id, Couple.member_count < MAX_MEMBERS)
        .values(member_count=Couple.member_count + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        logger.warning(f"User {user.id} lost the race for the last slot of couple {couple.id}")
        raise FullError("This couple already has two members")

    try:
        db.add(CoupleMember(couple_id=couple.id, user_id=user.id))
        user.couple_id = couple.id
        db.commit()
    except IntegrityError:
        db.rollback()
        raise AlreadyMemberError("You are already in this couple")

    db.refresh(couple)
    logger.info(f"User {user.id} joined couple {couple.id}")
    return couple


def leave_couple(user: User, db: Session) -> None:
    """
    Remove the user from their couple and clear the user's link.

    When the last member leaves, the couple and every decision it owns
    (with their options, ratings and voters) are deleted in the same
    transaction. The couple row is locked and the remaining members are
    counted from the database, so two members leaving at once still end
    with the couple deleted.
    """
    if not user.couple_id:
        raise NotFoundError("You are not in a couple")

    couple = db.query(Couple).filter(
        Couple.id == user.couple_id
    ).with_for_update().populate_existing().first()
    user.couple_id = None
    if not couple:
        db.commit()
        return

    membership = db.query(CoupleMember).filter(
        CoupleMember.couple_id == couple.id,
        CoupleMember.user_id == user.id
    ).first()
    if membership:
        db.delete(membership)
    db.flush()
    # Membership loaded earlier may be stale; reload it from the rows left
    db.expire(couple)

    remaining = db.query(func.count(CoupleMember.id)).filter(
        CoupleMember.couple_id == couple.id
    ).scalar()

    if remaining == 0:
        decision_count = len(couple.decisions)
        # Users still pointing at this couple (e.g. after re-creating one) lose the stale link
        db.query(User).filter(
            User.couple_id == couple.id
        ).update({User.couple_id: None}, synchronize_session=False)
        db.delete(couple)
        logger.info(f"Couple {couple.id} deleted with {decision_count} decision(s) after last member left")
    else:
        couple.member_count = remaining
        logger.info(f"User {user.id} left couple {couple.id}")

    db.commit()
