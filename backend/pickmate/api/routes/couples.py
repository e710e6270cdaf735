"""
Couple routes: create, join by invite code, leave.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from pickmate.db.session import get_db
from pickmate.models.user import User
from pickmate.schemas.couple import CoupleDetailResponse, CoupleJoin, InviteCodeResponse
from pickmate.schemas.user import PartnerResponse
from pickmate.core.exceptions import NotFoundError
from pickmate.api.dependencies import get_current_user
from pickmate.services import pairing_service

router = APIRouter(prefix="/couples", tags=["couples"])


def _couple_detail(couple, user: User, db: Session) -> CoupleDetailResponse:
    partner = pairing_service.get_partner(couple, user, db)
    return CoupleDetailResponse(
        id=couple.id,
        invite_code=couple.invite_code,
        created_by=couple.created_by,
        member_ids=couple.member_ids,
        created_at=couple.created_at,
        partner=PartnerResponse.model_validate(partner) if partner else None
    )


@router.get("/me", response_model=CoupleDetailResponse)
async def get_my_couple(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get the current user's couple and partner."""
    couple = pairing_service.get_couple_for_user(current_user, db)
    if not couple:
        raise NotFoundError("You are not in a couple")
    return _couple_detail(couple, current_user, db)


@router.post("", response_model=InviteCodeResponse, status_code=status.HTTP_201_CREATED)
async def create_couple(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a couple and get the invite code to share with a partner."""
    couple = pairing_service.create_couple(current_user, db)
    return InviteCodeResponse(couple_id=couple.id, invite_code=couple.invite_code)


@router.post("/join", response_model=CoupleDetailResponse)
async def join_couple(
    payload: CoupleJoin,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Join a partner's couple with their invite code."""
    couple = pairing_service.join_couple(current_user, payload.invite_code, db)
    return _couple_detail(couple, current_user, db)


@router.delete("/me")
async def leave_couple(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Leave the current couple."""
    pairing_service.leave_couple(current_user, db)
    return {"message": "Left couple successfully"}
