"""
Shared route dependencies: current user and voter identity.
"""
from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional
from pickmate.core.config import settings
from pickmate.core.security import get_user_id_from_token
from pickmate.db.session import get_db
from pickmate.models.user import User
from pickmate.services.identity_service import get_voter_id, voter_id_for_user

bearer_scheme = HTTPBearer(auto_error=False)


def get_user_from_token(token: Optional[str], db: Session) -> Optional[User]:
    """Resolve an active user from a bearer token."""
    if not token:
        return None
    user_id = get_user_id_from_token(token)
    if user_id is None:
        return None
    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_active:
        return None
    return user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """Current user when a valid token is sent, otherwise None."""
    token = credentials.credentials if credentials else None
    return get_user_from_token(token, db)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    """Current user; 401 without a valid token."""
    token = credentials.credentials if credentials else None
    user = get_user_from_token(token, db)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"}
        )
    return user


async def get_current_voter_id(
    request: Request,
    response: Response,
    current_user: Optional[User] = Depends(get_optional_user)
) -> str:
    """
    Voter id for the public voting link.

    Signed-in users vote as their account. Everyone else gets an anonymous
    id kept in a long-lived cookie, issued on first visit.
    """
    if current_user:
        return voter_id_for_user(current_user)

    cookies = dict(request.cookies)
    voter_id = get_voter_id(cookies)
    if request.cookies.get(settings.VOTER_COOKIE_NAME) != voter_id:
        response.set_cookie(
            key=settings.VOTER_COOKIE_NAME,
            value=voter_id,
            max_age=settings.VOTER_COOKIE_MAX_AGE,
            httponly=True,
            samesite="lax"
        )
    return voter_id
