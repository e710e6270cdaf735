"""
Main API router that includes all route modules.
"""
from fastapi import APIRouter
from pickmate.api.routes import auth, users, couples, decisions, votes, live

api_router = APIRouter()

# Include all route modules
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(couples.router)
api_router.include_router(decisions.router)
api_router.include_router(votes.router)
api_router.include_router(live.router)
