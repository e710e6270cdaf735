"""Models package - Import all models for SQLAlchemy registration."""
from pickmate.models.user import User
from pickmate.models.couple import Couple, CoupleMember
from pickmate.models.decision import Decision, DecisionStatus, DecisionCategory, Option
from pickmate.models.rating import Rating, Voter

__all__ = [
    "User",
    "Couple",
    "CoupleMember",
    "Decision",
    "DecisionStatus",
    "DecisionCategory",
    "Option",
    "Rating",
    "Voter",
]
