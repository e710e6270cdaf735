"""
User model for authentication and couple membership.
"""
from sqlalchemy import Column, String, Boolean, Integer, ForeignKey
from sqlalchemy.orm import relationship
from pickmate.db.base import BaseModel


class User(BaseModel):
    """User account; couple_id points at the couple the user is currently linked to."""
    __tablename__ = "users"

    email = Column(String(100), unique=True, nullable=False, index=True)
    display_name = Column(String(50), nullable=False)
    hashed_password = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    couple_id = Column(Integer, ForeignKey("couples.id", ondelete="SET NULL"), nullable=True, index=True)

    # Relationships
    memberships = relationship("CoupleMember", back_populates="user", cascade="all, delete-orphan")
    owned_decisions = relationship("Decision", back_populates="owner", cascade="all, delete-orphan")
