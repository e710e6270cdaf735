"""
Couple model pairing two users through an invite code.
"""
from sqlalchemy import Column, String, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from pickmate.core.config import settings
from pickmate.db.base import BaseModel


class Couple(BaseModel):
    """A pairing of at most two users that scopes shared decisions."""
    __tablename__ = "couples"

    invite_code = Column(String(settings.INVITE_CODE_LENGTH), unique=True, nullable=False, index=True)
    created_by = Column(Integer, nullable=False)
    member_count = Column(Integer, default=0, nullable=False)  # Mirrors len(members); guarded by conditional updates

    # Relationships
    members = relationship(
        "CoupleMember",
        back_populates="couple",
        cascade="all, delete-orphan",
        order_by="CoupleMember.id"
    )
    decisions = relationship("Decision", back_populates="couple", cascade="all, delete-orphan")

    @property
    def member_ids(self):
        return [m.user_id for m in self.members]


class CoupleMember(BaseModel):
    """Junction table for Couple and User membership."""
    __tablename__ = "couple_members"
    __table_args__ = (
        UniqueConstraint("couple_id", "user_id", name="uq_couple_member"),
    )

    couple_id = Column(Integer, ForeignKey("couples.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Relationships
    couple = relationship("Couple", back_populates="members")
    user = relationship("User", back_populates="memberships")
