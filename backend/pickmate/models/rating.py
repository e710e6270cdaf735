"""
Rating and voter models for the one-vote-per-voter ledger.
"""
from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from pickmate.db.base import BaseModel


class Rating(BaseModel):
    """A 1-3 star score one voter gives one option."""
    __tablename__ = "ratings"
    __table_args__ = (
        UniqueConstraint("decision_id", "option_id", "voter_id", name="uq_rating_voter_option"),
        CheckConstraint("stars >= 1 AND stars <= 3", name="ck_rating_stars"),
    )

    decision_id = Column(Integer, ForeignKey("decisions.id", ondelete="CASCADE"), nullable=False, index=True)
    option_id = Column(Integer, ForeignKey("options.id", ondelete="CASCADE"), nullable=False, index=True)
    voter_id = Column(String(64), nullable=False, index=True)  # Account id or anonymous device id
    stars = Column(Integer, nullable=False)

    # Relationships
    decision = relationship("Decision", back_populates="ratings")
    option = relationship("Option", back_populates="ratings")


class Voter(BaseModel):
    """Progress of one voter through a decision's voting flow."""
    __tablename__ = "voters"
    __table_args__ = (
        UniqueConstraint("decision_id", "voter_id", name="uq_voter_decision"),
    )

    decision_id = Column(Integer, ForeignKey("decisions.id", ondelete="CASCADE"), nullable=False, index=True)
    voter_id = Column(String(64), nullable=False, index=True)
    completed = Column(Boolean, default=False, nullable=False)

    # Relationships
    decision = relationship("Decision", back_populates="voters")
