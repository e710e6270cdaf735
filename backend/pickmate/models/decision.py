"""
Decision and option models.
"""
from sqlalchemy import Column, String, Text, Integer, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from pickmate.db.base import BaseModel
import enum


class DecisionStatus(str, enum.Enum):
    """Decision status enumeration."""
    OPEN = "open"
    CLOSED = "closed"
    ARCHIVED = "archived"


class DecisionCategory(str, enum.Enum):
    """Decision category enumeration."""
    FOOD = "food"
    MOVIE = "movie"
    ACTIVITY = "activity"
    TRAVEL = "travel"
    SHOPPING = "shopping"
    OTHER = "other"


class Decision(BaseModel):
    """A named choice owned by a couple, or by a single user without a couple."""
    __tablename__ = "decisions"

    couple_id = Column(Integer, ForeignKey("couples.id", ondelete="CASCADE"), nullable=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    title = Column(String(200), nullable=False)
    category = Column(SQLEnum(DecisionCategory), default=DecisionCategory.OTHER, nullable=False)
    status = Column(SQLEnum(DecisionStatus), default=DecisionStatus.OPEN, nullable=False)

    # Relationships
    couple = relationship("Couple", back_populates="decisions")
    owner = relationship("User", back_populates="owned_decisions")
    options = relationship(
        "Option",
        back_populates="decision",
        cascade="all, delete-orphan",
        order_by="Option.position"
    )
    ratings = relationship("Rating", back_populates="decision", cascade="all, delete-orphan")
    voters = relationship("Voter", back_populates="decision", cascade="all, delete-orphan")


class Option(BaseModel):
    """One candidate choice within a decision."""
    __tablename__ = "options"

    decision_id = Column(Integer, ForeignKey("decisions.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    url = Column(String(2048), nullable=False, default="")
    image_url = Column(String(2048), nullable=False, default="")
    price = Column(String(50), nullable=False, default="")
    position = Column(Integer, nullable=False, default=0)  # Insertion index, drives display order and tie-break

    # Relationships
    decision = relationship("Decision", back_populates="options")
    ratings = relationship("Rating", back_populates="option", cascade="all, delete-orphan")
