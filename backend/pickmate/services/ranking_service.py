"""
Ranking service: aggregates star ratings into a ranked result.
"""
from sqlalchemy.orm import Session
from typing import Dict, Iterable, List, Optional
from pickmate.models.decision import Option
from pickmate.models.rating import Rating


class RankedOption:
    """Aggregate stars for a single option."""
    def __init__(self, option, total_stars: int, voter_count: int, rank: int = 0):
        self.option = option
        self.total_stars = total_stars
        self.voter_count = voter_count
        self.avg_stars = total_stars / voter_count if voter_count > 0 else 0
        self.rank = rank

    def to_dict(self) -> dict:
        return {
            "option_id": self.option.id,
            "title": self.option.title,
            "position": self.option.position,
            "rank": self.rank,
            "total_stars": self.total_stars,
            "voter_count": self.voter_count,
            "avg_stars": self.avg_stars,
        }


class RankingResult:
    """Ordered ranking of a decision's options."""
    def __init__(self, decision_id: int, ranking: List[RankedOption], total_voters: int):
        self.decision_id = decision_id
        self.ranking = ranking
        self.total_voters = total_voters

    @property
    def total_stars(self) -> int:
        return sum(r.total_stars for r in self.ranking)

    @property
    def winner(self) -> Optional[RankedOption]:
        """First-ranked option, or None when nobody has cast a star."""
        if self.ranking and self.ranking[0].total_stars > 0:
            return self.ranking[0]
        return None

    def to_dict(self) -> dict:
        winner = self.winner
        return {
            "decision_id": self.decision_id,
            "ranking": [r.to_dict() for r in self.ranking],
            "winner_id": winner.option.id if winner else None,
            "total_stars": self.total_stars,
            "total_voters": self.total_voters,
        }


def rank_options(options: Iterable, ratings: Iterable, decision_id: int = None) -> RankingResult:
    """
    Rank options by total stars received.

    Options are ordered by total stars, highest first. Ties keep insertion
    order (position, then id), so identical inputs always produce the same
    ranking. Ratings that reference an option not in ``options`` are ignored.

    Args:
        options: Objects with ``id``, ``title`` and ``position`` attributes
        ratings: Objects with ``option_id``, ``voter_id`` and ``stars`` attributes
        decision_id: Decision the ranking belongs to (informational)
    """
    ordered = sorted(options, key=lambda o: (o.position or 0, o.id))

    totals: Dict[int, int] = {o.id: 0 for o in ordered}
    counts: Dict[int, int] = {o.id: 0 for o in ordered}
    voters = set()

    for rating in ratings:
        if rating.option_id not in totals:
            continue
        totals[rating.option_id] += rating.stars
        counts[rating.option_id] += 1
        voters.add(rating.voter_id)

    aggregates = [RankedOption(o, totals[o.id], counts[o.id]) for o in ordered]

    # sorted() is stable: equal totals stay in insertion order
    aggregates = sorted(aggregates, key=lambda a: a.total_stars, reverse=True)
    for index, aggregate in enumerate(aggregates):
        aggregate.rank = index + 1

    return RankingResult(decision_id, aggregates, len(voters))


def build_results(decision_id: int, db: Session) -> RankingResult:
    """Load a decision's options and ratings and rank them."""
    options = db.query(Option).filter(Option.decision_id == decision_id).all()
    ratings = db.query(Rating).filter(Rating.decision_id == decision_id).all()
    return rank_options(options, ratings, decision_id=decision_id)
