"""
Tests for the rating ledger.
"""
import pytest
from pickmate.core.exceptions import ValidationError, NotFoundError
from pickmate.models.decision import DecisionStatus
from pickmate.models.rating import Rating
from pickmate.services import rating_service
from pickmate.services.decision_service import create_decision, update_status
from pickmate.services.ranking_service import build_results


@pytest.fixture
def decision(db, make_user):
    return create_decision(
        make_user(), "Dinner", options=[{"title": "Pasta"}, {"title": "Curry"}], db=db
    )


def test_same_rating_twice_leaves_one_row(db, decision):
    option = decision.options[0]

    rating_service.set_rating(decision.id, option.id, "v1", 3, db)
    rating_service.set_rating(decision.id, option.id, "v1", 3, db)

    rows = db.query(Rating).filter(
        Rating.decision_id == decision.id,
        Rating.option_id == option.id,
        Rating.voter_id == "v1"
    ).all()
    assert len(rows) == 1
    assert rows[0].stars == 3


def test_rerating_replaces_stars(db, decision):
    option = decision.options[0]

    rating_service.set_rating(decision.id, option.id, "v1", 1, db)
    rating_service.set_rating(decision.id, option.id, "v1", 3, db)

    assert rating_service.get_user_rating("v1", option.id, db) == 3
    results = build_results(decision.id, db)
    top = results.ranking[0]
    assert top.option.id == option.id
    assert top.total_stars == 3
    assert top.voter_count == 1


def test_voters_rate_independently(db, decision):
    pasta, curry = decision.options

    rating_service.set_rating(decision.id, pasta.id, "v1", 1, db)
    rating_service.set_rating(decision.id, curry.id, "v1", 3, db)
    rating_service.set_rating(decision.id, pasta.id, "v2", 2, db)

    assert rating_service.get_voter_ratings(decision.id, "v1", db) == {pasta.id: 1, curry.id: 3}
    assert rating_service.get_voter_ratings(decision.id, "v2", db) == {pasta.id: 2}
    assert len(rating_service.list_ratings(decision.id, db)) == 3


def test_unrated_option_is_zero(db, decision):
    assert rating_service.get_user_rating("nobody", decision.options[1].id, db) == 0
    assert rating_service.get_user_rating("nobody", 12345, db) == 0


@pytest.mark.parametrize("stars", [0, 4, -1, True, "3", 2.5, None])
def test_stars_out_of_range(db, decision, stars):
    with pytest.raises(ValidationError):
        rating_service.set_rating(decision.id, decision.options[0].id, "v1", stars, db)

    assert rating_service.list_ratings(decision.id, db) == []


def test_blank_voter_id(db, decision):
    with pytest.raises(ValidationError):
        rating_service.set_rating(decision.id, decision.options[0].id, "  ", 2, db)


def test_option_must_belong_to_decision(db, make_user, decision):
    other = create_decision(make_user(), "Other", options=[{"title": "x"}], db=db)

    with pytest.raises(NotFoundError):
        rating_service.set_rating(decision.id, other.options[0].id, "v1", 2, db)


def test_unknown_decision(db):
    with pytest.raises(NotFoundError):
        rating_service.set_rating(999, 1, "v1", 2, db)


def test_closed_decision_rejects_votes(db, decision):
    update_status(decision, DecisionStatus.CLOSED, db)

    with pytest.raises(ValidationError):
        rating_service.set_rating(decision.id, decision.options[0].id, "v1", 2, db)


def test_rating_marks_voter_in_progress(db, decision):
    rating_service.set_rating(decision.id, decision.options[0].id, "v1", 2, db)

    voter = rating_service.get_voter(decision.id, "v1", db)
    assert voter is not None
    assert voter.completed is False


def test_mark_completed_is_idempotent(db, decision):
    rating_service.set_rating(decision.id, decision.options[0].id, "v1", 2, db)

    first = rating_service.mark_completed(decision.id, "v1", db)
    second = rating_service.mark_completed(decision.id, "v1", db)

    assert first.id == second.id
    assert second.completed is True


def test_mark_completed_without_ratings(db, decision):
    voter = rating_service.mark_completed(decision.id, "v9", db)

    assert voter.completed is True
    assert rating_service.get_voter_ratings(decision.id, "v9", db) == {}


def test_new_rating_reopens_completed_voter(db, decision):
    rating_service.set_rating(decision.id, decision.options[0].id, "v1", 2, db)
    rating_service.mark_completed(decision.id, "v1", db)

    rating_service.set_rating(decision.id, decision.options[1].id, "v1", 1, db)

    assert rating_service.get_voter(decision.id, "v1", db).completed is False
