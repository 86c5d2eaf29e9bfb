"""
Unit tests for the data models (Entrant, Match, ChampionshipStanding).
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from core.models import Entrant, Match, ChampionshipStanding, ValidationError, same_entrant


class TestEntrant:
    """Tests for the Entrant model."""

    def test_entrant_defaults(self):
        """An entrant has no score and no seed until qualification."""
        entrant = Entrant(id=1, name="Alice")
        assert entrant.score is None
        assert entrant.seed == 0

    def test_entrant_replace_leaves_original(self):
        """replace() returns a copy with the changes applied."""
        entrant = Entrant(id=1, name="Alice", score=10)
        seeded = entrant.replace(seed=3)
        assert seeded.seed == 3
        assert seeded.score == 10
        assert entrant.seed == 0

    def test_entrant_dict_shape(self):
        """Entrants serialise to the id/name/score/seed shape."""
        entrant = Entrant(id=7, name="Bob", score=None, seed=2)
        assert entrant.to_dict() == {'id': 7, 'name': 'Bob', 'score': None, 'seed': 2}
        assert Entrant.from_dict(entrant.to_dict()) == entrant

    def test_same_entrant_compares_ids(self):
        """Identity is the id, not the object."""
        assert same_entrant(Entrant(1, "A", seed=1), Entrant(1, "A", seed=2))
        assert not same_entrant(Entrant(1, "A"), None)
        assert not same_entrant(None, None)

    def test_entrant_repr(self):
        assert "Alice" in repr(Entrant(id=1, name="Alice"))


class TestMatch:
    """Tests for the Match model."""

    def test_pending_match(self):
        """A match with two entrants and no winner is playable."""
        match = Match(0, 0, 0, Entrant(1, "A", seed=1), Entrant(2, "B", seed=2))
        assert not match.is_decided
        assert match.is_playable
        assert match.loser() is None

    def test_match_with_empty_slot_is_not_playable(self):
        match = Match(0, 1, 0, Entrant(1, "A", seed=1), None)
        assert not match.is_playable

    def test_loser_of_decided_match(self):
        a, b = Entrant(1, "A", seed=1), Entrant(2, "B", seed=2)
        match = Match(0, 0, 0, a, b, winner=b)
        assert match.loser() == a

    def test_loser_of_bye_is_none(self):
        a = Entrant(1, "A", seed=1)
        match = Match(0, 0, 0, a, None, winner=a)
        assert match.loser() is None

    def test_slot_entrant(self):
        a, b = Entrant(1, "A", seed=1), Entrant(2, "B", seed=2)
        match = Match(0, 0, 0, a, b)
        assert match.slot_entrant(2) is b
        assert match.slot_entrant(3) is None

    def test_match_dict_round_trip(self):
        """Matches use the camelCase wire shape with embedded entrants."""
        a, b = Entrant(1, "A", 50, 1), Entrant(2, "B", 40, 2)
        match = Match(4, 1, 0, a, b, winner=a, next_match_id=6)
        data = match.to_dict()
        assert data['roundIndex'] == 1
        assert data['matchIndex'] == 0
        assert data['nextMatchId'] == 6
        assert data['winner'] == a.to_dict()
        assert Match.from_dict(data) == match


class TestChampionshipStanding:
    """Tests for the ChampionshipStanding model."""

    def test_total(self):
        standing = ChampionshipStanding(1, "A", [12, 0.5, 100])
        assert standing.total == 112.5

    def test_dict_round_trip(self):
        standing = ChampionshipStanding(3, "C", [1, 2])
        assert standing.to_dict() == {'id': 3, 'name': 'C', 'pointsPerCompetition': [1, 2]}
        assert ChampionshipStanding.from_dict(standing.to_dict()) == standing

    def test_points_list_is_copied(self):
        points = [1, 2]
        standing = ChampionshipStanding(1, "A", points)
        points.append(3)
        assert standing.points_per_competition == [1, 2]


class TestValidationError:

    def test_validation_error_is_a_value(self):
        error = ValidationError('MIN_PARTICIPANTS', 'too few')
        assert error.code == 'MIN_PARTICIPANTS'
        assert not isinstance(error, Exception)
        assert 'MIN_PARTICIPANTS' in repr(error)
