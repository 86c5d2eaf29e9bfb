"""
Unit tests for season standings.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from core.models import ChampionshipStanding
from core.standings import (
    total_points,
    sort_standings,
    apply_points_to_standings,
    next_standing_id,
    find_by_name,
    add_standing,
    merge_standing,
    remove_standing,
    reset_standings,
)


@pytest.fixture
def standings():
    return [
        ChampionshipStanding(1, "Alice", [100, 12]),
        ChampionshipStanding(2, "Bob", [88, 76]),
        ChampionshipStanding(3, "Carol", [0, 64]),
    ]


class TestRanking:

    def test_total_points(self, standings):
        assert total_points(standings[0]) == 112
        assert total_points(ChampionshipStanding(9, "Nobody")) == 0

    def test_sort_by_total_descending(self, standings):
        assert [s.name for s in sort_standings(standings)] == ["Bob", "Alice", "Carol"]

    def test_ties_broken_by_registration_order(self):
        tied = [
            ChampionshipStanding(3, "Late", [50]),
            ChampionshipStanding(1, "Early", [50]),
            ChampionshipStanding(2, "Middle", [50]),
        ]
        assert [s.id for s in sort_standings(tied)] == [1, 2, 3]

    def test_sort_does_not_modify_input(self, standings):
        sort_standings(standings)
        assert [s.id for s in standings] == [1, 2, 3]


class TestApplyPoints:
    """Tests for apply_points_to_standings()."""

    def test_appends_one_entry_each(self, standings):
        updated = apply_points_to_standings(standings, {1: 12, 3: 100})
        by_id = {s.id: s for s in updated}
        assert by_id[1].points_per_competition == [100, 12, 12]
        assert by_id[2].points_per_competition == [88, 76, 0]
        assert by_id[3].points_per_competition == [0, 64, 100]

    def test_result_is_ranked(self, standings):
        updated = apply_points_to_standings(standings, {3: 200})
        assert [s.name for s in updated] == ["Carol", "Bob", "Alice"]

    def test_ignores_unknown_ids(self, standings):
        updated = apply_points_to_standings(standings, {42: 100})
        assert all(len(s.points_per_competition) == 3 for s in updated)

    def test_input_not_modified(self, standings):
        apply_points_to_standings(standings, {1: 5})
        assert standings[0].points_per_competition == [100, 12]

    def test_fractional_points(self):
        updated = apply_points_to_standings([ChampionshipStanding(1, "A", [])], {1: 0.25})
        assert updated[0].total == 0.25


class TestRegistration:
    """Tests for adding, merging and removing participants."""

    def test_next_id_is_max_plus_one(self, standings):
        assert next_standing_id(standings) == 4
        assert next_standing_id([]) == 1
        assert next_standing_id([ChampionshipStanding(7, "X")]) == 8

    def test_find_by_name_is_case_insensitive(self, standings):
        assert find_by_name(standings, "  aLiCe ").id == 1
        assert find_by_name(standings, "Dave") is None

    def test_add_late_joiner_gets_zeros(self, standings):
        updated, error = add_standing(standings, "Dave", 2)
        assert error is None
        assert updated[-1].id == 4
        assert updated[-1].name == "Dave"
        assert updated[-1].points_per_competition == [0, 0]
        assert len(standings) == 3

    def test_add_strips_name(self):
        updated, _ = add_standing([], "  Eve  ", 0)
        assert updated[0].name == "Eve"

    def test_add_duplicate_name_rejected(self, standings):
        updated, error = add_standing(standings, "BOB", 2)
        assert updated is standings
        assert error.code == 'DUPLICATE_NAME'

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_add_blank_name_rejected(self, standings, name):
        updated, error = add_standing(standings, name, 2)
        assert updated is standings
        assert error.code == 'INVALID_NAME'

    def test_merge_pads_points(self, standings):
        updated = merge_standing(standings, ChampionshipStanding(10, "Dave", [5]), 2)
        assert updated[-1].points_per_competition == [5, 0]

    def test_merge_truncates_points(self, standings):
        updated = merge_standing(standings, ChampionshipStanding(10, "Dave", [5, 6, 7]), 2)
        assert updated[-1].points_per_competition == [5, 6]

    def test_merge_existing_id_is_noop(self, standings):
        assert merge_standing(standings, ChampionshipStanding(2, "Someone", []), 2) is standings

    def test_merge_existing_name_is_noop(self, standings):
        assert merge_standing(standings, ChampionshipStanding(10, "carol", []), 2) is standings

    def test_remove(self, standings):
        assert [s.id for s in remove_standing(standings, 2)] == [1, 3]
        assert len(remove_standing(standings, 99)) == 3

    def test_reset_keeps_people_drops_points(self, standings):
        reset = reset_standings(standings)
        assert [(s.id, s.name) for s in reset] == [(1, "Alice"), (2, "Bob"), (3, "Carol")]
        assert all(s.points_per_competition == [] for s in reset)

    def test_stored_names_with_whitespace_still_match(self):
        padded = [ChampionshipStanding(1, "  Alice ", [])]
        assert find_by_name(padded, "alice").id == 1
        updated, error = add_standing(padded, "ALICE", 0)
        assert updated is padded
        assert error.code == 'DUPLICATE_NAME'
        assert merge_standing(padded, ChampionshipStanding(2, "Alice", []), 0) is padded
