"""Tests for leaderboard projection and ranking."""

from yourday.helpers import LeaderboardHelper
from yourday.models import LeaderboardEntry

USER = 5005


class TestProjection:
    def test_projects_level_and_garden_value(self, garden_helper):
        garden_helper.add_xp(USER, 100)
        entry = LeaderboardHelper.project_entry(garden_helper.get_ledger_view(USER), "Sam")

        assert entry == LeaderboardEntry(id=str(USER), display_name="Sam", player_level=2, garden_value=100.0)

    def test_missing_display_name_is_anonymous(self, garden_helper):
        entry = LeaderboardHelper.project_entry(garden_helper.get_ledger_view(USER), None)
        assert entry.display_name == "Anonymous"
        assert LeaderboardHelper.project_entry(garden_helper.get_ledger_view(USER), "").display_name == "Anonymous"

    def test_wire_shape_never_contains_rank(self):
        entry = LeaderboardEntry(id="1", display_name="A", player_level=3, garden_value=450.0, rank=1)
        assert entry.to_dict() == {"userID": "1", "displayName": "A", "playerLevel": 3, "gardenValue": 450.0}


class TestRanks:
    def test_ranks_follow_input_order(self):
        entries = [
            LeaderboardEntry(id="9", display_name="Top", player_level=5, garden_value=900.0),
            LeaderboardEntry(id="5005", display_name="Me", player_level=2, garden_value=400.0),
            LeaderboardEntry(id="3", display_name="Low", player_level=1, garden_value=100.0),
        ]

        ranked, my_rank = LeaderboardHelper.assign_ranks(entries, USER)

        assert [e.rank for e in ranked] == [1, 2, 3]
        assert my_rank == 2
        assert entries[0].rank is None

    def test_absent_user_has_no_rank(self):
        ranked, my_rank = LeaderboardHelper.assign_ranks(
            [LeaderboardEntry(id="9", display_name="Top", player_level=5, garden_value=900.0)], USER)
        assert ranked[0].rank == 1
        assert my_rank is None

    def test_empty_board(self):
        assert LeaderboardHelper.assign_ranks([], USER) == ([], None)
