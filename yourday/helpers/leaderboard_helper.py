import dataclasses
from typing import List, Optional, Sequence, Tuple

from ..models import LeaderboardEntry, PlayerLedgerView

DEFAULT_DISPLAY_NAME = "Anonymous"
SORTABLE_FIELDS = ("gardenValue", "playerLevel")


class LeaderboardHelper:
    """Projects ledgers into publishable leaderboard entries. Sorting is left to the store."""

    @staticmethod
    def project_entry(ledger: PlayerLedgerView, display_name: Optional[str] = None) -> LeaderboardEntry:
        return LeaderboardEntry(
            id=str(ledger.user_id),
            display_name=display_name or DEFAULT_DISPLAY_NAME,
            player_level=ledger.player_level,
            garden_value=ledger.garden_value,
        )

    @staticmethod
    def assign_ranks(
        entries: Sequence[LeaderboardEntry],
        current_user_id: Optional[int] = None,
    ) -> Tuple[List[LeaderboardEntry], Optional[int]]:
        """Numbers an already-sorted list from 1 and returns the current user's rank if present."""

        ranked: List[LeaderboardEntry] = []
        current_rank = None
        for i, entry in enumerate(entries):
            ranked_entry = dataclasses.replace(entry, rank=i + 1)
            ranked.append(ranked_entry)
            if current_user_id is not None and entry.id == str(current_user_id):
                current_rank = ranked_entry.rank
        return ranked, current_rank
