from typing import Any, Dict, List

from redbot.core import Config

from .logging_helper import LoggingHelper

# Per-user cap on stored daily summaries. The oldest are dropped first.
DAILY_SUMMARY_LIMIT = 100


class GameStateHelper:
    """
    The single source of truth for all persistent game data.
    Manages the in-memory state and is the sole gatekeeper for disk I/O with Red's Config.
    """

    def __init__(self, config_object: Config, logger: LoggingHelper):
        self.config = config_object
        self.logger = logger
        self.game_state: Dict[str, Any] = {}
        self._apply_defaults()

    def _apply_defaults(self):
        self.game_state.setdefault("users", {})
        self.game_state.setdefault("tasks", {})
        self.game_state.setdefault("daily_summaries", {})
        self.game_state.setdefault("global_state", {})

        defaults = {
            "autosave_interval_seconds": 60,
            "log_channel_id": None,
            "leaderboard_limit": 200,
        }

        settings = self.game_state["global_state"]
        for key, value in defaults.items():
            settings.setdefault(key, value)

    async def load_game_state(self):
        """Loads the entire game state from disk into memory and initializes defaults."""

        self.game_state = await self.config.game_state()
        self._apply_defaults()

        await self.logger.log_to_discord("System Startup: Game state loaded into memory.", "INFO")

    def get_all_user_data(self) -> Dict[str, Dict]:
        return self.game_state.get("users", {})

    def get_user_data(self, user_id: int) -> Dict[str, Any]:
        return self.game_state.get("users", {}).get(str(user_id), {})

    def set_user_data(self, user_id: int, user_dict: Dict[str, Any]):
        self.game_state["users"][str(user_id)] = user_dict

    def delete_user_data(self, user_id: int):
        """Removes every record kept for a user: ledger, tasks and daily summaries."""

        for bucket in ("users", "tasks", "daily_summaries"):
            self.game_state[bucket].pop(str(user_id), None)

    def get_user_tasks(self, user_id: int) -> List[Dict[str, Any]]:
        return self.game_state.get("tasks", {}).get(str(user_id), [])

    def set_user_tasks(self, user_id: int, task_dicts: List[Dict[str, Any]]):
        self.game_state["tasks"][str(user_id)] = task_dicts

    def append_daily_summary(self, user_id: int, summary_dict: Dict[str, Any]):
        summaries = self.game_state["daily_summaries"].setdefault(str(user_id), [])
        summaries.append(summary_dict)
        del summaries[:-DAILY_SUMMARY_LIMIT]

    def get_daily_summaries(self, user_id: int) -> List[Dict[str, Any]]:
        return list(self.game_state.get("daily_summaries", {}).get(str(user_id), []))

    def get_global_state(self, key: str, default: Any = None) -> Any:
        return self.game_state.get("global_state", {}).get(key, default)

    def set_global_state(self, key: str, value: Any):
        self.game_state["global_state"][key] = value

    async def commit_to_disk(self):
        await self.config.game_state.set(self.game_state)
