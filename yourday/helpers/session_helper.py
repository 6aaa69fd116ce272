from typing import Dict, Tuple

SessionToken = Tuple[int, int]


class SessionHelper:
    """
    Tracks a per-user session epoch. Async work captures a token before awaiting and checks it
    again before applying results; a reset, deletion or unload in between changes the token and
    the stale result is dropped.
    """

    def __init__(self):
        self._generation = 0
        self._epochs: Dict[int, int] = {}

    def current_epoch(self, user_id: int) -> SessionToken:
        return self._generation, self._epochs.get(user_id, 0)

    def is_current(self, user_id: int, token: SessionToken) -> bool:
        return self.current_epoch(user_id) == token

    def end_session(self, user_id: int) -> SessionToken:
        """Invalidates every in-flight operation for the user and returns the new token."""
        self._epochs[user_id] = self._epochs.get(user_id, 0) + 1
        return self.current_epoch(user_id)

    def clear_all_sessions(self):
        """Invalidates every in-flight operation for every user. To be used on cog unload."""
        self._generation += 1
