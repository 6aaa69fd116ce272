import time
from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass(frozen=True)
class ActionLock:
    user_id: int
    lock_type: str
    message: str
    created_at: float = field(default_factory=time.time)


class LockHelper:
    """
    In-memory per-user locks held while a command waits on the user, such as the reset confirmation.
    A locked user cannot run other ledger-changing commands. Locks are not persisted.
    """

    def __init__(self):
        self._locks: Dict[int, ActionLock] = {}

    def get_user_lock(self, user_id: int) -> Optional[ActionLock]:
        return self._locks.get(user_id)

    def is_locked(self, user_id: int) -> bool:
        return user_id in self._locks

    def acquire(self, user_id: int, lock_type: str, message: str) -> bool:
        """Locks the user. Returns False, leaving the existing lock alone, if they are already locked."""

        if user_id in self._locks:
            return False
        self._locks[user_id] = ActionLock(user_id=user_id, lock_type=lock_type, message=message)
        return True

    def release(self, user_id: int):
        self._locks.pop(user_id, None)

    def clear_all_locks(self):
        """Removes all active locks. To be used on cog unload."""
        self._locks.clear()
