import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Set

from redbot.core import Config

from .garden_helper import GardenHelper
from .leaderboard_helper import SORTABLE_FIELDS, LeaderboardHelper
from .logging_helper import LoggingHelper
from .session_helper import SessionHelper, SessionToken
from ..models import ActionResult, FailureReason, LeaderboardEntry, LedgerDocument, SyncError


class RemoteStore(ABC):
    """Remote mirror of ledgers plus the shared leaderboard. Implementations raise SyncError on failure."""

    @abstractmethod
    async def push_ledger(self, identity: str, document: LedgerDocument):
        ...

    @abstractmethod
    async def pull_ledger(self, identity: str) -> Optional[LedgerDocument]:
        ...

    @abstractmethod
    async def delete_ledger(self, identity: str):
        ...

    @abstractmethod
    async def upsert_leaderboard_entry(self, entry: LeaderboardEntry):
        ...

    @abstractmethod
    async def delete_leaderboard_entry(self, identity: str):
        ...

    @abstractmethod
    async def query_leaderboard(self, order_by: str, limit: int) -> List[LeaderboardEntry]:
        """Returns entries sorted by `order_by` descending, at most `limit` of them."""
        ...


class ConfigRemoteStore(RemoteStore):
    """
    RemoteStore backed by a dedicated Red Config namespace, shared by every guild the bot is in.
    Expects globals `player_stats={}` and `leaderboard_entries={}` to be registered.
    """

    def __init__(self, config_object: Config):
        self.config = config_object

    async def push_ledger(self, identity: str, document: LedgerDocument):
        try:
            await self.config.player_stats.set_raw(identity, value=document.to_dict())
        except Exception as e:
            raise SyncError(f"Failed to push ledger for {identity}: {e}") from e

    async def pull_ledger(self, identity: str) -> Optional[LedgerDocument]:
        try:
            raw: Optional[Dict[str, Any]] = await self.config.player_stats.get_raw(identity, default=None)
        except Exception as e:
            raise SyncError(f"Failed to pull ledger for {identity}: {e}") from e
        return LedgerDocument.from_dict(raw) if raw else None

    async def delete_ledger(self, identity: str):
        try:
            await self.config.player_stats.clear_raw(identity)
        except Exception as e:
            raise SyncError(f"Failed to delete ledger for {identity}: {e}") from e

    async def upsert_leaderboard_entry(self, entry: LeaderboardEntry):
        try:
            existing = await self.config.leaderboard_entries.get_raw(entry.id, default={})
            merged = dict(existing)
            merged.update(entry.to_dict())
            await self.config.leaderboard_entries.set_raw(entry.id, value=merged)
        except Exception as e:
            raise SyncError(f"Failed to update leaderboard entry for {entry.id}: {e}") from e

    async def delete_leaderboard_entry(self, identity: str):
        try:
            await self.config.leaderboard_entries.clear_raw(identity)
        except Exception as e:
            raise SyncError(f"Failed to delete leaderboard entry for {identity}: {e}") from e

    async def query_leaderboard(self, order_by: str, limit: int) -> List[LeaderboardEntry]:
        try:
            raw_entries: Dict[str, Dict[str, Any]] = await self.config.leaderboard_entries.all()
        except Exception as e:
            raise SyncError(f"Failed to query leaderboard: {e}") from e

        rows = sorted(raw_entries.values(), key=lambda row: row.get(order_by, 0), reverse=True)
        return [LeaderboardEntry.from_dict(row) for row in rows[:max(0, limit)]]


class SyncHelper:
    """
    Mirrors local ledgers to the remote store. Local state is always authoritative: pushes are
    fire-and-forget, failures are logged and reported, and local state is never rolled back. There is
    no automatic retry.
    """

    def __init__(
        self,
        remote_store: RemoteStore,
        garden_helper: GardenHelper,
        session_helper: SessionHelper,
        logger: LoggingHelper,
    ):
        self.remote_store = remote_store
        self.garden_helper = garden_helper
        self.session_helper = session_helper
        self.logger = logger
        self._pending_tasks: Set[asyncio.Task] = set()

    async def push_ledger(
        self,
        user_id: int,
        display_name: Optional[str] = None,
        token: Optional[SessionToken] = None,
    ) -> ActionResult:
        """
        Pushes the user's ledger and leaderboard entry as they are right now.

        Nothing is written once the session behind `token` has ended. A write the store was already
        holding when the session ended may still land, so in that case the remote copy is brought back
        in line with the current local state.
        """

        if token is None:
            token = self.session_helper.current_epoch(user_id)

        if not self.session_helper.is_current(user_id, token):
            await self.logger.log_to_discord(f"Sync: Dropped push for user {user_id}, their session ended.", "DEBUG")
            return ActionResult.fail(FailureReason.STALE_SESSION, "The session changed before syncing.")

        view = self.garden_helper.get_ledger_view(user_id)
        document = LedgerDocument.from_ledger(view)
        entry = LeaderboardHelper.project_entry(view, display_name)

        try:
            await self.remote_store.push_ledger(str(user_id), document)
            if self.session_helper.is_current(user_id, token):
                await self.remote_store.upsert_leaderboard_entry(entry)
        except SyncError as e:
            await self.logger.log_to_discord(f"Sync: Push failed for user {user_id}: {e}", "WARNING")
            return ActionResult.fail(FailureReason.SYNC_FAILED, "Your garden could not be synced right now.")

        if not self.session_helper.is_current(user_id, token):
            await self.logger.log_to_discord(f"Sync: Push for user {user_id} completed after their session ended.",
                                             "DEBUG")
            await self._mirror_local_state(user_id, display_name)
            return ActionResult.fail(FailureReason.STALE_SESSION, "The session changed while syncing.")

        return ActionResult.ok("Garden synced.", entry)

    async def _mirror_local_state(self, user_id: int, display_name: Optional[str]):
        """Overwrites whatever a stale push left behind with the local ledger, or removes it if there is none."""

        try:
            if self.garden_helper.has_ledger(user_id):
                view = self.garden_helper.get_ledger_view(user_id)
                await self.remote_store.push_ledger(str(user_id), LedgerDocument.from_ledger(view))
                await self.remote_store.upsert_leaderboard_entry(LeaderboardHelper.project_entry(view, display_name))
            else:
                await self.remote_store.delete_ledger(str(user_id))
                await self.remote_store.delete_leaderboard_entry(str(user_id))
        except SyncError as e:
            await self.logger.log_to_discord(f"Sync: Could not clean up after stale push for user {user_id}: {e}",
                                             "WARNING")

    def schedule_push(self, user_id: int, display_name: Optional[str] = None) -> asyncio.Task:
        """Starts a push in the background and returns immediately. The push belongs to the current session."""

        token = self.session_helper.current_epoch(user_id)
        task = asyncio.create_task(self.push_ledger(user_id, display_name, token))
        self._pending_tasks.add(task)
        task.add_done_callback(self._pending_tasks.discard)
        return task

    async def pull_ledger(self, user_id: int) -> ActionResult:
        """Loads the remote copy and, if the session is still current, replaces the local ledger with it."""

        token = self.session_helper.current_epoch(user_id)

        try:
            document = await self.remote_store.pull_ledger(str(user_id))
        except SyncError as e:
            await self.logger.log_to_discord(f"Sync: Pull failed for user {user_id}: {e}", "WARNING")
            return ActionResult.fail(FailureReason.SYNC_FAILED, "Your garden could not be loaded right now.")

        if not self.session_helper.is_current(user_id, token):
            await self.logger.log_to_discord(f"Sync: Discarding stale pull for user {user_id}.", "DEBUG")
            return ActionResult.fail(FailureReason.STALE_SESSION, "The session changed while loading.")

        if document is None:
            return ActionResult.ok("No remote garden found.", None)

        self.garden_helper.replace_ledger(user_id, document.to_ledger(user_id))
        return ActionResult.ok("Garden restored from the remote copy.", self.garden_helper.get_ledger_view(user_id))

    async def delete_remote(self, user_id: int) -> ActionResult:
        try:
            await self.remote_store.delete_ledger(str(user_id))
            await self.remote_store.delete_leaderboard_entry(str(user_id))
        except SyncError as e:
            await self.logger.log_to_discord(f"Sync: Remote delete failed for user {user_id}: {e}", "WARNING")
            return ActionResult.fail(FailureReason.SYNC_FAILED, "The remote copy could not be deleted.")
        return ActionResult.ok("Remote copy deleted.")

    async def fetch_leaderboard(
        self,
        order_by: str = "gardenValue",
        limit: int = 200,
        current_user_id: Optional[int] = None,
    ) -> ActionResult:
        """Queries the store and ranks the result. The value is (entries, current user's rank or None)."""

        if order_by not in SORTABLE_FIELDS:
            order_by = "gardenValue"

        token = self.session_helper.current_epoch(current_user_id) if current_user_id is not None else None

        try:
            entries = await self.remote_store.query_leaderboard(order_by, limit)
        except SyncError as e:
            await self.logger.log_to_discord(f"Sync: Leaderboard query failed: {e}", "WARNING")
            return ActionResult.fail(FailureReason.SYNC_FAILED, "Failed to load the leaderboard.")

        if token is not None and not self.session_helper.is_current(current_user_id, token):
            return ActionResult.fail(FailureReason.STALE_SESSION, "The session changed while loading.")

        return ActionResult.ok(f"Loaded {len(entries)} entries.",
                               LeaderboardHelper.assign_ranks(entries, current_user_id))

    async def wait_for_pending(self):
        if self._pending_tasks:
            await asyncio.gather(*list(self._pending_tasks), return_exceptions=True)

    def cancel_pending(self):
        for task in list(self._pending_tasks):
            task.cancel()
        self._pending_tasks.clear()
