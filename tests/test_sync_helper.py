"""Tests for remote sync, the leaderboard query and stale-session guards."""

import asyncio

import pytest

from yourday.helpers import ConfigRemoteStore, SessionHelper, SyncHelper
from yourday.models import FailureReason, LedgerDocument, SyncError

from conftest import FakeConfig, FakeConfigGroup

USER = 7007


class FailingStore(ConfigRemoteStore):
    async def push_ledger(self, identity, document):
        raise SyncError("remote unavailable")

    async def pull_ledger(self, identity):
        raise SyncError("remote unavailable")

    async def query_leaderboard(self, order_by, limit):
        raise SyncError("remote unavailable")


class BlockingStore(ConfigRemoteStore):
    """Holds every push and pull until `release` is set."""

    def __init__(self, config_object):
        super().__init__(config_object)
        self.release = asyncio.Event()

    async def push_ledger(self, identity, document):
        await self.release.wait()
        await super().push_ledger(identity, document)

    async def pull_ledger(self, identity):
        await self.release.wait()
        return await super().pull_ledger(identity)


class BrokenGroup(FakeConfigGroup):
    async def set_raw(self, key, value=None):
        raise RuntimeError("disk full")

    async def all(self):
        raise RuntimeError("disk full")


def remote_document(total_points=42.0):
    return LedgerDocument(total_points=total_points, last_evaluated=None, player_level=4, current_xp=5.0,
                          garden_value=999.0, unplaced_plants_inventory={"tulip_c_sp": 3})


class TestPush:
    @pytest.mark.asyncio
    async def test_push_writes_ledger_and_leaderboard_entry(self, sync_helper, fake_config):
        result = await sync_helper.push_ledger(USER, "Sam")

        assert result.success
        assert fake_config.player_stats.data[str(USER)]["totalPoints"] == 1000.0
        assert fake_config.leaderboard_entries.data[str(USER)] == {
            "userID": str(USER), "displayName": "Sam", "playerLevel": 1, "gardenValue": 100.0,
        }

    @pytest.mark.asyncio
    async def test_leaderboard_upsert_keeps_unknown_fields(self, sync_helper, fake_config):
        fake_config.leaderboard_entries.data[str(USER)] = {"userID": str(USER), "displayName": "Old",
                                                           "avatar": "cactus"}
        await sync_helper.push_ledger(USER, "New")

        row = fake_config.leaderboard_entries.data[str(USER)]
        assert row["displayName"] == "New"
        assert row["avatar"] == "cactus"

    @pytest.mark.asyncio
    async def test_failure_is_reported_and_local_state_kept(self, fake_config, garden_helper, session_helper,
                                                            logger):
        helper = SyncHelper(FailingStore(fake_config), garden_helper, session_helper, logger)
        garden_helper.add_points(USER, 50)

        result = await helper.push_ledger(USER, "Sam")

        assert result.reason is FailureReason.SYNC_FAILED
        assert garden_helper.get_ledger_view(USER).total_points == 1050.0
        assert any(level == "WARNING" for _, level in logger.queued_messages)

    @pytest.mark.asyncio
    async def test_config_errors_become_sync_errors(self):
        config = FakeConfig()
        config.player_stats = BrokenGroup()
        store = ConfigRemoteStore(config)

        with pytest.raises(SyncError):
            await store.push_ledger(str(USER), remote_document())

    @pytest.mark.asyncio
    async def test_scheduled_push_runs_in_background(self, sync_helper, fake_config):
        task = sync_helper.schedule_push(USER, "Sam")
        await sync_helper.wait_for_pending()

        assert task.done()
        assert task.result().success
        assert str(USER) in fake_config.player_stats.data

    @pytest.mark.asyncio
    async def test_cancel_pending(self, fake_config, garden_helper, session_helper, logger):
        store = BlockingStore(fake_config)
        helper = SyncHelper(store, garden_helper, session_helper, logger)

        task = helper.schedule_push(USER)
        await asyncio.sleep(0)
        helper.cancel_pending()
        await asyncio.gather(task, return_exceptions=True)

        assert task.cancelled()
        assert fake_config.player_stats.data == {}


class TestPull:
    @pytest.mark.asyncio
    async def test_pull_replaces_local_ledger_and_rederives_value(self, sync_helper, fake_config, garden_helper):
        fake_config.player_stats.data[str(USER)] = remote_document().to_dict()

        result = await sync_helper.pull_ledger(USER)
        ledger = garden_helper.get_ledger_view(USER)

        assert result.success
        assert ledger.total_points == 42.0
        assert ledger.player_level == 4
        assert ledger.garden_value == 100.0
        assert dict(ledger.unplaced_plants_inventory) == {"tulip_c_sp": 3}

    @pytest.mark.asyncio
    async def test_missing_remote_copy_leaves_ledger_alone(self, sync_helper, garden_helper):
        garden_helper.add_points(USER, 5)
        result = await sync_helper.pull_ledger(USER)

        assert result.success and result.value is None
        assert garden_helper.get_ledger_view(USER).total_points == 1005.0

    @pytest.mark.asyncio
    async def test_pull_failure(self, fake_config, garden_helper, session_helper, logger):
        helper = SyncHelper(FailingStore(fake_config), garden_helper, session_helper, logger)
        assert (await helper.pull_ledger(USER)).reason is FailureReason.SYNC_FAILED


class TestStaleSessions:
    @pytest.mark.asyncio
    async def test_pull_completing_after_reset_is_discarded(self, fake_config, garden_helper, session_helper,
                                                            logger):
        fake_config.player_stats.data[str(USER)] = remote_document().to_dict()
        store = BlockingStore(fake_config)
        helper = SyncHelper(store, garden_helper, session_helper, logger)

        pending = asyncio.ensure_future(helper.pull_ledger(USER))
        await asyncio.sleep(0)
        session_helper.end_session(USER)
        store.release.set()
        result = await pending

        assert result.reason is FailureReason.STALE_SESSION
        assert garden_helper.get_ledger_view(USER).total_points == 1000.0

    @pytest.mark.asyncio
    async def test_push_completing_after_unload_is_reported_stale(self, fake_config, garden_helper,
                                                                 session_helper, logger):
        store = BlockingStore(fake_config)
        helper = SyncHelper(store, garden_helper, session_helper, logger)

        pending = asyncio.ensure_future(helper.push_ledger(USER, "Sam"))
        await asyncio.sleep(0)
        session_helper.clear_all_sessions()
        garden_helper.add_points(USER, 250)
        store.release.set()

        assert (await pending).reason is FailureReason.STALE_SESSION
        assert fake_config.player_stats.data[str(USER)]["totalPoints"] == 1250.0
        assert fake_config.leaderboard_entries.data[str(USER)]["displayName"] == "Sam"

    @pytest.mark.asyncio
    async def test_push_held_across_reset_leaves_no_remote_copy(self, fake_config, garden_helper,
                                                                session_helper, logger):
        store = BlockingStore(fake_config)
        helper = SyncHelper(store, garden_helper, session_helper, logger)
        garden_helper.add_points(USER, 5000)

        pending = helper.schedule_push(USER, "Sam")
        await asyncio.sleep(0)
        session_helper.end_session(USER)
        garden_helper.delete_ledger(USER)
        assert (await helper.delete_remote(USER)).success
        store.release.set()

        assert (await pending).reason is FailureReason.STALE_SESSION
        assert fake_config.player_stats.data == {}
        assert fake_config.leaderboard_entries.data == {}
        assert not garden_helper.has_ledger(USER)

    @pytest.mark.asyncio
    async def test_push_scheduled_before_reset_writes_nothing(self, sync_helper, fake_config, garden_helper,
                                                              session_helper):
        garden_helper.add_points(USER, 5000)
        pending = sync_helper.schedule_push(USER, "Sam")
        session_helper.end_session(USER)
        garden_helper.delete_ledger(USER)

        assert (await pending).reason is FailureReason.STALE_SESSION
        assert fake_config.player_stats.data == {}
        assert fake_config.leaderboard_entries.data == {}
        assert not garden_helper.has_ledger(USER)

    def test_tokens_change_per_user_and_globally(self):
        sessions = SessionHelper()
        token = sessions.current_epoch(USER)
        other = sessions.current_epoch(USER + 1)

        sessions.end_session(USER)
        assert not sessions.is_current(USER, token)
        assert sessions.is_current(USER + 1, other)

        sessions.clear_all_sessions()
        assert not sessions.is_current(USER + 1, other)


class TestLeaderboardQuery:
    @pytest.mark.asyncio
    async def test_sorted_descending_and_ranked(self, sync_helper, fake_config):
        fake_config.leaderboard_entries.data = {
            "1": {"userID": "1", "displayName": "A", "playerLevel": 5, "gardenValue": 300.0},
            "2": {"userID": "2", "displayName": "B", "playerLevel": 2, "gardenValue": 900.0},
            str(USER): {"userID": str(USER), "displayName": "Me", "playerLevel": 3, "gardenValue": 500.0},
        }

        by_value = await sync_helper.fetch_leaderboard("gardenValue", 10, USER)
        entries, my_rank = by_value.value
        assert [e.id for e in entries] == ["2", str(USER), "1"]
        assert [e.rank for e in entries] == [1, 2, 3]
        assert my_rank == 2

        by_level = await sync_helper.fetch_leaderboard("playerLevel", 2, USER)
        entries, my_rank = by_level.value
        assert [e.id for e in entries] == ["1", str(USER)]
        assert my_rank == 2

    @pytest.mark.asyncio
    async def test_unknown_sort_field_falls_back_to_garden_value(self, sync_helper, fake_config):
        fake_config.leaderboard_entries.data = {
            "1": {"userID": "1", "displayName": "A", "playerLevel": 5, "gardenValue": 300.0},
            "2": {"userID": "2", "displayName": "B", "playerLevel": 2, "gardenValue": 900.0},
        }
        entries, _ = (await sync_helper.fetch_leaderboard("totalPoints", 10)).value
        assert [e.id for e in entries] == ["2", "1"]

    @pytest.mark.asyncio
    async def test_query_failure(self, fake_config, garden_helper, session_helper, logger):
        config = FakeConfig()
        config.leaderboard_entries = BrokenGroup()
        helper = SyncHelper(ConfigRemoteStore(config), garden_helper, session_helper, logger)

        result = await helper.fetch_leaderboard()
        assert result.reason is FailureReason.SYNC_FAILED

    @pytest.mark.asyncio
    async def test_delete_remote_removes_both_records(self, sync_helper, fake_config):
        await sync_helper.push_ledger(USER, "Sam")
        result = await sync_helper.delete_remote(USER)

        assert result.success
        assert str(USER) not in fake_config.player_stats.data
        assert str(USER) not in fake_config.leaderboard_entries.data
