"""Pytest configuration and fixtures for YourDay tests."""

import copy
import pathlib
import random
import uuid
from datetime import date, datetime
from typing import Any, Dict, Optional

import pytest

from yourday.helpers import (
    ConfigRemoteStore,
    DataHelper,
    GachaHelper,
    GameStateHelper,
    GardenHelper,
    LoggingHelper,
    PlantHelper,
    PointHelper,
    SessionHelper,
    SyncHelper,
    TaskHelper,
    TimeHelper,
)
from yourday.models import GridPosition, PlacedPlant, PlantBlueprint, PlantTheme, Rarity

DATA_PATH = pathlib.Path(__file__).resolve().parent.parent / "yourday" / "data"


class FakeConfigGroup:
    """In-memory stand-in for a Red Config group registered with a dict default."""

    def __init__(self):
        self.data: Dict[str, Any] = {}

    async def __call__(self):
        return copy.deepcopy(self.data)

    async def set(self, value):
        self.data = copy.deepcopy(value)

    async def all(self):
        return copy.deepcopy(self.data)

    async def get_raw(self, key, default=None):
        return copy.deepcopy(self.data.get(key, default))

    async def set_raw(self, key, value=None):
        self.data[key] = copy.deepcopy(value)

    async def clear_raw(self, key):
        self.data.pop(key, None)


class FakeConfig:
    def __init__(self):
        self.game_state = FakeConfigGroup()
        self.player_stats = FakeConfigGroup()
        self.leaderboard_entries = FakeConfigGroup()


def make_plant(
    blueprint: PlantBlueprint,
    plot_number: int = 1,
    days_left: Optional[int] = None,
    last_watered_on_day: Optional[str] = None,
) -> PlacedPlant:
    return PlacedPlant(
        id=str(uuid.uuid4()),
        blueprint_id=blueprint.id,
        name=blueprint.name,
        position=GridPosition.from_plot_number(plot_number),
        planted_date="2024-05-01T09:00:00-04:00",
        days_left_till_fully_grown=blueprint.initial_days_to_grow if days_left is None else days_left,
        rarity=blueprint.rarity,
        theme=blueprint.theme,
        base_value=blueprint.base_value,
        initial_days_to_grow=blueprint.initial_days_to_grow,
        last_watered_on_day=last_watered_on_day,
    )


def est(year: int, month: int, day: int, hour: int = 12) -> datetime:
    return TimeHelper.EST.localize(datetime(year, month, day, hour))


@pytest.fixture
def logger():
    return LoggingHelper(None)


@pytest.fixture
def fake_config():
    return FakeConfig()


@pytest.fixture
def game_state_helper(fake_config, logger):
    return GameStateHelper(fake_config, logger)


@pytest.fixture
def data_loader(logger):
    loader = DataHelper(DATA_PATH, logger)
    loader.load_all_data()
    return loader


@pytest.fixture
def plant_helper(data_loader):
    return PlantHelper(data_loader.plant_blueprints)


@pytest.fixture
def rng():
    return random.Random(20240501)


@pytest.fixture
def gacha_helper(plant_helper, rng):
    return GachaHelper(plant_helper, rng)


@pytest.fixture
def garden_helper(game_state_helper, plant_helper, gacha_helper, logger):
    return GardenHelper(game_state_helper, plant_helper, gacha_helper, logger)


@pytest.fixture
def task_helper(game_state_helper):
    return TaskHelper(game_state_helper)


@pytest.fixture
def point_helper(garden_helper, task_helper, game_state_helper, logger):
    return PointHelper(garden_helper, task_helper, game_state_helper, logger)


@pytest.fixture
def session_helper():
    return SessionHelper()


@pytest.fixture
def remote_store(fake_config):
    return ConfigRemoteStore(fake_config)


@pytest.fixture
def sync_helper(remote_store, garden_helper, session_helper, logger):
    return SyncHelper(remote_store, garden_helper, session_helper, logger)


@pytest.fixture
def spring_day():
    return date(2024, 4, 15)


@pytest.fixture
def winter_day():
    return date(2024, 1, 15)
