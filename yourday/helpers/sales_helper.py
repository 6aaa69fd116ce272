import math
from datetime import date
from typing import Iterable, Optional

from ..models import PlacedPlant
from .time_helper import TimeHelper

BASE_GARDEN_VALUE = 100.0
SALE_MULTIPLIER = 1.5
SEASONAL_BONUS_MULTIPLIER = 1.5


def round_half_up(value: float) -> float:
    """Rounds to the nearest whole number, halves away from zero."""

    return float(math.floor(abs(value) + 0.5)) * (1 if value >= 0 else -1)


class SalesHelper:
    """
    A helper class for plant valuation: the sale price paid when a grown plant is sold,
    and the seasonal dynamic value that feeds garden value.

    The two 1.5x factors are independent. A sale always pays base_value * 1.5, while a grown
    plant in its season contributes round(base_value * 1.5) to garden value and an
    out-of-season one contributes round(base_value).
    """

    @staticmethod
    def get_sale_price(plant: PlacedPlant) -> float:
        return plant.base_value * SALE_MULTIPLIER

    @staticmethod
    def is_seasonal_bonus_active(plant: PlacedPlant, on_date: Optional[date] = None) -> bool:
        if not plant.is_fully_grown:
            return False
        current_season = TimeHelper.season_for(on_date or TimeHelper.today())
        return plant.theme == current_season

    @staticmethod
    def get_dynamic_value(plant: PlacedPlant, on_date: Optional[date] = None) -> float:
        if not plant.is_fully_grown:
            return plant.base_value

        multiplier = SEASONAL_BONUS_MULTIPLIER if SalesHelper.is_seasonal_bonus_active(plant, on_date) else 1.0
        return round_half_up(plant.base_value * multiplier)

    @staticmethod
    def calculate_garden_value(plants: Iterable[PlacedPlant], on_date: Optional[date] = None) -> float:
        return BASE_GARDEN_VALUE + sum(SalesHelper.get_dynamic_value(p, on_date) for p in plants)
