import random
from typing import List, Optional, Sequence, Tuple

from ..models import PlantBlueprint, PlantTheme, Rarity
from .plant_helper import PlantHelper

# Cumulative upper bounds on a roll in [0, 100).
STANDARD_RARITY_TABLE: Tuple[Tuple[float, Rarity], ...] = (
    (60.0, Rarity.COMMON),
    (85.0, Rarity.UNCOMMON),
    (95.0, Rarity.RARE),
    (99.0, Rarity.EPIC),
    (100.0, Rarity.LEGENDARY),
)

GUARANTEED_RARITY_TABLE: Tuple[Tuple[float, Rarity], ...] = (
    (60.0, Rarity.RARE),
    (90.0, Rarity.EPIC),
    (100.0, Rarity.LEGENDARY),
)

GUARANTEED_BATCH_SIZE = 10


class GachaHelper:
    """Weighted-random plant draws against the catalog. Pure apart from the injected RNG."""

    def __init__(self, plant_helper: PlantHelper, rng: Optional[random.Random] = None):
        self.plant_helper = plant_helper
        self.rng = rng or random.Random()

    @staticmethod
    def rarity_for_roll(roll: float, table: Sequence[Tuple[float, Rarity]] = STANDARD_RARITY_TABLE) -> Rarity:
        for upper_bound, rarity in table:
            if roll < upper_bound:
                return rarity
        return table[-1][1]

    def roll_rarity(self, guaranteed: bool = False) -> Rarity:
        roll = self.rng.random() * 100.0
        table = GUARANTEED_RARITY_TABLE if guaranteed else STANDARD_RARITY_TABLE
        return self.rarity_for_roll(roll, table)

    def pick_blueprint(self, theme: PlantTheme, rarity: Rarity) -> Optional[PlantBlueprint]:
        """
        Picks a blueprint of the given theme and rarity. When that cell is empty, falls back to a
        common of the theme, then to any blueprint of the theme. Returns None if the theme is empty.
        """

        candidates = self.plant_helper.get_blueprints_by_theme_and_rarity(theme, rarity)
        if not candidates:
            candidates = self.plant_helper.get_blueprints_by_theme_and_rarity(theme, Rarity.COMMON)
        if not candidates:
            candidates = self.plant_helper.get_blueprints_by_theme(theme)
        if not candidates:
            return None

        return self.rng.choice(candidates)

    def pull(self, theme: PlantTheme, count: int, guarantee_last_slot_rare_or_better: bool = False) -> List[PlantBlueprint]:
        """Draws `count` blueprints. Draws that produce no plant are left out of the result."""

        results: List[PlantBlueprint] = []
        for i in range(count):
            guaranteed = (
                guarantee_last_slot_rare_or_better
                and count == GUARANTEED_BATCH_SIZE
                and i == count - 1
            )
            blueprint = self.pick_blueprint(theme, self.roll_rarity(guaranteed))
            if blueprint is not None:
                results.append(blueprint)
        return results
