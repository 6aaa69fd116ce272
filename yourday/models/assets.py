from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Rarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class PlantTheme(str, Enum):
    SPRING = "spring"
    SUMMER = "summer"
    FALL = "fall"
    WINTER = "winter"

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class GridPosition:
    """A garden coordinate. Plot N (1-based) lives at x = N - 1, y = 0."""
    x: int
    y: int = 0

    @classmethod
    def from_plot_number(cls, plot_number: int) -> "GridPosition":
        return cls(x=plot_number - 1, y=0)

    @property
    def plot_number(self) -> int:
        return self.x + 1


@dataclass(frozen=True)
class PlantBlueprint:
    """Represents a single plant definition from plants.json."""
    id: str
    name: str
    rarity: Rarity
    theme: PlantTheme
    initial_days_to_grow: int
    base_value: float
    description: str = ""
    asset_name: str = ""
    icon_name: str = ""
    purchase_cost: Optional[float] = None
