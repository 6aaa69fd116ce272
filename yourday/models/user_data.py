from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Tuple

from .assets import GridPosition, PlantTheme, Rarity


@dataclass
class PlacedPlant:
    """Represents an instance of a blueprint planted in a garden plot."""
    id: str
    blueprint_id: str
    name: str
    position: GridPosition
    planted_date: str
    days_left_till_fully_grown: int
    rarity: Rarity
    theme: PlantTheme
    base_value: float
    initial_days_to_grow: int
    last_watered_on_day: Optional[str] = None
    asset_name: str = ""
    icon_name: str = ""

    @property
    def is_fully_grown(self) -> bool:
        return self.days_left_till_fully_grown <= 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "blueprint_id": self.blueprint_id,
            "name": self.name,
            "position": {"x": self.position.x, "y": self.position.y},
            "planted_date": self.planted_date,
            "days_left_till_fully_grown": self.days_left_till_fully_grown,
            "rarity": self.rarity.value,
            "theme": self.theme.value,
            "base_value": self.base_value,
            "initial_days_to_grow": self.initial_days_to_grow,
            "last_watered_on_day": self.last_watered_on_day,
            "asset_name": self.asset_name,
            "icon_name": self.icon_name,
        }

    @classmethod
    def from_dict(cls, plant_dict: Dict[str, Any]) -> "PlacedPlant":
        position = plant_dict.get("position") or {}
        return cls(
            id=plant_dict["id"],
            blueprint_id=plant_dict.get("blueprint_id", ""),
            name=plant_dict["name"],
            position=GridPosition(x=int(position.get("x", 0)), y=int(position.get("y", 0))),
            planted_date=plant_dict["planted_date"],
            days_left_till_fully_grown=max(0, int(plant_dict.get("days_left_till_fully_grown", 0))),
            rarity=Rarity(plant_dict["rarity"]),
            theme=PlantTheme(plant_dict["theme"]),
            base_value=float(plant_dict["base_value"]),
            initial_days_to_grow=int(plant_dict.get("initial_days_to_grow", 0)),
            last_watered_on_day=plant_dict.get("last_watered_on_day"),
            asset_name=plant_dict.get("asset_name", ""),
            icon_name=plant_dict.get("icon_name", ""),
        )


@dataclass
class PlayerLedger:
    """The internal representation of a user's economy state."""
    user_id: int
    total_points: float = 1000.0
    last_evaluated: Optional[str] = None
    player_level: int = 1
    current_xp: float = 0.0
    garden_value: float = 100.0
    unplaced_plants_inventory: Dict[str, int] = field(default_factory=dict)
    placed_plants: List[PlacedPlant] = field(default_factory=list)
    number_of_owned_plots: int = 2
    fertilizer_count: int = 3

    def find_plant(self, plant_id: str) -> Optional[PlacedPlant]:
        return next((p for p in self.placed_plants if p.id == plant_id), None)

    def plant_at(self, position: GridPosition) -> Optional[PlacedPlant]:
        return next((p for p in self.placed_plants if p.position == position), None)


# --- External Immutable View ---

@dataclass(frozen=True)
class PlayerLedgerView:
    """The external read-only view of a user's ledger."""
    user_id: int
    total_points: float
    last_evaluated: Optional[str]
    player_level: int
    current_xp: float
    garden_value: float
    unplaced_plants_inventory: MappingProxyType
    placed_plants: Tuple[PlacedPlant, ...]
    number_of_owned_plots: int
    fertilizer_count: int

    def find_plant(self, plant_id: str) -> Optional[PlacedPlant]:
        return next((p for p in self.placed_plants if p.id == plant_id), None)

    def plant_at(self, position: GridPosition) -> Optional[PlacedPlant]:
        return next((p for p in self.placed_plants if p.position == position), None)
