from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .assets import GridPosition, PlantTheme, Rarity
from .user_data import PlacedPlant, PlayerLedger, PlayerLedgerView


@dataclass(frozen=True)
class LeaderboardEntry:
    """One ranking row as stored remotely. Rank is assigned by query order, never written."""
    id: str
    display_name: str
    player_level: int
    garden_value: float
    rank: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userID": self.id,
            "displayName": self.display_name,
            "playerLevel": self.player_level,
            "gardenValue": self.garden_value,
        }

    @classmethod
    def from_dict(cls, entry_dict: Dict[str, Any]) -> "LeaderboardEntry":
        return cls(
            id=str(entry_dict["userID"]),
            display_name=entry_dict.get("displayName") or "Anonymous",
            player_level=int(entry_dict.get("playerLevel", 1)),
            garden_value=float(entry_dict.get("gardenValue", 0.0)),
        )


def _plant_to_wire(plant: PlacedPlant) -> Dict[str, Any]:
    return {
        "id": plant.id,
        "blueprintID": plant.blueprint_id,
        "name": plant.name,
        "position": {"x": plant.position.x, "y": plant.position.y},
        "plantedDate": plant.planted_date,
        "daysLeftTillFullyGrown": plant.days_left_till_fully_grown,
        "lastWateredOnDay": plant.last_watered_on_day,
        "rarity": plant.rarity.value,
        "theme": plant.theme.value,
        "baseValue": plant.base_value,
        "initialDaysToGrow": plant.initial_days_to_grow,
        "assetName": plant.asset_name,
        "iconName": plant.icon_name,
    }


def _plant_from_wire(wire: Dict[str, Any]) -> PlacedPlant:
    position = wire.get("position") or {}
    return PlacedPlant(
        id=wire["id"],
        blueprint_id=wire.get("blueprintID", ""),
        name=wire["name"],
        position=GridPosition(x=int(position.get("x", 0)), y=int(position.get("y", 0))),
        planted_date=wire["plantedDate"],
        days_left_till_fully_grown=max(0, int(wire.get("daysLeftTillFullyGrown", 0))),
        last_watered_on_day=wire.get("lastWateredOnDay"),
        rarity=Rarity(wire["rarity"]),
        theme=PlantTheme(wire["theme"]),
        base_value=float(wire["baseValue"]),
        initial_days_to_grow=int(wire.get("initialDaysToGrow", 0)),
        asset_name=wire.get("assetName", ""),
        icon_name=wire.get("iconName", ""),
    )


@dataclass(frozen=True)
class LedgerDocument:
    """Typed remote copy of a player's ledger."""
    total_points: float
    last_evaluated: Optional[str]
    player_level: int
    current_xp: float
    garden_value: float
    unplaced_plants_inventory: Dict[str, int] = field(default_factory=dict)
    placed_plants: Tuple[Dict[str, Any], ...] = field(default_factory=tuple)
    number_of_owned_plots: int = 2
    fertilizer_count: int = 3

    @classmethod
    def from_ledger(cls, ledger: PlayerLedgerView) -> "LedgerDocument":
        return cls(
            total_points=ledger.total_points,
            last_evaluated=ledger.last_evaluated,
            player_level=ledger.player_level,
            current_xp=ledger.current_xp,
            garden_value=ledger.garden_value,
            unplaced_plants_inventory=dict(ledger.unplaced_plants_inventory),
            placed_plants=tuple(_plant_to_wire(p) for p in ledger.placed_plants),
            number_of_owned_plots=ledger.number_of_owned_plots,
            fertilizer_count=ledger.fertilizer_count,
        )

    def to_ledger(self, user_id: int) -> PlayerLedger:
        plants: List[PlacedPlant] = [_plant_from_wire(p) for p in self.placed_plants]
        return PlayerLedger(
            user_id=user_id,
            total_points=self.total_points,
            last_evaluated=self.last_evaluated,
            player_level=self.player_level,
            current_xp=self.current_xp,
            garden_value=self.garden_value,
            unplaced_plants_inventory={k: v for k, v in self.unplaced_plants_inventory.items() if v > 0},
            placed_plants=plants,
            number_of_owned_plots=self.number_of_owned_plots,
            fertilizer_count=self.fertilizer_count,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalPoints": self.total_points,
            "lastEvaluated": self.last_evaluated,
            "playerLevel": self.player_level,
            "currentXP": self.current_xp,
            "gardenValue": self.garden_value,
            "unplacedPlantsInventory": dict(self.unplaced_plants_inventory),
            "placedPlants": [dict(p) for p in self.placed_plants],
            "numberOfOwnedPlots": self.number_of_owned_plots,
            "fertilizerCount": self.fertilizer_count,
        }

    @classmethod
    def from_dict(cls, doc: Dict[str, Any]) -> "LedgerDocument":
        return cls(
            total_points=float(doc.get("totalPoints", 0.0)),
            last_evaluated=doc.get("lastEvaluated"),
            player_level=int(doc.get("playerLevel", 1)),
            current_xp=float(doc.get("currentXP", 0.0)),
            garden_value=float(doc.get("gardenValue", 100.0)),
            unplaced_plants_inventory={str(k): int(v) for k, v in (doc.get("unplacedPlantsInventory") or {}).items()},
            placed_plants=tuple(doc.get("placedPlants") or ()),
            number_of_owned_plots=int(doc.get("numberOfOwnedPlots", 2)),
            fertilizer_count=int(doc.get("fertilizerCount", 3)),
        )
