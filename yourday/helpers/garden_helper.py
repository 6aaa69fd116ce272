import dataclasses
import uuid
from collections import Counter
from datetime import date, datetime
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Tuple

from .game_state_helper import GameStateHelper
from .gacha_helper import GUARANTEED_BATCH_SIZE, GachaHelper
from .level_helper import LevelHelper
from .logging_helper import LoggingHelper
from .plant_helper import PlantHelper
from .sales_helper import SalesHelper
from .time_helper import TimeHelper

from ..models import (
    ActionResult,
    FailureReason,
    GridPosition,
    PlacedPlant,
    PlantBlueprint,
    PlantTheme,
    PlayerLedger,
    PlayerLedgerView,
)

FERTILIZER_CONVERSION_RATE = 10


class GardenHelper:
    """
    Manages each user's garden ledger. Enforces encapsulation by using an internal mutable
    PlayerLedger and exposing an immutable PlayerLedgerView.

    Every mutating operation either applies completely and returns a successful ActionResult,
    or returns a failed one and leaves the ledger untouched. Garden value is recomputed from
    the placed plants after every change to them, never patched incrementally.
    """

    def __init__(
        self,
        game_state_helper: GameStateHelper,
        plant_helper: PlantHelper,
        gacha_helper: GachaHelper,
        logger: LoggingHelper,
    ):
        self.game_state_helper = game_state_helper
        self.plant_helper = plant_helper
        self.gacha_helper = gacha_helper
        self.logger = logger
        self._ledger_cache: Dict[int, PlayerLedger] = {}

    # --- Persistence ---

    @staticmethod
    def _deserialize_ledger(user_id: int, ledger_dict: Dict[str, Any]) -> PlayerLedger:
        defaults = {
            "total_points": 1000.0, "last_evaluated": None, "player_level": 1, "current_xp": 0.0,
            "garden_value": 100.0, "unplaced_plants_inventory": {}, "placed_plants": [],
            "number_of_owned_plots": 2, "fertilizer_count": 3,
        }

        for key, value in defaults.items():
            ledger_dict.setdefault(key, value)

        return PlayerLedger(
            user_id=user_id,
            total_points=float(ledger_dict["total_points"]),
            last_evaluated=ledger_dict["last_evaluated"],
            player_level=int(ledger_dict["player_level"]),
            current_xp=float(ledger_dict["current_xp"]),
            garden_value=float(ledger_dict["garden_value"]),
            unplaced_plants_inventory={k: int(v) for k, v in ledger_dict["unplaced_plants_inventory"].items() if v > 0},
            placed_plants=[PlacedPlant.from_dict(p) for p in ledger_dict["placed_plants"]],
            number_of_owned_plots=int(ledger_dict["number_of_owned_plots"]),
            fertilizer_count=int(ledger_dict["fertilizer_count"]),
        )

    def _save_ledger(self, ledger: PlayerLedger):
        """Converts a PlayerLedger back to a dict and saves it to the IN-MEMORY state."""

        serializable_data = {
            "total_points": ledger.total_points,
            "last_evaluated": ledger.last_evaluated,
            "player_level": ledger.player_level,
            "current_xp": ledger.current_xp,
            "garden_value": ledger.garden_value,
            "unplaced_plants_inventory": dict(ledger.unplaced_plants_inventory),
            "placed_plants": [p.to_dict() for p in ledger.placed_plants],
            "number_of_owned_plots": ledger.number_of_owned_plots,
            "fertilizer_count": ledger.fertilizer_count,
        }
        self.game_state_helper.set_user_data(ledger.user_id, serializable_data)

    def _get_or_create_ledger(self, user_id: int) -> PlayerLedger:
        if user_id in self._ledger_cache:
            return self._ledger_cache[user_id]

        raw_data = dict(self.game_state_helper.get_user_data(user_id))
        is_new = not raw_data

        ledger = self._deserialize_ledger(user_id, raw_data)
        self._ledger_cache[user_id] = ledger

        if is_new:
            self._save_ledger(ledger)

        return ledger

    def get_ledger_view(self, user_id: int) -> PlayerLedgerView:
        ledger = self._get_or_create_ledger(user_id)
        return PlayerLedgerView(
            user_id=ledger.user_id,
            total_points=ledger.total_points,
            last_evaluated=ledger.last_evaluated,
            player_level=ledger.player_level,
            current_xp=ledger.current_xp,
            garden_value=ledger.garden_value,
            unplaced_plants_inventory=MappingProxyType(dict(ledger.unplaced_plants_inventory)),
            placed_plants=tuple(dataclasses.replace(p) for p in ledger.placed_plants),
            number_of_owned_plots=ledger.number_of_owned_plots,
            fertilizer_count=ledger.fertilizer_count,
        )

    def has_ledger(self, user_id: int) -> bool:
        return user_id in self._ledger_cache or bool(self.game_state_helper.get_user_data(user_id))

    def get_all_user_ids(self) -> List[int]:
        all_users = self.game_state_helper.get_all_user_data()
        return [int(uid) for uid in all_users.keys()]

    def replace_ledger(self, user_id: int, ledger: PlayerLedger):
        """Swaps in a ledger loaded from elsewhere (e.g. the remote store) and re-derives garden value."""

        ledger.user_id = user_id
        self._recalculate_garden_value(ledger)
        self._ledger_cache[user_id] = ledger
        self._save_ledger(ledger)

    def delete_ledger(self, user_id: int):
        self._ledger_cache.pop(user_id, None)
        self.game_state_helper.delete_user_data(user_id)

    # --- Garden value ---

    @staticmethod
    def _recalculate_garden_value(ledger: PlayerLedger, today: Optional[date] = None) -> float:
        ledger.garden_value = SalesHelper.calculate_garden_value(ledger.placed_plants, today)
        return ledger.garden_value

    def update_garden_value(self, user_id: int, today: Optional[date] = None) -> float:
        ledger = self._get_or_create_ledger(user_id)
        value = self._recalculate_garden_value(ledger, today)
        self._save_ledger(ledger)
        return value

    # --- Planting & plant care ---

    @staticmethod
    def is_position_in_range(number_of_owned_plots: int, position: GridPosition) -> bool:
        return position.y == 0 and 0 <= position.x < number_of_owned_plots

    def plant_from_inventory(
        self,
        user_id: int,
        blueprint_id: str,
        position: GridPosition,
        now: Optional[datetime] = None,
    ) -> ActionResult:
        ledger = self._get_or_create_ledger(user_id)
        blueprint = self.plant_helper.get_blueprint_by_id(blueprint_id)

        if blueprint is None:
            return ActionResult.fail(FailureReason.BLUEPRINT_NOT_FOUND, f"No plant called `{blueprint_id}` exists.")

        if not self.is_position_in_range(ledger.number_of_owned_plots, position):
            return ActionResult.fail(
                FailureReason.POSITION_OUT_OF_RANGE,
                f"Plot {position.plot_number} is not one of your {ledger.number_of_owned_plots} plots.")

        if ledger.plant_at(position) is not None:
            return ActionResult.fail(FailureReason.POSITION_OCCUPIED, f"Plot {position.plot_number} is occupied.")

        if ledger.unplaced_plants_inventory.get(blueprint_id, 0) <= 0:
            return ActionResult.fail(FailureReason.INSUFFICIENT_INVENTORY,
                                     f"You don't have any {blueprint.name} left in your inventory.")

        planted_at = now or TimeHelper.now()
        new_plant = PlacedPlant(
            id=str(uuid.uuid4()),
            blueprint_id=blueprint.id,
            name=blueprint.name,
            position=position,
            planted_date=planted_at.isoformat(),
            days_left_till_fully_grown=blueprint.initial_days_to_grow,
            rarity=blueprint.rarity,
            theme=blueprint.theme,
            base_value=blueprint.base_value,
            initial_days_to_grow=blueprint.initial_days_to_grow,
            asset_name=blueprint.asset_name,
            icon_name=blueprint.icon_name,
        )
        ledger.placed_plants.append(new_plant)
        self._decrement_inventory(ledger, blueprint_id, 1)
        self._recalculate_garden_value(ledger, TimeHelper.to_date(planted_at))
        self._save_ledger(ledger)

        return ActionResult.ok(f"{blueprint.name} planted in plot {position.plot_number}.",
                               dataclasses.replace(new_plant))

    @staticmethod
    def _water(plant: PlacedPlant, today: date) -> Tuple[bool, Optional[FailureReason]]:
        if plant.is_fully_grown:
            return False, FailureReason.ALREADY_GROWN
        if TimeHelper.is_same_day(plant.last_watered_on_day, today):
            return False, FailureReason.ALREADY_WATERED

        plant.days_left_till_fully_grown = max(0, plant.days_left_till_fully_grown - 1)
        plant.last_watered_on_day = TimeHelper.date_str(today)
        return True, None

    def water_plant(self, user_id: int, plant_id: str, today: Optional[date] = None) -> ActionResult:
        """Waters one plant. Already grown or already watered today is reported, not treated as an error."""

        ledger = self._get_or_create_ledger(user_id)
        plant = ledger.find_plant(plant_id)
        if plant is None:
            return ActionResult.fail(FailureReason.PLANT_NOT_FOUND, "That plant is not in your garden.")

        today = today or TimeHelper.today()
        watered, reason = self._water(plant, today)
        if not watered:
            if reason is FailureReason.ALREADY_GROWN:
                return ActionResult.fail(reason, f"{plant.name} is already fully grown.")
            return ActionResult.fail(reason, f"{plant.name} was already watered today.")

        self._recalculate_garden_value(ledger, today)
        self._save_ledger(ledger)

        suffix = " It is now fully grown!" if plant.is_fully_grown else \
            f" Days left: {plant.days_left_till_fully_grown}."
        return ActionResult.ok(f"{plant.name} in plot {plant.position.plot_number} watered.{suffix}",
                               dataclasses.replace(plant))

    def water_all_plants(self, user_id: int, today: Optional[date] = None) -> ActionResult:
        ledger = self._get_or_create_ledger(user_id)
        today = today or TimeHelper.today()

        watered_count = 0
        for plant in ledger.placed_plants:
            watered, _ = self._water(plant, today)
            if watered:
                watered_count += 1

        if watered_count == 0:
            return ActionResult.fail(FailureReason.ALREADY_WATERED,
                                     "Your plants are either fully grown or already watered for today.")

        self._recalculate_garden_value(ledger, today)
        self._save_ledger(ledger)
        return ActionResult.ok(f"Watered {watered_count} plant(s).", watered_count)

    def use_fertilizer(self, user_id: int, plant_id: str, today: Optional[date] = None) -> ActionResult:
        ledger = self._get_or_create_ledger(user_id)

        if ledger.fertilizer_count <= 0:
            return ActionResult.fail(FailureReason.NO_FERTILIZER, "You have no fertilizer.")

        plant = ledger.find_plant(plant_id)
        if plant is None:
            return ActionResult.fail(FailureReason.PLANT_NOT_FOUND, "That plant is not in your garden.")

        if plant.is_fully_grown:
            return ActionResult.fail(FailureReason.ALREADY_GROWN, f"{plant.name} is already fully grown.")

        plant.days_left_till_fully_grown = 0
        ledger.fertilizer_count -= 1
        self._recalculate_garden_value(ledger, today)
        self._save_ledger(ledger)

        return ActionResult.ok(f"{plant.name} is now fully grown! Fertilizer left: {ledger.fertilizer_count}.",
                               dataclasses.replace(plant))

    def sell_plant(self, user_id: int, plant_id: str, today: Optional[date] = None) -> ActionResult:
        ledger = self._get_or_create_ledger(user_id)
        plant = ledger.find_plant(plant_id)

        if plant is None:
            return ActionResult.fail(FailureReason.PLANT_NOT_FOUND, "That plant is not in your garden.")

        if not plant.is_fully_grown:
            return ActionResult.fail(FailureReason.NOT_GROWN,
                                     f"{plant.name} needs {plant.days_left_till_fully_grown} more day(s) to grow.")

        sale_price = SalesHelper.get_sale_price(plant)
        ledger.total_points += sale_price
        ledger.placed_plants.remove(plant)
        self._recalculate_garden_value(ledger, today)
        self._save_ledger(ledger)

        return ActionResult.ok(f"Sold {plant.name} for {sale_price:,.0f} points.", sale_price)

    # --- Inventory & gacha ---

    @staticmethod
    def _decrement_inventory(ledger: PlayerLedger, blueprint_id: str, quantity: int):
        remaining = ledger.unplaced_plants_inventory.get(blueprint_id, 0) - quantity
        if remaining <= 0:
            ledger.unplaced_plants_inventory.pop(blueprint_id, None)
        else:
            ledger.unplaced_plants_inventory[blueprint_id] = remaining

    def pull_plants(self, user_id: int, theme: PlantTheme, number_of_pulls: int, total_cost: float) -> ActionResult:
        ledger = self._get_or_create_ledger(user_id)

        if ledger.total_points < total_cost:
            return ActionResult.fail(FailureReason.INSUFFICIENT_POINTS,
                                     f"You need {total_cost:,.0f} points but only have {ledger.total_points:,.0f}.")

        if not self.plant_helper.get_blueprints_by_theme(theme):
            self.logger.init_log(f"Catalog gap: theme '{theme.value}' has no blueprints. Pull for user "
                                 f"{user_id} refused.", "CATALOG")
            return ActionResult.fail(FailureReason.EMPTY_CATALOG_FOR_THEME,
                                     f"There are no {theme.label} plants available right now.")

        pulled = self.gacha_helper.pull(theme, number_of_pulls,
                                        guarantee_last_slot_rare_or_better=number_of_pulls == GUARANTEED_BATCH_SIZE)

        ledger.total_points -= total_cost
        for blueprint_id, count in Counter(b.id for b in pulled).items():
            ledger.unplaced_plants_inventory[blueprint_id] = ledger.unplaced_plants_inventory.get(blueprint_id, 0) + count
        self._save_ledger(ledger)

        return ActionResult.ok(f"Pulled {len(pulled)} {theme.label} plant(s).", pulled)

    def convert_to_fertilizer(self, user_id: int, blueprint_id: str, quantity: int) -> ActionResult:
        ledger = self._get_or_create_ledger(user_id)

        if quantity <= 0 or quantity % FERTILIZER_CONVERSION_RATE != 0:
            return ActionResult.fail(FailureReason.INVALID_QUANTITY,
                                     f"Quantity must be a positive multiple of {FERTILIZER_CONVERSION_RATE}.")

        owned = ledger.unplaced_plants_inventory.get(blueprint_id, 0)
        if owned < quantity:
            return ActionResult.fail(FailureReason.INSUFFICIENT_INVENTORY,
                                     f"You only have {owned} of `{blueprint_id}`.")

        produced = quantity // FERTILIZER_CONVERSION_RATE
        self._decrement_inventory(ledger, blueprint_id, quantity)
        ledger.fertilizer_count += produced
        self._save_ledger(ledger)

        return ActionResult.ok(f"Converted {quantity} plants into {produced} fertilizer.", produced)

    def add_item_to_inventory(self, user_id: int, blueprint_id: str, quantity: int = 1):
        if quantity > 0:
            ledger = self._get_or_create_ledger(user_id)
            ledger.unplaced_plants_inventory[blueprint_id] = ledger.unplaced_plants_inventory.get(blueprint_id, 0) + quantity
            self._save_ledger(ledger)

    def get_inventory_blueprints(self, user_id: int) -> List[Tuple[Optional[PlantBlueprint], str, int]]:
        """Returns (blueprint or None, blueprint id, count) for each inventory entry, sorted by id."""

        ledger = self._get_or_create_ledger(user_id)
        return [
            (self.plant_helper.get_blueprint_by_id(bp_id), bp_id, count)
            for bp_id, count in sorted(ledger.unplaced_plants_inventory.items())
        ]

    # --- Plots & levels ---

    def max_plots_for_current_level(self, user_id: int) -> int:
        return LevelHelper.max_plots_for_level(self._get_or_create_ledger(user_id).player_level)

    def cost_to_buy_next_plot(self, user_id: int) -> float:
        return LevelHelper.cost_to_buy_next_plot(self._get_or_create_ledger(user_id).player_level)

    def buy_next_plot(self, user_id: int) -> ActionResult:
        ledger = self._get_or_create_ledger(user_id)
        max_plots = LevelHelper.max_plots_for_level(ledger.player_level)
        cost = LevelHelper.cost_to_buy_next_plot(ledger.player_level)

        if ledger.number_of_owned_plots >= max_plots:
            return ActionResult.fail(FailureReason.MAX_PLOTS_REACHED,
                                     "You've reached the maximum number of plots for your current level.")

        if ledger.total_points < cost:
            return ActionResult.fail(FailureReason.INSUFFICIENT_POINTS, f"Need {cost:,.0f} points to buy a new plot.")

        ledger.total_points -= cost
        ledger.number_of_owned_plots += 1
        self._save_ledger(ledger)

        return ActionResult.ok(f"You now have {ledger.number_of_owned_plots} plots.", ledger.number_of_owned_plots)

    def add_xp(self, user_id: int, points: float) -> Tuple[bool, int, float]:
        ledger = self._get_or_create_ledger(user_id)
        leveled_up, new_level, new_xp = LevelHelper.apply_xp(ledger.player_level, ledger.current_xp, points)

        if points > 0:
            ledger.player_level = new_level
            ledger.current_xp = new_xp
            self._save_ledger(ledger)

        return leveled_up, new_level, new_xp

    # --- Currency & bookkeeping ---

    def add_points(self, user_id: int, amount: float):
        if amount > 0:
            ledger = self._get_or_create_ledger(user_id)
            ledger.total_points += amount
            self._save_ledger(ledger)

    def add_fertilizer(self, user_id: int, amount: int):
        if amount > 0:
            ledger = self._get_or_create_ledger(user_id)
            ledger.fertilizer_count += amount
            self._save_ledger(ledger)

    def set_last_evaluated(self, user_id: int, day: Optional[str]):
        ledger = self._get_or_create_ledger(user_id)
        ledger.last_evaluated = day
        self._save_ledger(ledger)
