import json
import pathlib
from typing import Any, Dict, List

from ..models import PlantBlueprint, PlantTheme, Rarity
from .logging_helper import LoggingHelper

DEFAULT_PULL_PRICES: Dict[int, float] = {1: 50.0, 2: 100.0, 10: 500.0}


class DataHelper:
    """
    Handles the loading and validation of all JSON data files from the data directory.
    This class is responsible for parsing raw JSON into structured dataclass objects.
    It operates in a read-only manner on the data path.
    """

    def __init__(self, data_path_obj: pathlib.Path, logger: LoggingHelper):
        self.data_path = data_path_obj
        self.logger = logger

        self.plant_blueprints: List[PlantBlueprint] = []
        self.pull_prices: Dict[int, float] = {}

    def load_all_data(self):
        """Master method to load all data files."""

        self.logger.init_log("Data loading process initiated.", "INFO")

        self.plant_blueprints = self._load_plant_blueprints()
        self.pull_prices = self._load_pull_prices()

        self.logger.init_log("All data files loaded and processed.", "INFO")

    def _load_json_file(self, filename: str, default_data: Any) -> Any:
        """Generic JSON file loader with validation and logging. Does not write to disk."""

        file_path = self.data_path / filename
        log_prefix = f"Data Load ({filename}): "
        try:
            if file_path.exists():
                with open(file_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)

                if data:
                    self.logger.init_log(f"{log_prefix}Successfully loaded {len(data)} entries.", "INFO")
                    return data
                else:
                    self.logger.init_log(f"{log_prefix}File is empty. Using default fallback data.", "WARNING")
                    return default_data
            else:
                self.logger.init_log(
                    f"{log_prefix}File not found. This is a critical error if not intended. "
                    "Using default fallback data.", "ERROR"
                )
                return default_data
        except (json.JSONDecodeError, OSError) as e:
            self.logger.init_log(f"{log_prefix}Failed to load or parse: {e}. Using default fallback data.", "ERROR")
            return default_data

    def _load_plant_blueprints(self) -> List[PlantBlueprint]:
        data = self._load_json_file("plants.json", [])

        blueprints = []
        for plant_dict in data:
            try:
                blueprint = self.parse_blueprint(plant_dict)
            except (KeyError, ValueError, TypeError) as e:
                self.logger.init_log(f"Data Load (plants.json): Skipping malformed blueprint {plant_dict!r}: {e}",
                                     "WARNING")
                continue
            blueprints.append(blueprint)

        if not blueprints:
            self.logger.init_log("Data Load (plants.json): No blueprints loaded. Gacha pulls will fail.", "CRITICAL")
        return blueprints

    @staticmethod
    def parse_blueprint(plant_dict: Dict[str, Any]) -> PlantBlueprint:
        days = int(plant_dict["initial_days_to_grow"])
        value = float(plant_dict["base_value"])
        if days <= 0 or value <= 0:
            raise ValueError("initial_days_to_grow and base_value must be positive")

        purchase_cost = plant_dict.get("purchase_cost")
        return PlantBlueprint(
            id=plant_dict["id"],
            name=plant_dict.get("name", plant_dict["id"]),
            rarity=Rarity(plant_dict["rarity"]),
            theme=PlantTheme(plant_dict["theme"]),
            initial_days_to_grow=days,
            base_value=value,
            description=plant_dict.get("description", ""),
            asset_name=plant_dict.get("asset_name", ""),
            icon_name=plant_dict.get("icon_name", ""),
            purchase_cost=float(purchase_cost) if purchase_cost is not None else None,
        )

    def _load_pull_prices(self) -> Dict[int, float]:
        data = self._load_json_file("pull_prices.json", {})
        if not data:
            return dict(DEFAULT_PULL_PRICES)

        prices = {}
        for count, cost in data.items():
            try:
                prices[int(count)] = float(cost)
            except (TypeError, ValueError):
                self.logger.init_log(f"Data Load (pull_prices.json): Ignoring invalid entry {count}={cost}.",
                                     "WARNING")
        return prices or dict(DEFAULT_PULL_PRICES)
