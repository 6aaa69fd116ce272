from typing import Dict, List, Optional, Tuple

from ..models import PlantBlueprint, PlantTheme, Rarity


class PlantHelper:
    """
    Read-only registry of every plant blueprint.
    Lookups never raise: unknown ids give None and empty filters give an empty list.
    """

    def __init__(self, blueprints_list: List[PlantBlueprint]):
        """Initializes the PlantHelper with dataclass objects provided by DataHelper."""

        self.all_blueprints: List[PlantBlueprint] = list(blueprints_list)
        self.blueprints_by_id: Dict[str, PlantBlueprint] = {b.id: b for b in blueprints_list}

        self.blueprints_by_cell: Dict[Tuple[PlantTheme, Rarity], List[PlantBlueprint]] = {}
        self._index_blueprints()

    def _index_blueprints(self):
        """Groups blueprints by (theme, rarity) for gacha lookups."""

        for blueprint in self.all_blueprints:
            self.blueprints_by_cell.setdefault((blueprint.theme, blueprint.rarity), []).append(blueprint)

    def get_blueprint_by_id(self, blueprint_id: str) -> Optional[PlantBlueprint]:
        return self.blueprints_by_id.get(blueprint_id)

    def get_blueprints_by_rarity(self, rarity: Rarity) -> List[PlantBlueprint]:
        return [b for b in self.all_blueprints if b.rarity == rarity]

    def get_blueprints_by_theme(self, theme: PlantTheme) -> List[PlantBlueprint]:
        return [b for b in self.all_blueprints if b.theme == theme]

    def get_blueprints_by_theme_and_rarity(self, theme: PlantTheme, rarity: Rarity) -> List[PlantBlueprint]:
        return list(self.blueprints_by_cell.get((theme, rarity), []))

    def find_blueprint(self, query: str) -> Optional[PlantBlueprint]:
        """Searches for a blueprint by ID or display name (case-insensitive)."""

        query_lower = query.strip().lower()

        for blueprint in self.all_blueprints:
            if blueprint.id.lower() == query_lower:
                return blueprint

        for blueprint in self.all_blueprints:
            if blueprint.name.lower() == query_lower:
                return blueprint

        return None

    def find_catalog_gaps(self) -> List[Tuple[PlantTheme, Rarity]]:
        """Returns every (theme, rarity) cell the gacha can roll that has no blueprint."""

        return [
            (theme, rarity)
            for theme in PlantTheme
            for rarity in Rarity
            if not self.blueprints_by_cell.get((theme, rarity))
        ]
