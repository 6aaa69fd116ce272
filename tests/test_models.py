"""Tests for wire mappings and result types."""

from yourday.models import (
    ActionResult,
    DailySummary,
    ErrorKind,
    FailureReason,
    GridPosition,
    LeaderboardEntry,
    LedgerDocument,
    PlacedPlant,
    PlantTheme,
    Rarity,
)

from conftest import make_plant

USER = 6006


class TestLedgerDocument:
    def test_camel_case_wire_keys(self, garden_helper):
        garden_helper.add_item_to_inventory(USER, "tulip_c_sp", 2)
        doc = LedgerDocument.from_ledger(garden_helper.get_ledger_view(USER)).to_dict()

        assert doc["totalPoints"] == 1000.0
        assert doc["numberOfOwnedPlots"] == 2
        assert doc["unplacedPlantsInventory"] == {"tulip_c_sp": 2}
        assert "total_points" not in doc

    def test_document_maps_back_to_ledger(self, plant_helper):
        rose = make_plant(plant_helper.get_blueprint_by_id("rose_r_sp"), plot_number=2, days_left=1,
                          last_watered_on_day="2024-04-15")
        wire = {
            "totalPoints": 42.0, "lastEvaluated": "2024-04-14", "playerLevel": 3, "currentXP": 12.0,
            "gardenValue": 350.0, "unplacedPlantsInventory": {"tulip_c_sp": 1, "pansy_c_wi": 0},
            "placedPlants": [{
                "id": rose.id, "blueprintID": rose.blueprint_id, "name": rose.name,
                "position": {"x": 1, "y": 0}, "plantedDate": rose.planted_date,
                "daysLeftTillFullyGrown": 1, "lastWateredOnDay": "2024-04-15",
                "rarity": "rare", "theme": "spring", "baseValue": 250.0, "initialDaysToGrow": 2,
            }],
            "numberOfOwnedPlots": 4, "fertilizerCount": 1,
        }

        ledger = LedgerDocument.from_dict(wire).to_ledger(USER)

        assert ledger.user_id == USER
        assert ledger.total_points == 42.0
        assert ledger.unplaced_plants_inventory == {"tulip_c_sp": 1}
        assert ledger.number_of_owned_plots == 4
        plant = ledger.placed_plants[0]
        assert isinstance(plant, PlacedPlant)
        assert plant.position == GridPosition(1, 0)
        assert plant.rarity is Rarity.RARE
        assert plant.theme is PlantTheme.SPRING
        assert plant.last_watered_on_day == "2024-04-15"

    def test_negative_days_left_are_clamped(self):
        wire = {"placedPlants": [{
            "id": "p1", "name": "Tulip", "plantedDate": "2024-04-15", "daysLeftTillFullyGrown": -3,
            "rarity": "common", "theme": "spring", "baseValue": 50,
        }]}
        plant = LedgerDocument.from_dict(wire).to_ledger(USER).placed_plants[0]
        assert plant.days_left_till_fully_grown == 0
        assert plant.is_fully_grown

    def test_partial_document_uses_new_ledger_defaults(self):
        ledger = LedgerDocument.from_dict({"totalPoints": 10.0}).to_ledger(USER)

        assert ledger.fertilizer_count == 3
        assert ledger.number_of_owned_plots == 2
        assert ledger.player_level == 1


class TestLeaderboardEntry:
    def test_from_dict_falls_back_to_anonymous(self):
        entry = LeaderboardEntry.from_dict({"userID": 7, "playerLevel": 2, "gardenValue": 300})
        assert entry == LeaderboardEntry(id="7", display_name="Anonymous", player_level=2, garden_value=300.0)


class TestResults:
    def test_failure_reasons_map_to_kinds(self):
        assert FailureReason.INSUFFICIENT_POINTS.kind is ErrorKind.VALIDATION
        assert FailureReason.PLANT_NOT_FOUND.kind is ErrorKind.NOT_FOUND
        assert FailureReason.EMPTY_CATALOG_FOR_THEME.kind is ErrorKind.CATALOG_GAP
        assert FailureReason.STALE_SESSION.kind is ErrorKind.SYNC

    def test_result_truthiness(self):
        assert ActionResult.ok("fine", 3)
        failed = ActionResult.fail(FailureReason.NOT_GROWN, "wait")
        assert not failed
        assert failed.value is None
        assert ActionResult.ok("fine").error_kind is None


class TestDailySummary:
    def test_round_trip_through_storage(self):
        summary = DailySummary(
            task_title="Write report", date="2024-05-01", total_points=20.0,
            subtask_titles=("Outline", "Draft"), subtask_points=(20.0, 0.0), main_task_completed=False,
            task_max_possible_points=40.0, completed_count=0, total_tasks_count=1,
            level_before_xp=1, xp_before_xp=0.0, level_after_xp=1, xp_after_xp=20.0,
            xp_earned_on_date=20.0, xp_to_next_level_after_xp=100.0,
        )
        assert DailySummary.from_dict(summary.to_dict()) == summary
