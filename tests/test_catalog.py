"""Tests for catalog loading and lookups."""

from yourday.helpers import DataHelper, PlantHelper
from yourday.helpers.data_helper import DEFAULT_PULL_PRICES
from yourday.models import PlantTheme, Rarity

import pytest


class TestBundledCatalog:
    def test_loads_every_blueprint(self, data_loader):
        assert len(data_loader.plant_blueprints) == 20
        assert data_loader.pull_prices == {1: 50.0, 2: 100.0, 10: 500.0}

    def test_every_theme_and_rarity_is_covered(self, plant_helper):
        assert plant_helper.find_catalog_gaps() == []

    def test_find_blueprint_by_id_or_name(self, plant_helper):
        assert plant_helper.find_blueprint("rose_r_sp").name == "Mystic Rose"
        assert plant_helper.find_blueprint("  mystic ROSE ").id == "rose_r_sp"
        assert plant_helper.find_blueprint("dandelion") is None

    def test_unknown_id_is_none(self, plant_helper):
        assert plant_helper.get_blueprint_by_id("nope") is None

    def test_theme_and_rarity_filters(self, plant_helper):
        spring = plant_helper.get_blueprints_by_theme(PlantTheme.SPRING)
        assert len(spring) == 5
        assert all(b.theme is PlantTheme.SPRING for b in spring)
        legendaries = plant_helper.get_blueprints_by_rarity(Rarity.LEGENDARY)
        assert {b.base_value for b in legendaries} == {1000.0}


class TestCatalogGaps:
    def test_gaps_are_reported_per_cell(self, data_loader):
        partial = [b for b in data_loader.plant_blueprints
                   if not (b.theme is PlantTheme.WINTER and b.rarity in (Rarity.EPIC, Rarity.LEGENDARY))]
        gaps = PlantHelper(partial).find_catalog_gaps()
        assert set(gaps) == {(PlantTheme.WINTER, Rarity.EPIC), (PlantTheme.WINTER, Rarity.LEGENDARY)}


class TestDataHelperFallbacks:
    def test_missing_files_fall_back_to_defaults(self, tmp_path, logger):
        loader = DataHelper(tmp_path, logger)
        loader.load_all_data()

        assert loader.plant_blueprints == []
        assert loader.pull_prices == DEFAULT_PULL_PRICES
        assert any(level == "CRITICAL" for _, level in logger.queued_messages)

    def test_malformed_json_is_logged_not_raised(self, tmp_path, logger):
        (tmp_path / "plants.json").write_text("{not json", encoding="utf-8")
        loader = DataHelper(tmp_path, logger)
        loader.load_all_data()

        assert loader.plant_blueprints == []
        assert any(level == "ERROR" for _, level in logger.queued_messages)

    def test_invalid_blueprints_are_skipped(self, tmp_path, logger):
        (tmp_path / "plants.json").write_text(
            '[{"id": "ok", "name": "Ok", "rarity": "common", "theme": "fall", "initial_days_to_grow": 1,'
            ' "base_value": 10},'
            ' {"id": "bad", "rarity": "common", "theme": "fall", "initial_days_to_grow": 0, "base_value": 10},'
            ' {"id": "odd", "rarity": "mythic", "theme": "fall", "initial_days_to_grow": 1, "base_value": 10}]',
            encoding="utf-8")
        loader = DataHelper(tmp_path, logger)
        loader.load_all_data()

        assert [b.id for b in loader.plant_blueprints] == ["ok"]

    def test_parse_blueprint_rejects_non_positive_value(self):
        with pytest.raises(ValueError):
            DataHelper.parse_blueprint({"id": "x", "rarity": "rare", "theme": "spring",
                                        "initial_days_to_grow": 2, "base_value": 0})
