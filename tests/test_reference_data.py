"""
Unit tests for climate reference data.

Tests cover:
- Built-in tables
- Fallbacks for unknown zone, ENSO and crop keys
- Season mapping and immutability
- Injection of alternate tables
"""
import pytest

from agroclimate.domain.models import EnsoState
from agroclimate.domain.reference_data import (
    DEFAULT_CLIMATE_ZONES,
    DEFAULT_CROP_PROFILES,
    DEFAULT_ENSO_EFFECTS,
    DEFAULT_SEASONAL_RULES,
    ClimateReferenceData,
)


class TestDefaultTables:
    """Tests for the built-in tables."""

    def test_all_zones_present(self, reference_data):
        assert set(reference_data.zones) == {
            "highveld", "lowveld", "middleveld", "eastern_highlands", "zambezi_valley",
        }

    def test_rules_cover_every_month(self, reference_data):
        for month in range(1, 13):
            assert reference_data.seasonal_rule(month).month == month

    def test_crop_table_order(self, reference_data):
        assert list(reference_data.crop_profiles) == ["maize", "wheat", "sorghum", "cotton", "tobacco"]

    def test_maize_daily_water_requirement(self, reference_data):
        assert reference_data.crop_profile("maize").daily_water_requirement_mm == pytest.approx(500 / 30)

    def test_tables_are_read_only(self, reference_data):
        with pytest.raises(TypeError):
            reference_data.zones["new_zone"] = reference_data.climate_zone("highveld")


class TestFallbacks:
    """Unknown keys fall back to documented defaults."""

    def test_unknown_zone_falls_back_to_highveld(self, reference_data):
        assert reference_data.climate_zone("atlantis").zone_id == "highveld"

    def test_zone_lookup_is_case_insensitive(self, reference_data):
        assert reference_data.climate_zone("LowVeld").zone_id == "lowveld"

    def test_unknown_enso_falls_back_to_neutral(self, reference_data):
        assert reference_data.enso_effect("super_nino").state == EnsoState.NEUTRAL
        assert reference_data.enso_effect(None).state == EnsoState.NEUTRAL

    def test_enso_accepts_strings_and_enum(self, reference_data):
        assert reference_data.enso_effect("el_nino").rainfall_modifier == pytest.approx(-0.4)
        assert reference_data.enso_effect(EnsoState.LA_NINA).drought_risk == pytest.approx(-0.3)

    def test_unknown_crop_falls_back_to_first(self, reference_data):
        assert reference_data.crop_profile("quinoa").crop_id == "maize"


class TestSeasons:
    """Tests for the southern-hemisphere season mapping."""

    @pytest.mark.parametrize("month,season", [
        (12, "summer"), (1, "summer"), (2, "summer"),
        (3, "autumn"), (5, "autumn"),
        (6, "winter"), (8, "winter"),
        (9, "spring"), (11, "spring"),
    ])
    def test_season_for_month(self, reference_data, month, season):
        assert reference_data.season_for_month(month) == season

    def test_season_labels_order(self, reference_data):
        assert reference_data.season_labels == ("summer", "autumn", "winter", "spring")

    def test_month_name(self):
        assert ClimateReferenceData.month_name(1) == "January"
        assert ClimateReferenceData.month_name(12) == "December"


class TestInjection:
    """Alternate tables can be injected."""

    def test_custom_season_mapping(self):
        northern = {m: ("winter" if m in (12, 1, 2) else "other") for m in range(1, 13)}
        data = ClimateReferenceData(
            climate_zones=DEFAULT_CLIMATE_ZONES,
            seasonal_rules=DEFAULT_SEASONAL_RULES,
            enso_effects=DEFAULT_ENSO_EFFECTS,
            crop_profiles=DEFAULT_CROP_PROFILES[2:],
            season_by_month=northern,
        )

        assert data.season_for_month(1) == "winter"
        assert data.crop_profile("unknown").crop_id == "sorghum"

    def test_incomplete_rules_rejected(self):
        with pytest.raises(ValueError, match="missing for months"):
            ClimateReferenceData(
                climate_zones=DEFAULT_CLIMATE_ZONES,
                seasonal_rules=DEFAULT_SEASONAL_RULES[:6],
                enso_effects=DEFAULT_ENSO_EFFECTS,
                crop_profiles=DEFAULT_CROP_PROFILES,
            )

    def test_incomplete_season_mapping_rejected(self):
        partial = {m: "wet" for m in range(1, 12)}

        with pytest.raises(ValueError, match=r"Season mapping missing for months: \[12\]"):
            ClimateReferenceData(
                climate_zones=DEFAULT_CLIMATE_ZONES,
                seasonal_rules=DEFAULT_SEASONAL_RULES,
                enso_effects=DEFAULT_ENSO_EFFECTS,
                crop_profiles=DEFAULT_CROP_PROFILES,
                season_by_month=partial,
            )

    def test_unknown_default_zone_uses_first_zone(self):
        data = ClimateReferenceData.default(default_zone_id="nowhere")

        assert data.default_zone_id == "highveld"
