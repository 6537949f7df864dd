"""
Static climate reference data: climate zones, monthly seasonal rules,
ENSO effects, crop profiles and the month-to-season mapping.

Tables are wrapped in read-only mappings and injected into the engine
components, so tests can substitute alternate tables without touching
module state. Unknown keys fall back to a documented default entry.
"""
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Union
import logging

from agroclimate.domain.models import (
    ClimateZone,
    CropProfile,
    EnsoEffect,
    EnsoState,
    SeasonalRule,
)

logger = logging.getLogger(__name__)


MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

# Southern-hemisphere meteorological seasons
SOUTHERN_HEMISPHERE_SEASONS = MappingProxyType({
    12: "summer", 1: "summer", 2: "summer",
    3: "autumn", 4: "autumn", 5: "autumn",
    6: "winter", 7: "winter", 8: "winter",
    9: "spring", 10: "spring", 11: "spring",
})

SEASON_ORDER = ("summer", "autumn", "winter", "spring")


DEFAULT_CLIMATE_ZONES = (
    ClimateZone(
        zone_id="highveld",
        altitude=1200,
        avg_temp=19.5,
        annual_rainfall_mm=825,
        rainy_season_months=frozenset({10, 11, 12, 1, 2, 3}),
        dry_season_months=frozenset({4, 5, 6, 7, 8, 9}),
        frost_risk_months=frozenset({5, 6, 7}),
        optimal_planting_months=frozenset({11, 12}),
        suitable_crops=("maize", "tobacco", "wheat", "soybeans", "cotton"),
        soil_type="Red-brown sandy loams",
        description="Central plateau: Harare, Bulawayo - main agricultural zone",
    ),
    ClimateZone(
        zone_id="lowveld",
        altitude=300,
        avg_temp=24.5,
        annual_rainfall_mm=450,
        rainy_season_months=frozenset({11, 12, 1, 2, 3}),
        dry_season_months=frozenset({4, 5, 6, 7, 8, 9, 10}),
        frost_risk_months=frozenset(),
        optimal_planting_months=frozenset({12, 1}),
        suitable_crops=("sugarcane", "cotton", "sorghum", "millet"),
        soil_type="Sandy soils, alluvial in river valleys",
        description="Southern lowlands: Chiredzi, Triangle - hotter, drier",
    ),
    ClimateZone(
        zone_id="middleveld",
        altitude=900,
        avg_temp=21.0,
        annual_rainfall_mm=650,
        rainy_season_months=frozenset({10, 11, 12, 1, 2, 3}),
        dry_season_months=frozenset({4, 5, 6, 7, 8, 9}),
        frost_risk_months=frozenset({6, 7}),
        optimal_planting_months=frozenset({11, 12}),
        suitable_crops=("maize", "groundnuts", "sunflower", "tobacco"),
        soil_type="Red and brown loamy soils",
        description="Intermediate zone: Gweru, Kwekwe - mixed farming",
    ),
    ClimateZone(
        zone_id="eastern_highlands",
        altitude=1500,
        avg_temp=17.5,
        annual_rainfall_mm=1200,
        rainy_season_months=frozenset({9, 10, 11, 12, 1, 2, 3, 4}),
        dry_season_months=frozenset({5, 6, 7, 8}),
        frost_risk_months=frozenset({5, 6, 7, 8}),
        optimal_planting_months=frozenset({10, 11}),
        suitable_crops=("tea", "coffee", "timber", "wheat", "potatoes"),
        soil_type="Acidic mountain soils",
        description="Nyanga, Chimanimani - high rainfall, tea, coffee zone",
    ),
    ClimateZone(
        zone_id="zambezi_valley",
        altitude=400,
        avg_temp=26.0,
        annual_rainfall_mm=600,
        rainy_season_months=frozenset({11, 12, 1, 2, 3}),
        dry_season_months=frozenset({4, 5, 6, 7, 8, 9, 10}),
        frost_risk_months=frozenset(),
        optimal_planting_months=frozenset({12, 1}),
        suitable_crops=("cotton", "sorghum", "millet", "sunflower"),
        soil_type="Alluvial and sandy soils",
        description="Northern valley: Kariba, Mana Pools - hot, wildlife",
    ),
)


DEFAULT_SEASONAL_RULES = (
    SeasonalRule(month=1, temp_modifier=0.0, rainfall_modifier=1.5, humidity_modifier=1.3,
                 wind_modifier=0.8, description="Peak rainy season with high humidity"),
    SeasonalRule(month=2, temp_modifier=0.2, rainfall_modifier=1.2, humidity_modifier=1.2,
                 wind_modifier=0.9, description="Late rainy season, temperatures rising"),
    SeasonalRule(month=3, temp_modifier=0.5, rainfall_modifier=0.8, humidity_modifier=1.0,
                 wind_modifier=1.0, description="End of rainy season, transition to dry"),
    SeasonalRule(month=4, temp_modifier=0.8, rainfall_modifier=0.3, humidity_modifier=0.7,
                 wind_modifier=1.1, description="Early dry season, temperatures increasing"),
    SeasonalRule(month=5, temp_modifier=1.0, rainfall_modifier=0.1, humidity_modifier=0.5,
                 wind_modifier=1.2, description="Mid dry season, hot and dry conditions"),
    SeasonalRule(month=6, temp_modifier=0.9, rainfall_modifier=0.05, humidity_modifier=0.4,
                 wind_modifier=1.3, description="Peak dry season, very hot and dry"),
    SeasonalRule(month=7, temp_modifier=0.8, rainfall_modifier=0.05, humidity_modifier=0.4,
                 wind_modifier=1.2, description="Mid dry season, hot and dry"),
    SeasonalRule(month=8, temp_modifier=0.9, rainfall_modifier=0.1, humidity_modifier=0.5,
                 wind_modifier=1.1, description="Late dry season, very hot conditions"),
    SeasonalRule(month=9, temp_modifier=1.1, rainfall_modifier=0.2, humidity_modifier=0.6,
                 wind_modifier=1.0, description="End of dry season, hottest month"),
    SeasonalRule(month=10, temp_modifier=0.8, rainfall_modifier=0.6, humidity_modifier=0.8,
                 wind_modifier=0.9, description="Early rainy season, first rains"),
    SeasonalRule(month=11, temp_modifier=0.4, rainfall_modifier=1.0, humidity_modifier=1.1,
                 wind_modifier=0.8, description="Mid rainy season, regular rainfall"),
    SeasonalRule(month=12, temp_modifier=0.1, rainfall_modifier=1.3, humidity_modifier=1.2,
                 wind_modifier=0.8, description="Peak rainy season, heavy rainfall"),
)


DEFAULT_ENSO_EFFECTS = (
    EnsoEffect(state=EnsoState.EL_NINO, temp_modifier=0.3, rainfall_modifier=-0.4, drought_risk=0.7,
               description="El Niño: Hotter, drier conditions, increased drought risk"),
    EnsoEffect(state=EnsoState.LA_NINA, temp_modifier=-0.2, rainfall_modifier=0.3, drought_risk=-0.3,
               description="La Niña: Cooler, wetter conditions, reduced drought risk"),
    EnsoEffect(state=EnsoState.NEUTRAL, temp_modifier=0.0, rainfall_modifier=0.0, drought_risk=0.0,
               description="Neutral: Normal seasonal patterns"),
)


# Order matters: crop selection breaks score ties by table order
DEFAULT_CROP_PROFILES = (
    CropProfile(crop_id="maize", optimal_temp_min=18.0, optimal_temp_max=24.0,
                optimal_humidity_min=60.0, optimal_humidity_max=80.0,
                water_requirement_mm=500.0, growing_period_days=120,
                soil_ph_min=5.5, soil_ph_max=7.0),
    CropProfile(crop_id="wheat", optimal_temp_min=15.0, optimal_temp_max=20.0,
                optimal_humidity_min=50.0, optimal_humidity_max=70.0,
                water_requirement_mm=400.0, growing_period_days=150,
                soil_ph_min=6.0, soil_ph_max=7.5),
    CropProfile(crop_id="sorghum", optimal_temp_min=20.0, optimal_temp_max=30.0,
                optimal_humidity_min=40.0, optimal_humidity_max=60.0,
                water_requirement_mm=300.0, growing_period_days=100,
                soil_ph_min=5.0, soil_ph_max=8.0),
    CropProfile(crop_id="cotton", optimal_temp_min=21.0, optimal_temp_max=30.0,
                optimal_humidity_min=50.0, optimal_humidity_max=70.0,
                water_requirement_mm=600.0, growing_period_days=180,
                soil_ph_min=5.5, soil_ph_max=7.0),
    CropProfile(crop_id="tobacco", optimal_temp_min=20.0, optimal_temp_max=28.0,
                optimal_humidity_min=60.0, optimal_humidity_max=80.0,
                water_requirement_mm=400.0, growing_period_days=120,
                soil_ph_min=5.5, soil_ph_max=6.5),
)


class ClimateReferenceData:
    """
    Read-only lookup tables used by the forecasting components.

    Lookups never raise for unknown keys: zones fall back to the default
    zone, ENSO states to neutral and crops to the first profile.
    """

    def __init__(
        self,
        climate_zones: Iterable[ClimateZone],
        seasonal_rules: Iterable[SeasonalRule],
        enso_effects: Iterable[EnsoEffect],
        crop_profiles: Iterable[CropProfile],
        season_by_month: Optional[Mapping[int, str]] = None,
        default_zone_id: str = "highveld",
    ):
        """
        Initialize the tables.

        Args:
            climate_zones: Zone profiles
            seasonal_rules: One rule per calendar month
            enso_effects: One effect per ENSO state
            crop_profiles: Crop requirements, in tie-break order
            season_by_month: Month number to season label
            default_zone_id: Zone used for unknown zone ids
        """
        self._zones = MappingProxyType({z.zone_id: z for z in climate_zones})
        self._rules = MappingProxyType({r.month: r for r in seasonal_rules})
        self._enso = MappingProxyType({e.state: e for e in enso_effects})
        self._crops = MappingProxyType({c.crop_id: c for c in crop_profiles})
        self._seasons = MappingProxyType(dict(season_by_month or SOUTHERN_HEMISPHERE_SEASONS))

        if not self._zones or not self._crops:
            raise ValueError("Reference data needs at least one climate zone and one crop profile")
        missing_months = set(range(1, 13)) - set(self._rules)
        if missing_months:
            raise ValueError(f"Seasonal rules missing for months: {sorted(missing_months)}")
        unmapped_months = set(range(1, 13)) - set(self._seasons)
        if unmapped_months:
            raise ValueError(f"Season mapping missing for months: {sorted(unmapped_months)}")
        if EnsoState.NEUTRAL not in self._enso:
            raise ValueError("ENSO effects must include the neutral state")

        self.default_zone_id = default_zone_id if default_zone_id in self._zones else next(iter(self._zones))

    @classmethod
    def default(cls, default_zone_id: str = "highveld") -> "ClimateReferenceData":
        """Build the built-in Zimbabwe reference tables."""
        return cls(
            climate_zones=DEFAULT_CLIMATE_ZONES,
            seasonal_rules=DEFAULT_SEASONAL_RULES,
            enso_effects=DEFAULT_ENSO_EFFECTS,
            crop_profiles=DEFAULT_CROP_PROFILES,
            default_zone_id=default_zone_id,
        )

    @property
    def zones(self) -> Mapping[str, ClimateZone]:
        return self._zones

    @property
    def crop_profiles(self) -> Mapping[str, CropProfile]:
        return self._crops

    def climate_zone(self, zone_id: Optional[str]) -> ClimateZone:
        """Look up a zone, falling back to the default zone."""
        key = (zone_id or "").strip().lower()
        zone = self._zones.get(key)
        if zone is None:
            logger.warning(f"Unknown climate zone '{zone_id}', using '{self.default_zone_id}'")
            zone = self._zones[self.default_zone_id]
        return zone

    def seasonal_rule(self, month: int) -> SeasonalRule:
        return self._rules[month]

    def enso_effect(self, state: Union[EnsoState, str, None]) -> EnsoEffect:
        """Look up an ENSO effect, falling back to neutral."""
        return self._enso[self.parse_enso_state(state)]

    def parse_enso_state(self, state: Union[EnsoState, str, None]) -> EnsoState:
        if isinstance(state, EnsoState):
            return state if state in self._enso else EnsoState.NEUTRAL
        try:
            parsed = EnsoState((state or "").strip().lower())
        except ValueError:
            logger.warning(f"Unknown ENSO state '{state}', using 'neutral'")
            return EnsoState.NEUTRAL
        return parsed if parsed in self._enso else EnsoState.NEUTRAL

    def crop_profile(self, crop_id: Optional[str]) -> CropProfile:
        """Look up a crop profile, falling back to the first profile."""
        profile = self._crops.get((crop_id or "").strip().lower())
        if profile is None:
            fallback = next(iter(self._crops.values()))
            logger.warning(f"Unknown crop '{crop_id}', using '{fallback.crop_id}'")
            profile = fallback
        return profile

    def season_for_month(self, month: int) -> str:
        return self._seasons[month]

    @property
    def season_labels(self) -> tuple[str, ...]:
        """Season labels in calendar order of first appearance from December."""
        ordered = []
        for month in (12, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11):
            label = self._seasons[month]
            if label not in ordered:
                ordered.append(label)
        return tuple(ordered)

    @staticmethod
    def month_name(month: int) -> str:
        return MONTH_NAMES[month - 1]
