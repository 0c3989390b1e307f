"""
test_classifier.py — Severity thresholds and reading → SignalPoint normalization.

Run:
    pytest tests/test_classifier.py -v
"""

import math
from datetime import datetime, timezone

import pytest

from oasis.models.signal import (
    HydroReading,
    SeismicReading,
    Severity,
    SignalKind,
    SoilReading,
    ThermalReading,
)
from oasis.services.classifier import classify, make_id, normalize, normalize_all

from stubs import OBSERVED, gauge, heat, quake


# ── classify ──────────────────────────────────────────────────────────────────

class TestClassify:

    @pytest.mark.parametrize("magnitude, expected", [
        (7.2, Severity.CRITICAL),
        (7.0, Severity.CRITICAL),
        (6.99, Severity.HIGH),
        (6.9, Severity.HIGH),
        (6.0, Severity.HIGH),
        (4.0, Severity.MEDIUM),
        (3.9, Severity.LOW),
        (0.0, Severity.LOW),
    ])
    def test_seismic_tiers(self, magnitude, expected):
        assert classify(SignalKind.SEISMIC, magnitude) is expected

    @pytest.mark.parametrize("temperature, expected", [
        (44.0, Severity.CRITICAL),
        (42.0, Severity.CRITICAL),
        (41.9, Severity.HIGH),
        (39.0, Severity.HIGH),
        (36.0, Severity.MEDIUM),
        (35.9, Severity.LOW),
    ])
    def test_thermal_tiers(self, temperature, expected):
        assert classify(SignalKind.THERMAL, temperature) is expected

    @pytest.mark.parametrize("level, expected", [
        (8.0, Severity.CRITICAL),
        (7.9, Severity.HIGH),
        (6.5, Severity.HIGH),
        (4.5, Severity.MEDIUM),
        (4.4, Severity.LOW),
    ])
    def test_hydrological_tiers(self, level, expected):
        assert classify(SignalKind.HYDROLOGICAL, level) is expected

    @pytest.mark.parametrize("ph, expected", [
        (7.0, Severity.LOW),
        (6.51, Severity.LOW),
        (7.49, Severity.LOW),
        (7.5, Severity.MEDIUM),
        (6.5, Severity.MEDIUM),
        (6.01, Severity.MEDIUM),
        (6.0, Severity.HIGH),
        (5.6, Severity.HIGH),
        (5.5, Severity.CRITICAL),
        (5.4, Severity.CRITICAL),
        (8.0, Severity.HIGH),
        (8.4, Severity.HIGH),
        (8.5, Severity.CRITICAL),
    ])
    def test_soil_tiers_both_tails(self, ph, expected):
        assert classify(SignalKind.SOIL, ph) is expected

    def test_accepts_string_kind(self):
        assert classify("seismic", 6.5) is Severity.HIGH

    def test_deterministic(self):
        results = {classify(SignalKind.THERMAL, 40.2) for _ in range(50)}
        assert results == {Severity.HIGH}


# ── make_id ───────────────────────────────────────────────────────────────────

class TestMakeId:

    def test_prefix_per_kind(self):
        assert make_id(SignalKind.SEISMIC, "us7000abcd") == "seismic_us7000abcd"
        assert make_id(SignalKind.THERMAL, "nasa_3") == "thermal_nasa_3"
        assert make_id(SignalKind.HYDROLOGICAL, "gauge_1") == "hydro_gauge_1"
        assert make_id(SignalKind.SOIL, "nasa_3") == "soil_nasa_3"

    def test_same_upstream_id_different_kinds_do_not_collide(self):
        assert make_id(SignalKind.THERMAL, "nasa_0") != make_id(SignalKind.SOIL, "nasa_0")


# ── normalize ─────────────────────────────────────────────────────────────────

class TestNormalize:

    def test_seismic_round_trip(self):
        """M7.2 near Dhaka → critical point carrying magnitude and description."""
        point = normalize(quake(magnitude=7.2, depth=12.5))
        assert point.id == "seismic_us7000abcd"
        assert point.kind is SignalKind.SEISMIC
        assert point.severity is Severity.CRITICAL
        assert point.value == 7.2
        assert point.latitude == 23.81 and point.longitude == 90.41
        assert point.description == "Dhaka, Bangladesh - Magnitude 7.2 earthquake"
        assert point.extra.magnitude == 7.2
        assert point.extra.depth == 12.5
        assert point.observed_at == OBSERVED
        assert point.source == "USGS"

    def test_thermal_description(self):
        point = normalize(heat(temperature_c=39.46))
        assert point.description == "Dhanmondi: 39.5°C surface temperature"
        assert point.severity is Severity.HIGH
        assert point.extra is None

    def test_hydro_description(self):
        point = normalize(gauge(water_level_m=7.0))
        assert point.id == "hydro_gauge_0"
        assert point.description == "Flood monitoring at Karnaphuli River - 7.0m water level"
        assert point.severity is Severity.HIGH

    def test_soil_extra_and_description(self):
        reading = SoilReading(upstream_id="nasa_2", lat=24.0, lng=90.0, station="Gazipur",
                              ph=5.2, moisture=33.3, soil_temperature=30.1)
        point = normalize(reading)
        assert point.severity is Severity.CRITICAL
        assert point.description == "Gazipur: pH 5.20, 33.3% moisture"
        assert point.extra.ph == 5.2
        assert point.extra.moisture == 33.3
        assert point.extra.soil_temperature == 30.1

    def test_missing_observed_at_uses_now(self):
        now = datetime(2026, 10, 17, tzinfo=timezone.utc)
        reading = ThermalReading(upstream_id="x", lat=23.0, lng=90.0, station="X", temperature_c=30)
        assert normalize(reading, now=now).observed_at == now

    @pytest.mark.parametrize("lat, lng", [(91.0, 90.0), (-90.5, 90.0), (23.0, 181.0), (math.nan, 90.0)])
    def test_out_of_range_coordinates_dropped(self, lat, lng):
        assert normalize(heat(lat=lat, lng=lng)) is None

    def test_non_finite_value_dropped(self):
        reading = HydroReading(upstream_id="g", lat=22.0, lng=91.0, station="G", water_level_m=math.inf)
        assert normalize(reading) is None

    def test_rejects_non_reading(self):
        with pytest.raises(TypeError):
            normalize({"lat": 1, "lng": 2})

    def test_same_reading_same_point(self):
        reading = SeismicReading(upstream_id="a", lat=22.5, lng=91.9, magnitude=4.4, observed_at=OBSERVED)
        assert normalize(reading) == normalize(reading)


class TestNormalizeAll:

    def test_drops_invalid_keeps_order(self):
        points = normalize_all([quake(), heat(lat=200.0), gauge()])
        assert [p.id for p in points] == ["seismic_us7000abcd", "hydro_gauge_0"]

    def test_empty(self):
        assert normalize_all([]) == []
