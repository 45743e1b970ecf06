"""Tests for the stability class lookup table."""

import pytest

from models.stability import (
    STABILITY_CLASSES,
    STABILITY_TABLE,
    compass_point,
    dispersion_outlook,
    get_stability_profile,
    normalize_stability_class,
    stability_legend,
)


class TestStabilityTable:
    def test_exactly_six_classes(self):
        assert STABILITY_CLASSES == ("A", "B", "C", "D", "E", "F")

    def test_spread_rate_strictly_decreasing(self):
        """A (very unstable) spreads fastest, F (stable) slowest."""
        rates = [STABILITY_TABLE[c].spread_rate for c in STABILITY_CLASSES]
        for wider, narrower in zip(rates, rates[1:]):
            assert wider > narrower

    def test_table_is_immutable(self):
        with pytest.raises(TypeError):
            STABILITY_TABLE["G"] = STABILITY_TABLE["D"]

    def test_display_color_uses_base_alpha(self):
        assert get_stability_profile("A").display_color == "rgba(239, 68, 68, 0.3)"

    def test_rgba_custom_alpha(self):
        assert get_stability_profile("F").rgba(0.7) == "rgba(99, 102, 241, 0.7)"


class TestFallback:
    @pytest.mark.parametrize("value", ["Z", "", None, 3, "neutral"])
    def test_unknown_falls_back_to_neutral(self, value):
        assert get_stability_profile(value).code == "D"

    def test_lowercase_and_whitespace_normalized(self):
        assert normalize_stability_class(" b ") == "B"

    def test_neutral_label(self):
        assert get_stability_profile("D").label == "Neutral"


class TestCompassPoint:
    @pytest.mark.parametrize("bearing,expected", [
        (0.0, "N"),
        (22.5, "NNE"),
        (90.0, "E"),
        (180.0, "S"),
        (270.0, "W"),
        (348.0, "NNW"),
        (355.0, "N"),
        (360.0, "N"),
        (-90.0, "W"),
    ])
    def test_sectors(self, bearing, expected):
        assert compass_point(bearing) == expected


class TestDispersionOutlook:
    def test_unstable_is_good(self):
        for code in "ABC":
            assert dispersion_outlook(code)[0] == "good"

    def test_neutral_is_moderate(self):
        assert dispersion_outlook("D")[0] == "moderate"

    def test_stable_is_poor(self):
        rating, text = dispersion_outlook("F")
        assert rating == "poor"
        assert "linger" in text

    def test_unknown_is_moderate(self):
        assert dispersion_outlook(None)[0] == "moderate"


class TestLegend:
    def test_ordered_entries(self):
        legend = stability_legend()
        assert [code for code, _, _ in legend] == list("ABCDEF")
        assert legend[0][1] == "Very Unstable"
        assert legend[0][2].endswith("0.7)")
