"""
Tests for seasonality profiles and fiscal-year rotation.
"""

import logging

import numpy as np
import pytest
from finhistlab.core.errors import MalformedInputError
from finhistlab.core.seasonality import (
    SeasonalityProfile,
    SeasonalityTable,
    SeasonalityWeights,
    profile_weights,
    rotate_weights_for_fiscal_year,
)


class TestSeasonalityWeights:
    """Construction-time invariants of SeasonalityWeights."""

    def test_accepts_exact_vector(self):
        """A vector summing to exactly 1.0 is stored unchanged."""
        raw = [0.1] * 10 + [0.0, 0.0]
        weights = SeasonalityWeights(raw)
        assert len(weights) == 12
        assert weights[0] == pytest.approx(0.1)
        assert weights.values.sum() == pytest.approx(1.0)

    def test_rescales_within_tolerance(self, caplog):
        """A vector within 0.01 of 1.0 is rescaled and a warning is logged."""
        raw = [0.0835] * 12  # sums to 1.002
        with caplog.at_level(logging.WARNING, logger="finhistlab.core.seasonality"):
            weights = SeasonalityWeights(raw)
        assert weights.values.sum() == pytest.approx(1.0, abs=1e-12)
        assert weights[0] == pytest.approx(1.0 / 12.0)
        assert "rescaling" in caplog.text

    @pytest.mark.parametrize(
        "raw",
        [
            [1.0 / 11.0] * 11,  # wrong length
            [0.5] * 12,  # sums to 6.0
            [-0.1] + [1.1 / 11.0] * 11,  # negative weight
            [float("nan")] + [1.0 / 11.0] * 11,  # non-finite
        ],
    )
    def test_rejects_invalid_vectors(self, raw):
        """Length, sum, sign and finiteness violations are malformed input."""
        with pytest.raises(MalformedInputError):
            SeasonalityWeights(raw)

    def test_values_are_read_only(self):
        """Stored weights cannot be modified in place."""
        weights = profile_weights(SeasonalityProfile.FLAT)
        with pytest.raises(ValueError):
            weights.values[0] = 0.5

    def test_equality_and_hash(self):
        """Equal vectors compare and hash equal."""
        a = SeasonalityWeights([1.0 / 12.0] * 12)
        b = profile_weights(SeasonalityProfile.FLAT)
        assert a == b
        assert hash(a) == hash(b)


class TestBuiltinProfiles:
    """Built-in profile shapes."""

    @pytest.mark.parametrize("profile", list(SeasonalityProfile))
    def test_every_profile_sums_to_one(self, profile):
        weights = profile_weights(profile)
        assert weights.values.sum() == pytest.approx(1.0, abs=1e-12)
        assert np.all(weights.values >= 0.0)

    def test_retail_peak_final_month(self):
        """Retail peak puts 30% in the last month of the fiscal year."""
        weights = profile_weights(SeasonalityProfile.RETAIL_PEAK)
        assert weights[11] == pytest.approx(0.30)
        assert weights[11] == max(weights)

    def test_summer_high_months(self):
        weights = profile_weights(SeasonalityProfile.SUMMER_HIGH)
        assert all(weights[i] == pytest.approx(0.12) for i in range(3, 8))

    def test_saas_growth_is_increasing(self):
        weights = profile_weights(SeasonalityProfile.SAAS_GROWTH).values
        assert np.all(np.diff(weights) > 0.0)

    @pytest.mark.parametrize(
        "label,expected",
        [
            ("RetailPeak", SeasonalityProfile.RETAIL_PEAK),
            ("retail_peak", SeasonalityProfile.RETAIL_PEAK),
            ("Summer High", SeasonalityProfile.SUMMER_HIGH),
            ("FLAT", SeasonalityProfile.FLAT),
            ("saasgrowth", SeasonalityProfile.SAAS_GROWTH),
        ],
    )
    def test_parse_labels(self, label, expected):
        assert SeasonalityProfile.parse(label) is expected

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown seasonality profile"):
            SeasonalityProfile.parse("Winter")


class TestFiscalRotation:
    """Fiscal-ordered weights mapped onto calendar months."""

    def test_december_year_end_is_identity(self):
        weights = profile_weights(SeasonalityProfile.RETAIL_PEAK)
        assert rotate_weights_for_fiscal_year(weights, 12) is weights

    def test_june_year_end(self):
        """With a June year end, fiscal month 0 is July and the peak lands in June."""
        weights = profile_weights(SeasonalityProfile.RETAIL_PEAK)
        rotated = rotate_weights_for_fiscal_year(weights, 6)
        assert rotated[5] == pytest.approx(0.30)  # June
        assert rotated[6] == pytest.approx(weights[0])  # July
        assert rotated.values.sum() == pytest.approx(1.0)

    def test_invalid_year_end(self):
        weights = profile_weights(SeasonalityProfile.FLAT)
        with pytest.raises(MalformedInputError):
            rotate_weights_for_fiscal_year(weights, 13)


class TestSeasonalityTable:
    """Per-run lookup table."""

    def test_builtin_weights_are_memoized_per_table(self):
        table = SeasonalityTable(6)
        first = table.calendar_weights(SeasonalityProfile.SUMMER_HIGH)
        assert table.calendar_weights("summer_high") is first
        assert SeasonalityTable(6).calendar_weights("summer_high") is not first

    def test_custom_vector(self):
        """Custom vectors are validated and rotated like built-ins."""
        custom = [0.0] * 11 + [1.0]
        table = SeasonalityTable(3)
        weights = table.calendar_weights(custom)
        assert weights[2] == pytest.approx(1.0)  # March closes the fiscal year

    def test_rejects_invalid_year_end(self):
        with pytest.raises(MalformedInputError):
            SeasonalityTable(0)
