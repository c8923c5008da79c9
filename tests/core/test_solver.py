"""
Tests for the hierarchical constraint solver.
"""

from datetime import date

import numpy as np
import pandas as pd
import pytest
from finhistlab.core.noise import NoiseInjector
from finhistlab.core.seasonality import SeasonalityProfile, profile_weights
from finhistlab.core.solver import ConstraintSolver
from finhistlab.core.specs import PeriodConstraint
from finhistlab.core.utils import month_end_range

YEAR_2023 = month_end_range(date(2023, 1, 1), date(2023, 12, 31))
FLAT = profile_weights(SeasonalityProfile.FLAT)


def _solve(constraints, seasonality=FLAT, index=YEAR_2023, solver=None):
    solver = solver or ConstraintSolver()
    return solver.solve("Sales", constraints, seasonality, index)


class TestHierarchicalLocking:
    """Finer constraints win; coarser ones absorb the remainder."""

    def test_month_inside_year(self):
        """February is locked first; the rest of the year shares the remainder."""
        result = _solve(
            [
                PeriodConstraint.from_period("2023-01:2023-12", 120_000),
                PeriodConstraint.from_period("2023-02", 2_000),
            ]
        )
        series = result.series
        assert series[pd.Timestamp("2023-02-28")] == pytest.approx(2_000.0)
        others = series.drop(pd.Timestamp("2023-02-28"))
        np.testing.assert_allclose(others.to_numpy(), 118_000 / 11, rtol=1e-12)
        assert series.sum() == pytest.approx(120_000.0, rel=1e-12)
        assert result.conflicts == []

    def test_quarter_larger_than_year_gives_negative_shares(self):
        """Over-reported sub-periods are honoured and the rest goes negative."""
        result = _solve(
            [
                PeriodConstraint.from_period("2023-01:2023-12", 100_000),
                PeriodConstraint.from_period("2023-01:2023-03", 150_000),
            ]
        )
        series = result.series
        assert series.iloc[:3].sum() == pytest.approx(150_000.0)
        np.testing.assert_allclose(series.iloc[3:].to_numpy(), -50_000 / 9, rtol=1e-12)
        assert series.sum() == pytest.approx(100_000.0)

    def test_nested_quarters_and_months(self):
        result = _solve(
            [
                PeriodConstraint.from_period("2023-01:2023-12", 1_200.0),
                PeriodConstraint.from_period("2023-04:2023-06", 600.0),
                PeriodConstraint.from_period("2023-05", 400.0),
            ]
        )
        series = result.series
        assert series[pd.Timestamp("2023-05-31")] == pytest.approx(400.0)
        assert series[pd.Timestamp("2023-04-30")] == pytest.approx(100.0)
        assert series[pd.Timestamp("2023-06-30")] == pytest.approx(100.0)
        assert series.iloc[3:6].sum() == pytest.approx(600.0)
        assert series.sum() == pytest.approx(1_200.0)

    def test_seasonality_shapes_remainder(self):
        """The remainder follows the profile normalized over unlocked months."""
        result = _solve(
            [PeriodConstraint.from_period("2023-01:2023-12", 1_000.0)],
            seasonality=profile_weights(SeasonalityProfile.RETAIL_PEAK),
        )
        assert result.series[pd.Timestamp("2023-12-31")] == pytest.approx(300.0)
        assert result.series[pd.Timestamp("2023-01-31")] == pytest.approx(45.0)

    def test_uncovered_months_are_zero(self):
        index = month_end_range(date(2023, 1, 1), date(2023, 6, 30))
        result = _solve([PeriodConstraint.from_period("2023-02:2023-03", 500.0)], index=index)
        assert result.series[pd.Timestamp("2023-01-31")] == 0.0
        assert result.series.iloc[3:].eq(0.0).all()
        assert result.series.sum() == pytest.approx(500.0)

    def test_zero_weight_months_split_equally(self):
        """A profile with no weight over the free months falls back to an equal split."""
        weights = profile_weights([0.0] * 11 + [1.0])
        result = _solve(
            [PeriodConstraint.from_period("2023-01:2023-03", 900.0)], seasonality=weights
        )
        np.testing.assert_allclose(result.series.iloc[:3].to_numpy(), 300.0)

    def test_constraint_outside_run_is_skipped(self):
        result = _solve([PeriodConstraint.from_period("2024-01", 50.0)])
        assert result.series.eq(0.0).all()

    def test_series_shape(self):
        result = _solve([PeriodConstraint.from_period("2023-01:2023-12", 12.0)])
        assert result.series.name == "Sales"
        assert result.series.index.equals(YEAR_2023)


class TestConflicts:
    """Fully locked periods are checked, never re-distributed."""

    def test_conflict_reported_and_values_kept(self, caplog):
        constraints = [PeriodConstraint.from_period(f"2023-{m:02d}", 100.0) for m in range(1, 13)]
        constraints.append(PeriodConstraint.from_period("2023-01:2023-12", 1_500.0))
        result = _solve(constraints)

        assert result.series.sum() == pytest.approx(1_200.0)
        assert len(result.conflicts) == 1
        conflict = result.conflicts[0]
        assert conflict.account_name == "Sales"
        assert conflict.expected == 1_500.0
        assert conflict.actual == pytest.approx(1_200.0)
        assert conflict.difference == pytest.approx(300.0)
        assert "Constraint conflict" in caplog.text

    def test_consistent_locked_period_is_silent(self):
        constraints = [PeriodConstraint.from_period(f"2023-{m:02d}", 100.0) for m in range(1, 13)]
        constraints.append(PeriodConstraint.from_period("2023-01:2023-12", 1_200.0000001))
        assert _solve(constraints).conflicts == []


class TestSolverNoise:
    """Noise never breaks a constraint total."""

    def test_totals_hold_under_noise(self):
        solver = ConstraintSolver(NoiseInjector(np.random.default_rng(3)))
        constraints = [
            PeriodConstraint.from_period("2023-01:2023-12", 120_000),
            PeriodConstraint.from_period("2023-01:2023-03", 30_000),
        ]
        series = solver.solve("Sales", constraints, FLAT, YEAR_2023, 0.25).series
        assert series.iloc[:3].sum() == pytest.approx(30_000.0, rel=1e-9)
        assert series.sum() == pytest.approx(120_000.0, rel=1e-9)
        assert series.iloc[3:].nunique() > 1

    def test_zero_noise_matches_no_injector(self):
        constraints = [PeriodConstraint.from_period("2023-01:2023-12", 1_000.0)]
        noisy = ConstraintSolver(NoiseInjector(np.random.default_rng(1)))
        a = noisy.solve("Sales", constraints, FLAT, YEAR_2023, 0.0).series
        b = ConstraintSolver().solve("Sales", constraints, FLAT, YEAR_2023).series
        pd.testing.assert_series_equal(a, b, check_exact=True)
