"""
Hierarchical constraint solver for flow accounts.

Reported totals often overlap: a February figure, a Q1 figure and a full-year
figure for the same revenue line. The solver honours the finest facts first
and lets coarser totals absorb only what is left:

1. Every month of the run starts unlocked.
2. Constraints are processed from the shortest span to the longest (ties by
   start month).
3. Each constraint spreads ``value - locked_sum`` over its still-unlocked
   months in proportion to their seasonality weights, then locks them.
4. A constraint whose months are already all locked is only checked; a
   disagreement is reported as a ``ConstraintConflict`` and changes nothing.
5. Months no constraint touches stay at 0.0.

The grid is three flat arrays indexed by month position (values, locked flag,
weight), so there is no per-month object graph.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from .errors import ConstraintConflict
from .noise import NoiseInjector, SumInvariant
from .seasonality import SeasonalityWeights
from .specs import PeriodConstraint
from .utils import to_month

logger = logging.getLogger(__name__)

CONFLICT_REL_TOL = 1e-6
CONFLICT_ABS_TOL = 1e-6


@dataclass
class SolveResult:
    """Dense series for one flow account plus any constraint conflicts."""

    series: pd.Series
    conflicts: list[ConstraintConflict] = field(default_factory=list)


class ConstraintSolver:
    """
    Densify period constraints into one value per month.

    Args:
        injector: Noise source applied per resolved batch; None disables noise
        rel_tol: Relative tolerance for the consistency check of fully locked periods
        abs_tol: Absolute floor for the same check
    """

    def __init__(
        self,
        injector: NoiseInjector | None = None,
        *,
        rel_tol: float = CONFLICT_REL_TOL,
        abs_tol: float = CONFLICT_ABS_TOL,
    ):
        self.injector = injector
        self.rel_tol = rel_tol
        self.abs_tol = abs_tol

    def solve(
        self,
        account_name: str,
        constraints: Sequence[PeriodConstraint],
        seasonality: SeasonalityWeights,
        month_index: pd.DatetimeIndex,
        noise_factor: float = 0.0,
    ) -> SolveResult:
        """
        Resolve overlapping constraints for one account.

        Args:
            account_name: Used for the output series name and diagnostics
            constraints: Period totals in any order
            seasonality: Calendar-ordered weights (index 0 = January)
            month_index: Month-end dates of the whole run
            noise_factor: Passed to the injector for every batch

        Returns:
            SolveResult with a series aligned to ``month_index``
        """
        months = month_index.to_numpy().astype("datetime64[M]")
        n = len(months)
        values = np.zeros(n)
        locked = np.zeros(n, dtype=bool)
        calendar_idx = months.astype(np.int64) % 12
        weights = seasonality.values[calendar_idx]
        conflicts: list[ConstraintConflict] = []

        ordered = sorted(constraints, key=lambda c: (c.span_months, c.start))
        for constraint in ordered:
            lo, hi = self._window(constraint, months)
            if lo > hi:
                logger.debug(
                    "%s: constraint %s lies outside the run, skipped",
                    account_name,
                    constraint.period,
                )
                continue

            positions = np.arange(lo, hi + 1)
            window_locked = locked[positions]
            locked_sum = float(values[positions[window_locked]].sum())

            if window_locked.all():
                if not math.isclose(
                    locked_sum,
                    constraint.value,
                    rel_tol=self.rel_tol,
                    abs_tol=self.abs_tol,
                ):
                    conflict = ConstraintConflict(
                        account_name=account_name,
                        start=constraint.start,
                        end=constraint.end,
                        expected=constraint.value,
                        actual=locked_sum,
                    )
                    logger.warning("Constraint conflict: %s", conflict)
                    conflicts.append(conflict)
                continue

            remaining = constraint.value - locked_sum
            free = positions[~window_locked]
            shares = self._distribute(remaining, weights[free])
            if self.injector is not None:
                shares = self.injector.inject(shares, noise_factor, SumInvariant())

            values[free] = shares
            locked[free] = True

        series = pd.Series(values, index=month_index.copy(), name=account_name)
        return SolveResult(series=series, conflicts=conflicts)

    @staticmethod
    def _window(constraint: PeriodConstraint, months: np.ndarray) -> tuple[int, int]:
        """Inclusive position range of the constraint, clipped to the run."""
        first = months[0]
        lo = int((to_month(constraint.start) - first).astype(np.int64))
        hi = int((to_month(constraint.end) - first).astype(np.int64))
        return max(lo, 0), min(hi, len(months) - 1)

    @staticmethod
    def _distribute(remaining: float, weights: np.ndarray) -> np.ndarray:
        total = weights.sum()
        if total > 0.0:
            return remaining * (weights / total)
        # Degenerate profile over these months
        return np.full(weights.size, remaining / weights.size)
