"""
Seasonality profiles for distributing period totals across months.

A profile is 12 non-negative weights summing to 1.0, listed in fiscal order
(index 0 is the first month after the fiscal year end). A ``SeasonalityTable``
is built per run for one fiscal calendar and hands out weights re-ordered by
calendar month (index 0 is January).
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from enum import Enum
from typing import Union

import numpy as np

from .errors import MalformedInputError
from .utils import fiscal_month_index

logger = logging.getLogger(__name__)

WEIGHT_SUM_TOLERANCE = 0.01


class SeasonalityProfile(Enum):
    """Built-in seasonality shapes."""

    FLAT = "flat"  # 1/12 each month
    RETAIL_PEAK = "retail_peak"  # heavy final month (holiday trade)
    SUMMER_HIGH = "summer_high"  # weighted to months 4-9
    SAAS_GROWTH = "saas_growth"  # monotonically increasing

    @classmethod
    def parse(cls, raw: str | SeasonalityProfile) -> SeasonalityProfile:
        if isinstance(raw, cls):
            return raw
        key = "".join(ch for ch in str(raw).lower() if ch.isalnum())
        for member in cls:
            if member.value.replace("_", "") == key:
                return member
        raise ValueError(f"Unknown seasonality profile '{raw}'")


class SeasonalityWeights:
    """
    Twelve non-negative month weights summing to 1.0.

    The invariant is enforced here, at construction. Vectors whose sum is within
    ``tolerance`` of 1.0 are accepted and rescaled so the stored weights sum to
    1.0; anything further off is rejected.

    Raises:
        MalformedInputError: Wrong length, negative or non-finite weights, or a
            sum outside tolerance
    """

    __slots__ = ("_values",)

    def __init__(
        self, values: Sequence[float], *, tolerance: float = WEIGHT_SUM_TOLERANCE
    ):
        arr = np.asarray(values, dtype=float)
        if arr.shape != (12,):
            raise MalformedInputError(
                f"Seasonality needs exactly 12 weights, got {arr.size}"
            )
        if not np.all(np.isfinite(arr)):
            raise MalformedInputError("Seasonality weights must be finite numbers")
        if np.any(arr < 0.0):
            raise MalformedInputError("Seasonality weights must be non-negative")
        total = float(arr.sum())
        if not math.isclose(total, 1.0, rel_tol=0.0, abs_tol=tolerance):
            raise MalformedInputError(
                f"Seasonality weights must sum to 1.0 (got {total:.6f})"
            )
        if total != 1.0:
            if abs(total - 1.0) > 1e-9:
                logger.warning(
                    "Seasonality weights sum to %.6f, rescaling to 1.0", total
                )
            arr = arr / total
        arr.setflags(write=False)
        self._values = arr

    @property
    def values(self) -> np.ndarray:
        """Read-only array of the 12 weights."""
        return self._values

    def __getitem__(self, idx: int) -> float:
        return float(self._values[idx])

    def __len__(self) -> int:
        return 12

    def __iter__(self):
        return iter(self._values.tolist())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SeasonalityWeights):
            return NotImplemented
        return bool(np.array_equal(self._values, other._values))

    def __hash__(self) -> int:
        return hash(self._values.tobytes())

    def __repr__(self) -> str:
        return f"SeasonalityWeights({np.round(self._values, 4).tolist()})"


SeasonalityRef = Union[SeasonalityProfile, SeasonalityWeights, Sequence[float]]


def _saas_growth() -> list[float]:
    base = 0.06
    increment = 0.04 / 11.0
    raw = [base + i * increment for i in range(12)]
    total = sum(raw)
    return [w / total for w in raw]


# fmt: off
_PROFILE_WEIGHTS: dict[SeasonalityProfile, tuple[float, ...]] = {
    SeasonalityProfile.FLAT: (1.0 / 12.0,) * 12,
    SeasonalityProfile.RETAIL_PEAK: (
        0.045, 0.045, 0.045, 0.055, 0.055, 0.060,
        0.065, 0.070, 0.075, 0.080, 0.105, 0.300,
    ),
    SeasonalityProfile.SUMMER_HIGH: (
        0.05, 0.05, 0.05, 0.12, 0.12, 0.12,
        0.12, 0.12, 0.07, 0.07, 0.07, 0.04,
    ),
    SeasonalityProfile.SAAS_GROWTH: tuple(_saas_growth()),
}
# fmt: on


def profile_weights(ref: SeasonalityRef) -> SeasonalityWeights:
    """
    Resolve a profile reference to fiscal-ordered weights.

    Args:
        ref: A built-in profile, a profile name, a ``SeasonalityWeights`` or a
            custom 12-element sequence

    Returns:
        Validated weights in fiscal order
    """
    if isinstance(ref, SeasonalityWeights):
        return ref
    if isinstance(ref, str):
        ref = SeasonalityProfile.parse(ref)
    if isinstance(ref, SeasonalityProfile):
        return SeasonalityWeights(_PROFILE_WEIGHTS[ref])
    return SeasonalityWeights(ref)


def rotate_weights_for_fiscal_year(
    weights: SeasonalityWeights, fiscal_year_end_month: int
) -> SeasonalityWeights:
    """
    Re-order fiscal-ordered weights onto calendar months (index 0 = January).

    With a December year end the fiscal and calendar orders coincide.
    """
    if not 1 <= fiscal_year_end_month <= 12:
        raise MalformedInputError(
            f"Invalid fiscal year end month {fiscal_year_end_month}: must be 1..12"
        )
    if fiscal_year_end_month == 12:
        return weights
    fiscal = weights.values
    calendar = [
        fiscal[fiscal_month_index(month, fiscal_year_end_month)] for month in range(1, 13)
    ]
    return SeasonalityWeights(calendar)


class SeasonalityTable:
    """
    Per-run lookup of calendar-ordered weights for one fiscal calendar.

    Built-in profiles are resolved lazily and memoized on the instance, so two
    runs never share state.
    """

    def __init__(self, fiscal_year_end_month: int = 12):
        if not 1 <= fiscal_year_end_month <= 12:
            raise MalformedInputError(
                f"Invalid fiscal year end month {fiscal_year_end_month}: must be 1..12"
            )
        self.fiscal_year_end_month = fiscal_year_end_month
        self._builtin: dict[SeasonalityProfile, SeasonalityWeights] = {}

    def calendar_weights(self, ref: SeasonalityRef) -> SeasonalityWeights:
        """Weights for ``ref`` indexed by calendar month (0 = January)."""
        if isinstance(ref, str):
            ref = SeasonalityProfile.parse(ref)
        if isinstance(ref, SeasonalityProfile):
            if ref not in self._builtin:
                self._builtin[ref] = rotate_weights_for_fiscal_year(
                    profile_weights(ref), self.fiscal_year_end_month
                )
            return self._builtin[ref]
        return rotate_weights_for_fiscal_year(
            profile_weights(ref), self.fiscal_year_end_month
        )
