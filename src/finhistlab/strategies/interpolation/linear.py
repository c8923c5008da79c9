"""
Linear interpolation strategy.
"""

from __future__ import annotations

import numpy as np

from finhistlab.core.interfaces import IInterpolationStrategy


class InterpolationLinear(IInterpolationStrategy):
    """
    Straight line between neighbouring snapshots (method: 'linear').

    The position along the segment is the elapsed share of calendar days, so a
    month-end halfway in time is valued halfway between the two balances.
    """

    def sample(
        self,
        t: np.ndarray,
        knot_t: np.ndarray,
        knot_v: np.ndarray,
        segment: np.ndarray,
    ) -> np.ndarray:
        t0 = knot_t[segment]
        t1 = knot_t[segment + 1]
        v0 = knot_v[segment]
        v1 = knot_v[segment + 1]
        return v0 + (v1 - v0) * (t - t0) / (t1 - t0)
