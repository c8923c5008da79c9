"""
Catmull-Rom curve interpolation strategy.
"""

from __future__ import annotations

import numpy as np

from finhistlab.core.interfaces import IInterpolationStrategy


class InterpolationCurve(IInterpolationStrategy):
    """
    Smooth Catmull-Rom spline through every snapshot (method: 'curve').

    Each segment ``[t_i, t_{i+1}]`` is shaped by the four control values
    ``v_{i-1}, v_i, v_{i+1}, v_{i+2}``. At the ends of the series the missing
    neighbour is reflected through the boundary snapshot (``2*v_0 - v_1`` and
    ``2*v_n - v_{n-1}``), so a curve over two snapshots is the straight line
    between them. The local parameter is the elapsed share of the segment's
    days, so the curve passes through ``v_i`` at ``t_i`` and ``v_{i+1}`` at
    ``t_{i+1}``.

    Note:
        Unlike linear interpolation the curve may overshoot between snapshots
        when neighbouring segments change direction.
    """

    def sample(
        self,
        t: np.ndarray,
        knot_t: np.ndarray,
        knot_v: np.ndarray,
        segment: np.ndarray,
    ) -> np.ndarray:
        last = len(knot_v) - 1
        p1 = knot_v[segment]
        p2 = knot_v[segment + 1]
        p0 = np.where(segment > 0, knot_v[np.maximum(segment - 1, 0)], 2.0 * p1 - p2)
        p3 = np.where(
            segment + 2 <= last,
            knot_v[np.minimum(segment + 2, last)],
            2.0 * p2 - p1,
        )

        u = (t - knot_t[segment]) / (knot_t[segment + 1] - knot_t[segment])
        u2 = u * u
        u3 = u2 * u
        return 0.5 * (
            2.0 * p1
            + (p2 - p0) * u
            + (2.0 * p0 - 5.0 * p1 + 4.0 * p2 - p3) * u2
            + (3.0 * p1 - p0 - 3.0 * p2 + p3) * u3
        )
