"""
Step interpolation strategy.
"""

from __future__ import annotations

import numpy as np

from finhistlab.core.interfaces import IInterpolationStrategy


class InterpolationStep(IInterpolationStrategy):
    """
    Hold the last known balance until the next snapshot (method: 'step').

    Suited to balances that change in discrete events, such as share capital.
    """

    def sample(
        self,
        t: np.ndarray,
        knot_t: np.ndarray,
        knot_v: np.ndarray,
        segment: np.ndarray,
    ) -> np.ndarray:
        return knot_v[segment].astype(float)
