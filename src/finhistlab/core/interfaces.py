"""
Strategy interface protocols for FinHistLab.
Defines the contract every interpolation strategy must satisfy.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class IInterpolationStrategy(Protocol):
    """
    Contract for STOCK interpolation strategies.
    Responsibilities: value a balance strictly between two snapshots.

    The engine handles flat holds outside the snapshot window and pins exact
    snapshot dates; a strategy only sees interior points.
    """

    def sample(
        self,
        t: np.ndarray,
        knot_t: np.ndarray,
        knot_v: np.ndarray,
        segment: np.ndarray,
    ) -> np.ndarray:
        """
        Value the balance at times ``t``.

        Args:
            t: Target times in days, one per output month
            knot_t: Snapshot times in days, strictly increasing
            knot_v: Snapshot values aligned with ``knot_t``
            segment: For each target, index ``i`` with ``knot_t[i] <= t < knot_t[i + 1]``

        Returns:
            np.ndarray of values, same length as ``t``
        """
        ...


__all__ = ["IInterpolationStrategy"]
