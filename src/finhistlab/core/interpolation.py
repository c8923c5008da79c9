"""
Interpolation engine for stock accounts.

Turns a handful of dated balances into one balance per month:

- before the first snapshot the first balance is held flat
- after the last snapshot the last balance is held flat
- between snapshots the account's interpolation strategy decides
- on a snapshot's own month-end the snapshot value is used verbatim

Noise is applied segment by segment, never touching the bounding snapshot
months or the flat-held months.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np
import pandas as pd

from .accounts import InterpolationMethod
from .errors import MalformedInputError
from .interfaces import IInterpolationStrategy
from .noise import AnchorInvariant, NoiseInjector
from .specs import Snapshot

logger = logging.getLogger(__name__)

InterpolationRegistry: dict[InterpolationMethod, IInterpolationStrategy] = {}


def get_strategy(method: InterpolationMethod) -> IInterpolationStrategy:
    """Look up the registered strategy for ``method``."""
    if not InterpolationRegistry:
        import finhistlab.strategies  # noqa: F401  (registers defaults)

    if method not in InterpolationRegistry:
        raise MalformedInputError(f"Unknown interpolation method: {method}")
    return InterpolationRegistry[method]


def _days(values) -> np.ndarray:
    """Day numbers (since the epoch) as floats."""
    return np.asarray(values, dtype="datetime64[D]").astype(np.int64).astype(float)


class InterpolationEngine:
    """
    Densify snapshots into one value per month.

    Args:
        injector: Noise source applied per inter-snapshot segment; None disables noise
    """

    def __init__(self, injector: NoiseInjector | None = None):
        self.injector = injector

    def interpolate(
        self,
        account_name: str,
        snapshots: Sequence[Snapshot],
        method: InterpolationMethod,
        month_index: pd.DatetimeIndex,
        noise_factor: float = 0.0,
    ) -> pd.Series:
        """
        Interpolate one account across the whole run.

        Args:
            account_name: Used for the output series name
            snapshots: Dated balances, sorted by date, at month-end dates
            method: Linear, Step or Curve
            month_index: Month-end dates of the whole run
            noise_factor: Passed to the injector for every segment

        Returns:
            pd.Series aligned to ``month_index``

        Raises:
            MalformedInputError: If there are no snapshots
        """
        if not snapshots:
            raise MalformedInputError("Stock account has no snapshots", account_name)

        strategy = get_strategy(method)
        knot_t = _days([s.date for s in snapshots])
        knot_v = np.array([s.value for s in snapshots], dtype=float)
        t = _days(month_index.to_numpy())

        out = np.empty(len(t))
        before = t < knot_t[0]
        after = t > knot_t[-1]
        inside = ~(before | after)
        out[before] = knot_v[0]
        out[after] = knot_v[-1]

        if len(knot_t) > 1 and inside.any():
            segment = np.searchsorted(knot_t, t[inside], side="right") - 1
            segment = np.clip(segment, 0, len(knot_t) - 2)
            out[inside] = strategy.sample(t[inside], knot_t, knot_v, segment)

        # Anchors are exact regardless of method
        anchor_pos = np.searchsorted(t, knot_t)
        for pos, kt, kv in zip(anchor_pos, knot_t, knot_v):
            if pos < len(t) and t[pos] == kt:
                out[pos] = kv
            else:
                logger.debug(
                    "%s: snapshot on day %d is not a month-end of the run",
                    account_name,
                    int(kt),
                )

        if self.injector is not None and noise_factor > 0.0:
            self._apply_segment_noise(out, anchor_pos, noise_factor)

        return pd.Series(out, index=month_index.copy(), name=account_name)

    def _apply_segment_noise(
        self, out: np.ndarray, anchor_pos: np.ndarray, noise_factor: float
    ) -> None:
        for lo, hi in zip(anchor_pos[:-1], anchor_pos[1:]):
            if hi - lo < 2:
                continue
            segment = out[lo : hi + 1]
            out[lo : hi + 1] = self.injector.inject(
                segment, noise_factor, AnchorInvariant.endpoints(len(segment))
            )
