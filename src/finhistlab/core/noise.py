"""
Noise injection for densified series.

Noise makes generated months look organic without breaking the facts they were
derived from. Flow batches keep their total (``SumInvariant``); stock segments
keep their anchor months untouched (``AnchorInvariant``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import numpy as np


@dataclass(frozen=True)
class SumInvariant:
    """Perturbed values must still sum to the original batch total."""


@dataclass(frozen=True)
class AnchorInvariant:
    """Positions flagged in ``anchor_mask`` are never perturbed."""

    anchor_mask: tuple[bool, ...]

    @classmethod
    def endpoints(cls, length: int) -> AnchorInvariant:
        """Anchor the first and last position of a segment of ``length`` values."""
        mask = [False] * length
        if length:
            mask[0] = True
            mask[-1] = True
        return cls(tuple(mask))


Invariant = Union[SumInvariant, AnchorInvariant]


class NoiseInjector:
    """
    Adds zero-mean Gaussian noise with standard deviation ``|value| * noise_factor``.

    Args:
        rng: Source of randomness; the same generator state yields the same output
    """

    def __init__(self, rng: np.random.Generator):
        self.rng = rng

    def inject(
        self, values: np.ndarray, noise_factor: float, preserve: Invariant
    ) -> np.ndarray:
        """
        Perturb ``values`` and restore the requested invariant.

        A zero noise factor returns the input untouched without drawing from
        the generator.

        Args:
            values: Provisional monthly values for one batch or segment
            noise_factor: Fraction of each value used as the standard deviation
            preserve: ``SumInvariant()`` or ``AnchorInvariant(mask)``

        Returns:
            New array of the same length
        """
        values = np.asarray(values, dtype=float)
        if noise_factor == 0.0 or values.size == 0:
            return values

        if isinstance(preserve, SumInvariant):
            return self._inject_sum_preserving(values, noise_factor)
        if isinstance(preserve, AnchorInvariant):
            return self._inject_anchor_preserving(values, noise_factor, preserve)
        raise TypeError(f"Unsupported invariant {preserve!r}")

    def _perturb(self, values: np.ndarray, noise_factor: float) -> np.ndarray:
        sigma = np.abs(values) * noise_factor
        return values + self.rng.normal(0.0, 1.0, size=values.shape) * sigma

    def _inject_sum_preserving(
        self, values: np.ndarray, noise_factor: float
    ) -> np.ndarray:
        target = values.sum()
        perturbed = self._perturb(values, noise_factor)

        # Spread the drift back in proportion to each month's size
        delta = target - perturbed.sum()
        magnitude = np.abs(perturbed)
        total_magnitude = magnitude.sum()
        if total_magnitude > 0.0:
            perturbed = perturbed + delta * (magnitude / total_magnitude)
        else:
            perturbed = perturbed + delta / perturbed.size
        return perturbed

    def _inject_anchor_preserving(
        self, values: np.ndarray, noise_factor: float, preserve: AnchorInvariant
    ) -> np.ndarray:
        mask = np.asarray(preserve.anchor_mask, dtype=bool)
        if mask.shape != values.shape:
            raise ValueError(
                f"anchor mask has {mask.size} entries for {values.size} values"
            )
        free = ~mask
        if not free.any():
            return values
        out = values.copy()
        out[free] = self._perturb(values[free], noise_factor)
        return out
