"""
Strategy implementations for FinHistLab.

Interpolation strategies value stock balances between snapshots, keyed by
``InterpolationMethod``. Importing this module registers the defaults.
"""

from .interpolation import (
    InterpolationCurve,
    InterpolationLinear,
    InterpolationStep,
)
from .registry import register_defaults

# Register all default strategies when module is imported
register_defaults()

__all__ = [
    "InterpolationCurve",
    "InterpolationLinear",
    "InterpolationStep",
    "register_defaults",
]
