"""
Interpolation strategies for stock accounts.
"""

from .curve import InterpolationCurve
from .linear import InterpolationLinear
from .step import InterpolationStep

__all__ = [
    "InterpolationCurve",
    "InterpolationLinear",
    "InterpolationStep",
]
