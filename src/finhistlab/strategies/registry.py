"""
Strategy registry setup for FinHistLab.
"""

from finhistlab.core.accounts import InterpolationMethod
from finhistlab.core.interpolation import InterpolationRegistry

from .interpolation.curve import InterpolationCurve
from .interpolation.linear import InterpolationLinear
from .interpolation.step import InterpolationStep


def register_defaults():
    """
    Register the default interpolation strategies in the global registry.

    Registered Strategies:
        - 'linear': Straight line between snapshots
        - 'step': Hold the previous snapshot
        - 'curve': Catmull-Rom spline through every snapshot

    Note:
        This function is automatically called when the module is imported.
        The strategies are stateless, so sharing them across runs is safe.
    """
    InterpolationRegistry[InterpolationMethod.LINEAR] = InterpolationLinear()
    InterpolationRegistry[InterpolationMethod.STEP] = InterpolationStep()
    InterpolationRegistry[InterpolationMethod.CURVE] = InterpolationCurve()
