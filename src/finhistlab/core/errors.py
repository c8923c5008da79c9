"""
Error and diagnostic classes for FinHistLab.

Malformed input aborts a run before any densification happens. Conflicting
period constraints are not fatal: they are collected as diagnostics next to
the best-effort result. A balancing failure is always fatal because every
consumer relies on the accounting equation holding.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .balancer import EquationBreach


class FinHistError(Exception):
    """Base class for all FinHistLab errors."""


class MalformedInputError(FinHistError, ValueError):
    """
    Raised when a ledger description cannot be densified as given.

    **Common Causes:**
    - An account with no constraints or snapshots
    - A custom seasonality vector that does not sum to 1.0
    - A noise factor outside [0, 1)
    - More than one account flagged as the balancing account
    - Dates that are not aligned to month boundaries

    Attributes:
        account_name: Offending account, or None for ledger-level problems
        problems: Every problem found, when raised from a full validation pass
    """

    def __init__(
        self,
        message: str,
        account_name: str | None = None,
        problems: list[str] | None = None,
    ):
        self.account_name = account_name
        self.problems = problems or [message]
        super().__init__(self._fmt(message))

    def _fmt(self, msg: str) -> str:
        prefix = f"[Account {self.account_name}] " if self.account_name else ""
        suffix = ""
        if len(self.problems) > 1:
            suffix = f" (+{len(self.problems) - 1} more problems)"
        return f"{prefix}{msg}{suffix}"


class LedgerLoadError(FinHistError, ValueError):
    """Raised when a ledger description file or mapping cannot be parsed."""


class OverrideError(FinHistError, ValueError):
    """Raised when a ledger override targets a missing account or mixes statements."""


class UnresolvedBalanceError(FinHistError, RuntimeError):
    """
    Raised when the balancer cannot close the accounting equation.

    This indicates a bug in the balancing logic rather than bad input, so it is
    never downgraded to a warning.
    """

    def __init__(self, message: str, breaches: list[EquationBreach] | None = None):
        self.breaches = breaches or []
        super().__init__(message)


class ConstraintConflictWarning(UserWarning):
    """Emitted when a coarse period total disagrees with its locked months."""


@dataclass(frozen=True)
class ConstraintConflict:
    """
    A period constraint whose months were all locked by finer constraints and
    whose total disagrees with them.

    The finer values win; this record only reports the disagreement.
    """

    account_name: str
    start: date
    end: date
    expected: float
    actual: float

    @property
    def difference(self) -> float:
        return self.expected - self.actual

    def __str__(self) -> str:
        return (
            f"{self.account_name}: period {self.start:%Y-%m}..{self.end:%Y-%m} "
            f"reports {self.expected:,.2f} but finer constraints lock "
            f"{self.actual:,.2f} (difference {self.difference:,.2f})"
        )
