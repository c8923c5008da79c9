"""
Densification engine for orchestrating a ledger run.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from datetime import date

import numpy as np
import pandas as pd

from .accounts import AccountType
from .balancer import BALANCE_REL_TOL, BALANCING_ACCOUNT_NAME, AccountingBalancer
from .errors import ConstraintConflict, ConstraintConflictWarning
from .interpolation import InterpolationEngine
from .noise import NoiseInjector
from .results import LedgerOutput
from .seasonality import SeasonalityTable
from .solver import CONFLICT_ABS_TOL, CONFLICT_REL_TOL, ConstraintSolver
from .specs import LedgerSpec
from .utils import month_end_range
from .validation import ensure_valid

logger = logging.getLogger(__name__)


@dataclass
class DensifyConfig:
    """Configuration options for a densification run."""

    seed: int | None = None
    apply_noise: bool = True
    conflict_rel_tol: float = CONFLICT_REL_TOL
    conflict_abs_tol: float = CONFLICT_ABS_TOL
    balance_rel_tol: float = BALANCE_REL_TOL
    balancing_account_name: str = BALANCING_ACCOUNT_NAME
    warn_on_conflict: bool = True


def ledger_date_range(ledger: LedgerSpec) -> tuple[date, date] | None:
    """
    Earliest and latest date touched by any constraint or snapshot.

    Returns:
        ``(first, last)`` or None for a ledger with no dated facts
    """
    dates: list[date] = []
    for flow in ledger.flow_accounts:
        for constraint in flow.constraints:
            dates.append(constraint.start)
            dates.append(constraint.end)
    for stock in ledger.stock_accounts:
        dates.extend(s.date for s in stock.snapshots)
    if not dates:
        return None
    return min(dates), max(dates)


class Densifier:
    """
    Turn a sparse ledger into dense monthly series.

    The run is a pure function of the ledger and the seed:
    1. Validate the whole ledger, failing fast on malformed input
    2. Build a seasonality table for the ledger's fiscal calendar
    3. Derive the shared month range from every constraint and snapshot
    4. Solve every flow account and interpolate every stock account
    5. Close the accounting equation once through the balancing account

    Each account draws noise from its own generator spawned from the run seed,
    so results do not depend on how many draws another account made.
    """

    def __init__(self, config: DensifyConfig | None = None):
        self.config = config or DensifyConfig()

    def run(self, ledger: LedgerSpec) -> LedgerOutput:
        """
        Densify ``ledger``.

        Returns:
            LedgerOutput with one series per input account, plus a synthesized
            balancing account when none is designated

        Raises:
            MalformedInputError: If the ledger fails validation
            UnresolvedBalanceError: If the accounting equation cannot be closed
        """
        cfg = self.config
        ensure_valid(ledger, synthesized_name=cfg.balancing_account_name)

        table = SeasonalityTable(ledger.fiscal_year_end_month)
        index = self._month_index(ledger)
        rngs = self._account_generators(ledger)

        series: dict[str, pd.Series] = {}
        account_types: dict[str, AccountType] = {}
        conflicts: list[ConstraintConflict] = []

        for flow in ledger.flow_accounts:
            solver = ConstraintSolver(
                self._injector(rngs[flow.name]),
                rel_tol=cfg.conflict_rel_tol,
                abs_tol=cfg.conflict_abs_tol,
            )
            result = solver.solve(
                flow.name,
                flow.constraints,
                table.calendar_weights(flow.seasonality),
                index,
                flow.noise_factor,
            )
            series[flow.name] = result.series
            account_types[flow.name] = flow.account_type
            conflicts.extend(result.conflicts)
            logger.debug("Solved flow account '%s'", flow.name)

        stock_series: dict[str, pd.Series] = {}
        for stock in ledger.stock_accounts:
            engine = InterpolationEngine(self._injector(rngs[stock.name]))
            stock_series[stock.name] = engine.interpolate(
                stock.name,
                stock.sorted_snapshots(),
                stock.method,
                index,
                stock.noise_factor,
            )
            account_types[stock.name] = stock.account_type
            logger.debug("Interpolated stock account '%s'", stock.name)

        designated = ledger.balancing_account()
        balancer = AccountingBalancer(
            rel_tol=cfg.balance_rel_tol, synthesized_name=cfg.balancing_account_name
        )
        balanced = balancer.balance(
            stock_series,
            account_types,
            designated.name if designated is not None else None,
            index=index,
        )
        stock_series[balanced.account_name] = balanced.series
        account_types[balanced.account_name] = balanced.account_type

        # Stocks first, then flows, each in input order
        ordered = dict(stock_series)
        ordered.update(series)

        if cfg.warn_on_conflict:
            for conflict in conflicts:
                warnings.warn(str(conflict), ConstraintConflictWarning, stacklevel=3)

        return LedgerOutput(
            series=ordered,
            index=index,
            account_types=account_types,
            balancing_account=balanced.account_name,
            synthesized_balancing=balanced.synthesized,
            conflicts=conflicts,
            organization_name=ledger.organization_name,
        )

    def _injector(self, rng: np.random.Generator) -> NoiseInjector | None:
        if not self.config.apply_noise:
            return None
        return NoiseInjector(rng)

    def _account_generators(self, ledger: LedgerSpec) -> dict[str, np.random.Generator]:
        names = ledger.account_names()
        children = np.random.SeedSequence(self.config.seed).spawn(len(names))
        return {name: np.random.default_rng(child) for name, child in zip(names, children)}

    @staticmethod
    def _month_index(ledger: LedgerSpec) -> pd.DatetimeIndex:
        bounds = ledger_date_range(ledger)
        if bounds is None:
            return pd.DatetimeIndex([], dtype="datetime64[ns]", name="date")
        return month_end_range(*bounds)


def densify_ledger(
    ledger: LedgerSpec, *, seed: int | None = None, apply_noise: bool = True
) -> LedgerOutput:
    """
    Densify a sparse ledger into monthly series.

    Args:
        ledger: Validated or raw ledger description
        seed: Seed for the noise generators; the same seed gives identical output
        apply_noise: False disables noise for every account

    Returns:
        LedgerOutput satisfying the period totals and the accounting equation

    Example:
        ```python
        from finhistlab import densify_ledger, load_ledger

        output = densify_ledger(load_ledger("ledger.yaml"), seed=42)
        frame = output.to_frame()
        ```
    """
    return Densifier(DensifyConfig(seed=seed, apply_noise=apply_noise)).run(ledger)
