"""
Accounting equation enforcement for densified balance sheets.

Interpolated balances are each faithful to their own snapshots but do not, in
general, satisfy Assets = Liabilities + Equity month by month. The balancer
routes the monthly residual into exactly one stock account:

- a designated Liability or Equity account absorbs ``+residual``
- a designated Asset account absorbs ``-residual``
- with nothing designated, an Equity account named
  ``"Balancing Equity Adjustment"`` is synthesized and carries the residual

where ``residual = assets - (liabilities + equity)`` including the designated
account's pre-balance value. No other series is ever modified.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd

from .accounts import AccountType
from .errors import UnresolvedBalanceError

if TYPE_CHECKING:
    from .results import LedgerOutput
    from .specs import LedgerSpec

logger = logging.getLogger(__name__)

BALANCE_REL_TOL = 1e-6
BALANCING_ACCOUNT_NAME = "Balancing Equity Adjustment"


@dataclass(frozen=True)
class EquationBreach:
    """A month where Assets differs from Liabilities + Equity beyond tolerance."""

    date: pd.Timestamp
    assets: float
    liabilities: float
    equity: float

    @property
    def difference(self) -> float:
        return self.assets - (self.liabilities + self.equity)

    def __str__(self) -> str:
        return (
            f"{self.date:%Y-%m-%d}: Assets ({self.assets:,.2f}) != Liabilities "
            f"({self.liabilities:,.2f}) + Equity ({self.equity:,.2f}), "
            f"difference {self.difference:,.2f}"
        )


@dataclass
class BalanceResult:
    """The one series the balancer wrote, and whether it had to create it."""

    account_name: str
    account_type: AccountType
    synthesized: bool
    series: pd.Series


def _sum_by_type(
    series: Mapping[str, pd.Series],
    account_types: Mapping[str, AccountType],
    index: pd.DatetimeIndex,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Per-month totals of assets, liabilities and equity."""
    assets = np.zeros(len(index))
    liabilities = np.zeros(len(index))
    equity = np.zeros(len(index))
    for name, values in series.items():
        account_type = account_types.get(name)
        if account_type is None or not account_type.is_stock():
            continue
        aligned = values.reindex(index).to_numpy(dtype=float)
        if account_type.is_asset():
            assets += aligned
        elif account_type.is_liability():
            liabilities += aligned
        else:
            equity += aligned
    return assets, liabilities, equity


def find_breaches(
    series: Mapping[str, pd.Series],
    account_types: Mapping[str, AccountType],
    index: pd.DatetimeIndex,
    *,
    rel_tol: float = BALANCE_REL_TOL,
) -> list[EquationBreach]:
    """
    Months where the accounting equation does not close.

    The tolerance is relative to the larger side of the equation, with a floor
    of one currency unit so empty months compare absolutely.
    """
    assets, liabilities, equity = _sum_by_type(series, account_types, index)
    breaches = []
    for i, stamp in enumerate(index):
        a, liab, eq = assets[i], liabilities[i], equity[i]
        scale = max(1.0, abs(a), abs(liab + eq))
        diff = a - (liab + eq)
        if not math.isfinite(diff) or abs(diff) > rel_tol * scale:
            breaches.append(
                EquationBreach(
                    date=stamp,
                    assets=float(a),
                    liabilities=float(liab),
                    equity=float(eq),
                )
            )
    return breaches


class AccountingBalancer:
    """
    Close the accounting equation for every month of a run.

    Args:
        rel_tol: Relative tolerance of the post-condition check
        synthesized_name: Name used when no balancing account is designated
    """

    def __init__(
        self,
        *,
        rel_tol: float = BALANCE_REL_TOL,
        synthesized_name: str = BALANCING_ACCOUNT_NAME,
    ):
        self.rel_tol = rel_tol
        self.synthesized_name = synthesized_name

    def balance(
        self,
        stock_series: Mapping[str, pd.Series],
        account_types: Mapping[str, AccountType],
        balancing_account: str | None = None,
        index: pd.DatetimeIndex | None = None,
    ) -> BalanceResult:
        """
        Compute the corrected balancing series.

        Args:
            stock_series: Densified stock accounts, all on the same month index
            account_types: Classification of every name in ``stock_series``
            balancing_account: Designated account name, or None to synthesize
            index: Month-end dates of the run; defaults to the union of the inputs

        Returns:
            BalanceResult holding a new series; the inputs are not modified

        Raises:
            UnresolvedBalanceError: If the equation still fails after adjustment
        """
        if index is None:
            index = self._common_index(stock_series)
        assets, liabilities, equity = _sum_by_type(stock_series, account_types, index)
        residual = assets - (liabilities + equity)

        if balancing_account is None:
            name = self.synthesized_name
            account_type = AccountType.EQUITY
            values = residual
            synthesized = True
        else:
            name = balancing_account
            account_type = account_types[name]
            pre = stock_series[name].reindex(index).to_numpy(dtype=float)
            if account_type.is_asset():
                values = pre - residual
            else:
                values = pre + residual
            synthesized = False

        result = BalanceResult(
            account_name=name,
            account_type=account_type,
            synthesized=synthesized,
            series=pd.Series(values, index=index.copy(), name=name),
        )
        self._check(stock_series, account_types, index, result)
        logger.debug(
            "Balanced %d months through '%s' (max |residual| %.2f)",
            len(index),
            name,
            float(np.abs(residual).max()) if len(residual) else 0.0,
        )
        return result

    def _check(
        self,
        stock_series: Mapping[str, pd.Series],
        account_types: Mapping[str, AccountType],
        index: pd.DatetimeIndex,
        result: BalanceResult,
    ) -> None:
        merged = dict(stock_series)
        merged[result.account_name] = result.series
        types = dict(account_types)
        types[result.account_name] = result.account_type
        breaches = find_breaches(merged, types, index, rel_tol=self.rel_tol)
        if breaches:
            raise UnresolvedBalanceError(
                f"Accounting equation still open in {len(breaches)} month(s) after "
                f"balancing through '{result.account_name}'; first: {breaches[0]}",
                breaches=breaches,
            )

    @staticmethod
    def _common_index(stock_series: Mapping[str, pd.Series]) -> pd.DatetimeIndex:
        index = None
        for values in stock_series.values():
            index = values.index if index is None else index.union(values.index)
        if index is None:
            return pd.DatetimeIndex([], name="date")
        return index


def verify_accounting_equation(
    ledger: LedgerSpec,
    output: LedgerOutput,
    tolerance: float = BALANCE_REL_TOL,
) -> list[EquationBreach]:
    """
    Check a finished ledger output against the accounting equation.

    Read-only: neither argument is modified.

    Args:
        ledger: The ledger description the output was built from
        output: Densified ledger output
        tolerance: Relative tolerance per month

    Returns:
        Every failing month; an empty list means the equation holds throughout
    """
    account_types = dict(output.account_types)
    account_types.update(ledger.account_types())
    return find_breaches(output.series, account_types, output.index, rel_tol=tolerance)
