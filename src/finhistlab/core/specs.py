"""
Ledger description classes for FinHistLab.

These are the sparse inputs handed to the engine: period totals for flow
accounts, dated balances for stock accounts, and the ledger that groups them.
All of them are frozen once built.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from .accounts import AccountType, InterpolationMethod
from .seasonality import SeasonalityProfile, SeasonalityRef
from .utils import as_date, months_between, parse_period_string


@dataclass(frozen=True)
class PeriodConstraint:
    """Total reported for an inclusive run of whole months."""

    start: date  # first day of the first month
    end: date  # last day of the last month
    value: float

    def __post_init__(self):
        object.__setattr__(self, "start", as_date(self.start))
        object.__setattr__(self, "end", as_date(self.end))

    @classmethod
    def from_period(cls, period: str, value: float) -> PeriodConstraint:
        """Build from ``"YYYY-MM"`` or ``"YYYY-MM:YYYY-MM"`` notation."""
        start, end = parse_period_string(period)
        return cls(start=start, end=end, value=float(value))

    @property
    def span_months(self) -> int:
        return months_between(self.start, self.end)

    @property
    def period(self) -> str:
        if self.span_months == 1:
            return f"{self.start:%Y-%m}"
        return f"{self.start:%Y-%m}:{self.end:%Y-%m}"


@dataclass(frozen=True)
class Snapshot:
    """Balance of a stock account at a month-end date."""

    date: date
    value: float

    def __post_init__(self):
        object.__setattr__(self, "date", as_date(self.date))


@dataclass(frozen=True)
class FlowAccount:
    """
    Income statement account densified from period totals.

    Attributes:
        name: Unique account name within the ledger
        account_type: Revenue, CostOfSales, OperatingExpense or OtherIncome
        constraints: Reported totals, may nest or overlap
        seasonality: Built-in profile or custom 12-element vector (fiscal order)
        noise_factor: Gaussian noise as a fraction of each month's value, in [0, 1)
    """

    name: str
    account_type: AccountType
    constraints: tuple[PeriodConstraint, ...] = ()
    seasonality: SeasonalityRef = SeasonalityProfile.FLAT
    noise_factor: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "constraints", tuple(self.constraints))
        if isinstance(self.seasonality, list):
            object.__setattr__(self, "seasonality", tuple(self.seasonality))


@dataclass(frozen=True)
class StockAccount:
    """
    Balance sheet account densified from dated snapshots.

    Attributes:
        name: Unique account name within the ledger
        account_type: Asset, Liability or Equity
        snapshots: Known balances at month-end dates
        method: Curve used between snapshots
        noise_factor: Gaussian noise as a fraction of each month's value, in [0, 1)
        is_balancing_account: Absorbs the accounting equation residual
        category: Optional report sub-heading (e.g. "Current Assets")
    """

    name: str
    account_type: AccountType
    snapshots: tuple[Snapshot, ...] = ()
    method: InterpolationMethod = InterpolationMethod.LINEAR
    noise_factor: float = 0.0
    is_balancing_account: bool = False
    category: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "snapshots", tuple(self.snapshots))

    def sorted_snapshots(self) -> list[Snapshot]:
        return sorted(self.snapshots, key=lambda s: s.date)


@dataclass(frozen=True)
class LedgerSpec:
    """Sparse description of one organization's ledger."""

    organization_name: str
    stock_accounts: tuple[StockAccount, ...] = ()
    flow_accounts: tuple[FlowAccount, ...] = ()
    fiscal_year_end_month: int = 12
    metadata: dict = field(default_factory=dict, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "stock_accounts", tuple(self.stock_accounts))
        object.__setattr__(self, "flow_accounts", tuple(self.flow_accounts))

    def account_names(self) -> list[str]:
        return [a.name for a in self.stock_accounts] + [
            a.name for a in self.flow_accounts
        ]

    def account_types(self) -> dict[str, AccountType]:
        types = {a.name: a.account_type for a in self.flow_accounts}
        types.update({a.name: a.account_type for a in self.stock_accounts})
        return types

    def balancing_account(self) -> StockAccount | None:
        """The flagged balancing account, or None. Assumes a validated ledger."""
        for account in self.stock_accounts:
            if account.is_balancing_account:
                return account
        return None

    def get_account(self, name: str) -> StockAccount | FlowAccount | None:
        for account in (*self.stock_accounts, *self.flow_accounts):
            if account.name == name:
                return account
        return None
