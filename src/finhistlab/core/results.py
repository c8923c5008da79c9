"""
Results containers for FinHistLab.

``LedgerOutput`` owns one dense monthly series per account and knows how to
present them as pandas frames. It is produced fresh by every run.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd

from .accounts import AccountType
from .errors import ConstraintConflict

if TYPE_CHECKING:
    from .balancer import EquationBreach
    from .specs import LedgerSpec

# Chart of accounts sections in presentation order
SECTIONS: list[tuple[str, AccountType]] = [
    ("Assets", AccountType.ASSET),
    ("Liabilities", AccountType.LIABILITY),
    ("Equity", AccountType.EQUITY),
    ("Revenue", AccountType.REVENUE),
    ("Cost of Sales", AccountType.COST_OF_SALES),
    ("Operating Expenses", AccountType.OPERATING_EXPENSE),
    ("Other Income", AccountType.OTHER_INCOME),
]


@dataclass
class LedgerOutput:
    """
    Dense monthly series for every account of a ledger.

    Attributes:
        series: Account name -> pd.Series indexed by month-end date
        index: Month-end dates shared by every series
        account_types: Classification of every series, including a synthesized one
        balancing_account: Name of the series the balancer adjusted or created
        synthesized_balancing: True when ``balancing_account`` was not in the input
        conflicts: Coarse constraints that disagreed with finer ones
        organization_name: Copied from the ledger description
    """

    series: dict[str, pd.Series]
    index: pd.DatetimeIndex
    account_types: dict[str, AccountType]
    balancing_account: str | None = None
    synthesized_balancing: bool = False
    conflicts: list[ConstraintConflict] = field(default_factory=list)
    organization_name: str = ""

    def __getitem__(self, name: str) -> pd.Series:
        return self.series[name]

    def __contains__(self, name: object) -> bool:
        return name in self.series

    def __iter__(self) -> Iterator[str]:
        return iter(self.series)

    def __len__(self) -> int:
        return len(self.series)

    def keys(self):
        return self.series.keys()

    def items(self):
        return self.series.items()

    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    def accounts_of(self, account_type: AccountType) -> list[str]:
        return [n for n, t in self.account_types.items() if t is account_type]

    def to_frame(self) -> pd.DataFrame:
        """Wide frame: month-end index, one column per account in output order."""
        if not self.series:
            return pd.DataFrame(index=self.index)
        return pd.DataFrame({name: s for name, s in self.series.items()}, index=self.index)

    def to_tidy(self) -> pd.DataFrame:
        """Long frame with columns ``date, account, account_type, behavior, value``."""
        frames = []
        for name, values in self.series.items():
            account_type = self.account_types[name]
            frames.append(
                pd.DataFrame(
                    {
                        "date": values.index,
                        "account": name,
                        "account_type": account_type.value,
                        "behavior": account_type.behavior.value,
                        "value": values.to_numpy(),
                    }
                )
            )
        if not frames:
            return pd.DataFrame(
                columns=["date", "account", "account_type", "behavior", "value"]
            )
        return pd.concat(frames, ignore_index=True)

    def balance_sheet_totals(self) -> pd.DataFrame:
        """
        Monthly totals of assets, liabilities and equity plus the residual.

        The ``residual`` column is ``assets - (liabilities + equity)`` and is
        zero, within tolerance, for a balanced output.
        """
        totals = {}
        for label, account_type in (
            ("assets", AccountType.ASSET),
            ("liabilities", AccountType.LIABILITY),
            ("equity", AccountType.EQUITY),
        ):
            names = self.accounts_of(account_type)
            if names:
                totals[label] = sum(
                    (self.series[n].reindex(self.index) for n in names),
                    start=pd.Series(np.zeros(len(self.index)), index=self.index),
                )
            else:
                totals[label] = pd.Series(np.zeros(len(self.index)), index=self.index)
        frame = pd.DataFrame(totals, index=self.index)
        frame["residual"] = frame["assets"] - (frame["liabilities"] + frame["equity"])
        return frame

    def verify(self, ledger: LedgerSpec, tolerance: float | None = None) -> list[EquationBreach]:
        """Read-only accounting equation check; see ``verify_accounting_equation``."""
        from .balancer import BALANCE_REL_TOL, verify_accounting_equation

        return verify_accounting_equation(
            ledger, self, BALANCE_REL_TOL if tolerance is None else tolerance
        )


def chart_of_accounts(ledger: LedgerSpec, output: LedgerOutput | None = None) -> pd.DataFrame:
    """
    Tabulate the ledger's accounts by statement section.

    Accounts are sorted by name within each section. When ``output`` is given,
    a synthesized balancing account is listed under Equity.

    Returns:
        DataFrame with columns ``section, account, account_type, behavior,
        category, is_balancing_account, synthesized``
    """
    rows = []
    for account in ledger.stock_accounts:
        rows.append(
            {
                "account": account.name,
                "account_type": account.account_type,
                "category": account.category,
                "is_balancing_account": account.is_balancing_account,
                "synthesized": False,
            }
        )
    for account in ledger.flow_accounts:
        rows.append(
            {
                "account": account.name,
                "account_type": account.account_type,
                "category": None,
                "is_balancing_account": False,
                "synthesized": False,
            }
        )
    if output is not None and output.synthesized_balancing and output.balancing_account:
        rows.append(
            {
                "account": output.balancing_account,
                "account_type": AccountType.EQUITY,
                "category": None,
                "is_balancing_account": True,
                "synthesized": True,
            }
        )

    section_of = {t: label for label, t in SECTIONS}
    order = {t: i for i, (_, t) in enumerate(SECTIONS)}
    rows.sort(key=lambda r: (order[r["account_type"]], r["account"]))

    columns = [
        "section",
        "account",
        "account_type",
        "behavior",
        "category",
        "is_balancing_account",
        "synthesized",
    ]
    return pd.DataFrame(
        [
            {
                **r,
                "section": section_of[r["account_type"]],
                "behavior": r["account_type"].behavior.value,
                "account_type": r["account_type"].value,
            }
            for r in rows
        ],
        columns=columns,
    )
