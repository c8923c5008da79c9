#!/usr/bin/env python3
"""
Densify a small ledger and print the monthly results.

Shows:
- Overlapping period totals (month, quarter, year) on one revenue line
- Stock accounts with different interpolation methods
- A synthesized balancing account closing the accounting equation
"""

from datetime import date

from finhistlab import (
    AccountType,
    FlowAccount,
    InterpolationMethod,
    LedgerSpec,
    PeriodConstraint,
    Snapshot,
    StockAccount,
    chart_of_accounts,
    densify_ledger,
)


def build_ledger() -> LedgerSpec:
    sales = FlowAccount(
        name="Sales",
        account_type=AccountType.REVENUE,
        constraints=[
            PeriodConstraint.from_period("2023-01:2023-12", 120_000),
            PeriodConstraint.from_period("2023-10:2023-12", 45_000),
            PeriodConstraint.from_period("2023-12", 22_000),
        ],
        seasonality="RetailPeak",
        noise_factor=0.05,
    )
    rent = FlowAccount(
        name="Rent",
        account_type=AccountType.OPERATING_EXPENSE,
        constraints=[PeriodConstraint.from_period("2023-01:2023-12", 18_000)],
    )
    cash = StockAccount(
        name="Cash",
        account_type=AccountType.ASSET,
        snapshots=[
            Snapshot(date(2023, 1, 31), 10_000),
            Snapshot(date(2023, 6, 30), 9_000),
            Snapshot(date(2023, 12, 31), 25_000),
        ],
        method=InterpolationMethod.CURVE,
        noise_factor=0.02,
        category="Current Assets",
    )
    loan = StockAccount(
        name="Bank Loan",
        account_type=AccountType.LIABILITY,
        snapshots=[Snapshot(date(2023, 1, 31), 8_000), Snapshot(date(2023, 12, 31), 6_000)],
        method=InterpolationMethod.STEP,
    )
    return LedgerSpec(
        organization_name="Acme Trading Ltd",
        stock_accounts=[cash, loan],
        flow_accounts=[sales, rent],
    )


def main() -> None:
    ledger = build_ledger()
    output = densify_ledger(ledger, seed=2023)

    print(f"Densified ledger for {output.organization_name}")
    print(output.to_frame().round(2).to_string())
    print()
    print(chart_of_accounts(ledger, output).to_string(index=False))
    print()

    breaches = output.verify(ledger)
    print("Accounting equation holds" if not breaches else f"{len(breaches)} breaches")
    for conflict in output.conflicts:
        print(f"Conflict: {conflict}")


if __name__ == "__main__":
    main()
