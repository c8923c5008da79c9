"""
Validation and reporting utilities for FinHistLab.

Every ledger is checked in full before any densification runs. Problems are
collected into a ``ValidationReport`` so a producer sees all of them at once;
``ensure_valid`` turns a failing report into a ``MalformedInputError``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from .accounts import AccountType, InterpolationMethod
from .balancer import BALANCING_ACCOUNT_NAME
from .errors import MalformedInputError
from .seasonality import profile_weights
from .specs import FlowAccount, LedgerSpec, StockAccount
from .utils import is_month_end, is_month_start


@dataclass(frozen=True)
class Problem:
    """One reason a ledger cannot be densified."""

    message: str
    account_name: str | None = None

    def __str__(self) -> str:
        if self.account_name is None:
            return self.message
        return f"{self.account_name}: {self.message}"


@dataclass
class ValidationReport:
    """
    Structured validation report for a ledger description.

    Provides machine-readable results so producers of sparse input can fix
    every problem in one pass.
    """

    problems: list[Problem] = field(default_factory=list)

    def add(self, message: str, account_name: str | None = None) -> None:
        self.problems.append(Problem(message, account_name))

    def has_errors(self) -> bool:
        return bool(self.problems)

    def is_valid(self) -> bool:
        """Check if validation passed."""
        return not self.has_errors()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "problems": [
                {"account": p.account_name, "message": p.message}
                for p in self.problems
            ],
            "is_valid": self.is_valid(),
        }

    def __str__(self) -> str:
        """Human-readable string representation."""
        if self.is_valid():
            return "✅ Validation passed"
        lines = ["❌ Validation failed"]
        lines.extend(f"  {p}" for p in self.problems)
        return "\n".join(lines)


def _check_noise(report: ValidationReport, name: str, noise_factor: Any) -> None:
    if (
        isinstance(noise_factor, bool)
        or not isinstance(noise_factor, (int, float))
        or not math.isfinite(noise_factor)
        or not 0.0 <= noise_factor < 1.0
    ):
        report.add(f"noise factor {noise_factor!r} must be in [0, 1)", name)


def _check_value(report: ValidationReport, name: str, value: Any, what: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        report.add(f"{what} value {value!r} is not a number", name)
    elif not math.isfinite(value):
        report.add(f"{what} has non-finite value {value!r}", name)


def _validate_flow(report: ValidationReport, account: FlowAccount) -> None:
    name = account.name
    if not isinstance(account.account_type, AccountType) or not account.account_type.is_flow():
        report.add(
            f"account type {account.account_type} is not a flow classification", name
        )
    if not account.constraints:
        report.add("flow account has no period constraints", name)
    for constraint in account.constraints:
        label = f"constraint {constraint.start}..{constraint.end}"
        if not isinstance(constraint.start, date) or not isinstance(constraint.end, date):
            report.add(f"{label} needs calendar dates", name)
            continue
        if not is_month_start(constraint.start):
            report.add(f"{label} must start on the first day of a month", name)
        if not is_month_end(constraint.end):
            report.add(f"{label} must end on the last day of a month", name)
        if constraint.end < constraint.start:
            report.add(f"{label} ends before it starts", name)
        _check_value(report, name, constraint.value, label)
    _check_noise(report, name, account.noise_factor)
    try:
        profile_weights(account.seasonality)
    except (MalformedInputError, ValueError, TypeError) as exc:
        report.add(f"invalid seasonality: {exc}", name)


def _validate_stock(report: ValidationReport, account: StockAccount) -> None:
    name = account.name
    if not isinstance(account.account_type, AccountType) or not account.account_type.is_stock():
        report.add(
            f"account type {account.account_type} is not a stock classification", name
        )
    if not isinstance(account.method, InterpolationMethod):
        report.add(f"unknown interpolation method {account.method!r}", name)
    if not account.snapshots:
        report.add("stock account has no snapshots", name)
    seen: set[date] = set()
    for snapshot in account.snapshots:
        label = f"snapshot {snapshot.date}"
        if not isinstance(snapshot.date, date):
            report.add(f"{label} needs a calendar date", name)
            continue
        if not is_month_end(snapshot.date):
            report.add(f"{label} is not a month-end date", name)
        if snapshot.date in seen:
            report.add(f"duplicate {label}", name)
        seen.add(snapshot.date)
        _check_value(report, name, snapshot.value, label)
    _check_noise(report, name, account.noise_factor)


def validate_ledger(
    ledger: LedgerSpec, *, synthesized_name: str = BALANCING_ACCOUNT_NAME
) -> ValidationReport:
    """
    Check a ledger description without raising.

    Args:
        ledger: The sparse ledger to check
        synthesized_name: Name the balancer would give a synthesized account

    Returns:
        ValidationReport listing every problem found
    """
    report = ValidationReport()

    fy_end = ledger.fiscal_year_end_month
    if not isinstance(fy_end, int) or not 1 <= fy_end <= 12:
        report.add(f"fiscal year end month {fy_end!r} must be between 1 and 12")

    names = ledger.account_names()
    duplicates = sorted({n for n in names if names.count(n) > 1})
    for dup in duplicates:
        report.add("account name is not unique within the ledger", dup)

    for account in ledger.flow_accounts:
        _validate_flow(report, account)
    for account in ledger.stock_accounts:
        _validate_stock(report, account)

    flagged = [a.name for a in ledger.stock_accounts if a.is_balancing_account]
    if len(flagged) > 1:
        report.add(
            f"only one balancing account is allowed, found {len(flagged)}: "
            f"{', '.join(flagged)}"
        )
    elif not flagged and synthesized_name in names:
        report.add(
            "name is reserved for the synthesized balancing account; "
            "flag a balancing account or rename this one",
            synthesized_name,
        )

    return report


def ensure_valid(
    ledger: LedgerSpec, *, synthesized_name: str = BALANCING_ACCOUNT_NAME
) -> None:
    """
    Fail fast on malformed input.

    Raises:
        MalformedInputError: Naming the first offending account and carrying
            every problem in ``problems``
    """
    report = validate_ledger(ledger, synthesized_name=synthesized_name)
    if report.has_errors():
        first = report.problems[0]
        raise MalformedInputError(
            first.message,
            account_name=first.account_name,
            problems=[str(p) for p in report.problems],
        )
