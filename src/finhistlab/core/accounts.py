"""
Account classification for FinHistLab.

Account variants are a closed set of classifications. Whether an account is
densified as a flow (period totals) or a stock (point-in-time balances) is
derived from its classification, never configured separately.
"""

from __future__ import annotations

from enum import Enum


class AccountBehavior(Enum):
    """How an account's values aggregate over time."""

    FLOW = "flow"  # activity over a period, sums across months
    STOCK = "stock"  # balance at an instant


class AccountType(Enum):
    """Account type classification."""

    REVENUE = "revenue"
    COST_OF_SALES = "cost_of_sales"
    OPERATING_EXPENSE = "operating_expense"
    OTHER_INCOME = "other_income"
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"

    @property
    def behavior(self) -> AccountBehavior:
        """Flow for income statement types, stock for balance sheet types."""
        if self in _STOCK_TYPES:
            return AccountBehavior.STOCK
        return AccountBehavior.FLOW

    def is_flow(self) -> bool:
        return self.behavior is AccountBehavior.FLOW

    def is_stock(self) -> bool:
        return self.behavior is AccountBehavior.STOCK

    def is_asset(self) -> bool:
        """Check if account is an asset."""
        return self is AccountType.ASSET

    def is_liability(self) -> bool:
        """Check if account is a liability."""
        return self is AccountType.LIABILITY

    def is_equity(self) -> bool:
        """Check if account is equity."""
        return self is AccountType.EQUITY

    @classmethod
    def parse(cls, raw: str | AccountType) -> AccountType:
        """
        Resolve an account type from its enum value or a PascalCase label.

        Accepts ``"asset"``, ``"Asset"``, ``"CostOfSales"``, ``"cost_of_sales"``
        and ``"cost of sales"`` alike.
        """
        if isinstance(raw, cls):
            return raw
        key = _normalize_label(raw)
        for member in cls:
            if _normalize_label(member.value) == key:
                return member
        raise ValueError(f"Unknown account type '{raw}'")


_STOCK_TYPES = frozenset({AccountType.ASSET, AccountType.LIABILITY, AccountType.EQUITY})


class InterpolationMethod(Enum):
    """Curve used to fill months between balance snapshots."""

    LINEAR = "linear"
    STEP = "step"
    CURVE = "curve"

    @classmethod
    def parse(cls, raw: str | InterpolationMethod) -> InterpolationMethod:
        if isinstance(raw, cls):
            return raw
        key = _normalize_label(raw)
        for member in cls:
            if member.value == key:
                return member
        raise ValueError(f"Unknown interpolation method '{raw}'")


def _normalize_label(raw: str) -> str:
    """Fold PascalCase, snake_case and spaced labels onto one comparable key."""
    if not isinstance(raw, str):
        raise ValueError(f"Expected a string label, got {type(raw).__name__}")
    return "".join(ch for ch in raw.lower() if ch.isalnum())
