"""
Tests for ledger validation.
"""

from datetime import date, datetime

import pandas as pd
import pytest
from finhistlab.core.accounts import AccountType, InterpolationMethod
from finhistlab.core.balancer import BALANCING_ACCOUNT_NAME
from finhistlab.core.errors import MalformedInputError
from finhistlab.core.specs import (
    FlowAccount,
    LedgerSpec,
    PeriodConstraint,
    Snapshot,
    StockAccount,
)
from finhistlab.core.validation import ensure_valid, validate_ledger


def _sales(**overrides) -> FlowAccount:
    fields = {
        "name": "Sales",
        "account_type": AccountType.REVENUE,
        "constraints": [PeriodConstraint.from_period("2023-01:2023-12", 1_000.0)],
    }
    fields.update(overrides)
    return FlowAccount(**fields)


def _cash(**overrides) -> StockAccount:
    fields = {
        "name": "Cash",
        "account_type": AccountType.ASSET,
        "snapshots": [Snapshot(date(2023, 12, 31), 500.0)],
    }
    fields.update(overrides)
    return StockAccount(**fields)


def _ledger(stocks=(), flows=(), **kwargs) -> LedgerSpec:
    return LedgerSpec("Acme", stock_accounts=stocks, flow_accounts=flows, **kwargs)


class TestValidLedger:
    def test_minimal_ledger_passes(self):
        report = validate_ledger(_ledger([_cash()], [_sales()]))
        assert report.is_valid()
        assert str(report) == "✅ Validation passed"
        assert report.to_dict() == {"problems": [], "is_valid": True}
        ensure_valid(_ledger([_cash()], [_sales()]))

    def test_empty_ledger_passes(self):
        assert validate_ledger(_ledger()).is_valid()

    def test_timestamp_dates_are_accepted(self):
        """Datetimes and pandas timestamps are read as their calendar date."""
        stock = _cash(
            snapshots=[
                Snapshot(pd.Timestamp("2023-06-30"), 400.0),
                Snapshot(datetime(2023, 12, 31, 18, 30), 500.0),
            ]
        )
        flow = _sales(
            constraints=[
                PeriodConstraint(pd.Timestamp("2023-01-01"), pd.Timestamp("2023-12-31"), 1.0)
            ]
        )
        assert validate_ledger(_ledger([stock], [flow])).is_valid()
        assert type(stock.snapshots[0].date) is date
        assert flow.constraints[0].end == date(2023, 12, 31)


class TestMalformedInput:
    """Each malformed input is reported against the offending account."""

    @pytest.mark.parametrize(
        "flow,fragment",
        [
            (_sales(constraints=[]), "no period constraints"),
            (_sales(account_type=AccountType.ASSET), "not a flow classification"),
            (_sales(noise_factor=1.0), "noise factor"),
            (_sales(noise_factor=-0.1), "noise factor"),
            (_sales(seasonality=[0.5] * 12), "invalid seasonality"),
            (_sales(seasonality=[0.1] * 11), "invalid seasonality"),
            (
                _sales(constraints=[PeriodConstraint(date(2023, 1, 15), date(2023, 1, 31), 1.0)]),
                "first day",
            ),
            (
                _sales(constraints=[PeriodConstraint(date(2023, 1, 1), date(2023, 1, 30), 1.0)]),
                "last day",
            ),
            (
                _sales(constraints=[PeriodConstraint(date(2023, 3, 1), date(2023, 1, 31), 1.0)]),
                "ends before it starts",
            ),
            (
                _sales(
                    constraints=[
                        PeriodConstraint(date(2023, 1, 1), date(2023, 1, 31), float("inf"))
                    ]
                ),
                "non-finite",
            ),
            (
                _sales(constraints=[PeriodConstraint(date(2023, 1, 1), date(2023, 1, 31), True)]),
                "not a number",
            ),
        ],
    )
    def test_flow_problems(self, flow, fragment):
        with pytest.raises(MalformedInputError) as excinfo:
            ensure_valid(_ledger(flows=[flow]))
        assert excinfo.value.account_name == "Sales"
        assert any(fragment in p for p in excinfo.value.problems)

    @pytest.mark.parametrize(
        "stock,fragment",
        [
            (_cash(snapshots=[]), "no snapshots"),
            (_cash(account_type=AccountType.REVENUE), "not a stock classification"),
            (_cash(snapshots=[Snapshot(date(2023, 12, 30), 1.0)]), "not a month-end"),
            (
                _cash(
                    snapshots=[
                        Snapshot(date(2023, 12, 31), 1.0),
                        Snapshot(date(2023, 12, 31), 2.0),
                    ]
                ),
                "duplicate snapshot",
            ),
            (_cash(method="spline"), "unknown interpolation method"),
            (_cash(noise_factor=2.0), "noise factor"),
            (_cash(snapshots=[Snapshot(date(2023, 12, 31), False)]), "not a number"),
            (_cash(noise_factor=True), "noise factor"),
        ],
    )
    def test_stock_problems(self, stock, fragment):
        with pytest.raises(MalformedInputError) as excinfo:
            ensure_valid(_ledger(stocks=[stock]))
        assert excinfo.value.account_name == "Cash"
        assert any(fragment in p for p in excinfo.value.problems)

    def test_duplicate_names(self):
        report = validate_ledger(_ledger([_cash(name="Sales")], [_sales()]))
        assert not report.is_valid()
        assert report.problems[0].account_name == "Sales"

    def test_two_balancing_accounts(self):
        stocks = [
            _cash(is_balancing_account=True),
            _cash(
                name="Equity",
                account_type=AccountType.EQUITY,
                is_balancing_account=True,
            ),
        ]
        report = validate_ledger(_ledger(stocks))
        assert any("only one balancing account" in str(p) for p in report.problems)

    def test_reserved_synthesized_name(self):
        clash = _cash(name=BALANCING_ACCOUNT_NAME, account_type=AccountType.EQUITY)
        report = validate_ledger(_ledger([clash]))
        assert any("reserved" in str(p) for p in report.problems)

    def test_reserved_name_allowed_when_designated(self):
        plug = _cash(
            name=BALANCING_ACCOUNT_NAME,
            account_type=AccountType.EQUITY,
            is_balancing_account=True,
        )
        assert validate_ledger(_ledger([plug])).is_valid()

    @pytest.mark.parametrize("month", [0, 13])
    def test_fiscal_year_end(self, month):
        report = validate_ledger(_ledger(fiscal_year_end_month=month))
        assert "fiscal year end" in str(report)

    def test_all_problems_are_collected(self):
        ledger = _ledger([_cash(snapshots=[])], [_sales(constraints=[], noise_factor=5.0)])
        with pytest.raises(MalformedInputError) as excinfo:
            ensure_valid(ledger)
        assert len(excinfo.value.problems) == 3
        assert "(+2 more problems)" in str(excinfo.value)
        assert str(excinfo.value).startswith("[Account Sales]")

    def test_report_string(self):
        report = validate_ledger(_ledger([_cash(snapshots=[])]))
        text = str(report)
        assert text.startswith("❌ Validation failed")
        assert "Cash: stock account has no snapshots" in text
        assert report.to_dict()["is_valid"] is False


class TestAccountTypes:
    """Behavior is derived from the classification."""

    @pytest.mark.parametrize(
        "account_type,is_flow",
        [
            (AccountType.REVENUE, True),
            (AccountType.COST_OF_SALES, True),
            (AccountType.OPERATING_EXPENSE, True),
            (AccountType.OTHER_INCOME, True),
            (AccountType.ASSET, False),
            (AccountType.LIABILITY, False),
            (AccountType.EQUITY, False),
        ],
    )
    def test_behavior(self, account_type, is_flow):
        assert account_type.is_flow() is is_flow
        assert account_type.is_stock() is not is_flow

    @pytest.mark.parametrize("label", ["CostOfSales", "cost_of_sales", "Cost of Sales"])
    def test_parse(self, label):
        assert AccountType.parse(label) is AccountType.COST_OF_SALES

    def test_parse_method(self):
        assert InterpolationMethod.parse("Curve") is InterpolationMethod.CURVE
        with pytest.raises(ValueError):
            InterpolationMethod.parse("spline")
