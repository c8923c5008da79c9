"""
Unit tests for chart helpers.
"""

from __future__ import annotations

import importlib.util
from datetime import date

import pytest
from finhistlab import (
    AccountType,
    LedgerSpec,
    Snapshot,
    StockAccount,
    densify_ledger,
)

plotly_available = importlib.util.find_spec("plotly") is not None


def _skip_if_no_plotly():
    return pytest.mark.skipif(
        not plotly_available, reason="Plotly is required for chart tests"
    )


def _ledger() -> LedgerSpec:
    return LedgerSpec(
        "Acme",
        stock_accounts=[
            StockAccount(
                "Cash",
                AccountType.ASSET,
                snapshots=[Snapshot(date(2023, 1, 31), 100.0), Snapshot(date(2023, 6, 30), 160.0)],
            ),
            StockAccount("Loan", AccountType.LIABILITY, snapshots=[Snapshot(date(2023, 6, 30), 60.0)]),
        ],
    )


@_skip_if_no_plotly()
def test_account_series_chart_overlays_snapshots():
    from finhistlab.charts import account_series_chart

    ledger = _ledger()
    fig, data = account_series_chart(densify_ledger(ledger), "Cash", ledger)

    assert len(fig.data) == 2
    assert fig.data[1].name == "Snapshots"
    assert len(fig.data[1].x) == 2
    assert data["account"].unique().tolist() == ["Cash"]
    assert len(data) == 6


@_skip_if_no_plotly()
def test_account_series_chart_unknown_account():
    from finhistlab.charts import account_series_chart

    with pytest.raises(KeyError):
        account_series_chart(densify_ledger(_ledger()), "Goodwill")


@_skip_if_no_plotly()
def test_balance_check_chart_lines_coincide():
    from finhistlab.charts import balance_check_chart

    fig, data = balance_check_chart(densify_ledger(_ledger()))

    assert [trace.name for trace in fig.data] == ["Assets", "Liabilities + Equity"]
    assert list(data.columns) == ["date", "assets", "liabilities_plus_equity", "residual"]
    assert data["residual"].abs().max() == pytest.approx(0.0, abs=1e-9)


@_skip_if_no_plotly()
def test_balance_sheet_composition_only_stocks():
    from finhistlab.charts import balance_sheet_composition

    fig, data = balance_sheet_composition(densify_ledger(_ledger()))

    assert set(data["behavior"]) == {"stock"}
    assert set(data["account"]) == {"Cash", "Loan", "Balancing Equity Adjustment"}
    assert len(fig.data) >= 3


def test_charts_raise_helpful_error_without_plotly(monkeypatch):
    import finhistlab.charts as charts

    monkeypatch.setattr(charts, "PLOTLY_AVAILABLE", False)
    with pytest.raises(ImportError, match="Plotly is required"):
        charts.balance_check_chart(densify_ledger(_ledger()))
