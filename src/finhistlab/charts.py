"""
Chart functions for inspecting densified ledgers.

- Account level: one dense series against the facts it was built from
- Statement level: balance sheet composition and the accounting equation check

All chart functions return (figure, tidy_dataframe_used) for consistency.
"""

from __future__ import annotations

import pandas as pd

from .core.results import LedgerOutput
from .core.specs import LedgerSpec, StockAccount

# Plotly imports with graceful fallback
try:
    import plotly.express as px
    import plotly.graph_objects as go

    PLOTLY_AVAILABLE = True
except ImportError:
    PLOTLY_AVAILABLE = False


def _check_plotly() -> None:
    """Check if Plotly is available and raise helpful error if not."""
    if not PLOTLY_AVAILABLE:
        raise ImportError(
            "Plotly is required for chart functions. Install with:\n"
            "pip install plotly kaleido\n"
            "or\n"
            "pip install 'finhistlab[charts]'"
        )


def account_series_chart(
    output: LedgerOutput, account: str, ledger: LedgerSpec | None = None
) -> tuple[go.Figure, pd.DataFrame]:
    """
    Plot one account's monthly series.

    When ``ledger`` is given and the account is a stock account, its snapshots
    are overlaid as markers so anchor fidelity can be checked by eye.

    **Args:**
        output: Result of ``densify_ledger``
        account: Account name present in ``output``
        ledger: Optional ledger description the output was built from

    **Returns:**
        Tuple of (plotly_figure, tidy_dataframe_used)

    **Example:**
        ```python
        from finhistlab import densify_ledger, load_ledger
        from finhistlab.charts import account_series_chart

        ledger = load_ledger("ledger.yaml")
        output = densify_ledger(ledger, seed=7)
        fig, data = account_series_chart(output, "Cash", ledger)
        fig.show()
        ```
    """
    _check_plotly()

    if account not in output:
        raise KeyError(f"No series for account '{account}'")

    tidy = output.to_tidy()
    tidy = tidy[tidy["account"] == account].reset_index(drop=True)

    fig = px.line(
        tidy,
        x="date",
        y="value",
        title=f"{account} (monthly)",
        labels={"value": "Value", "date": "Date"},
        markers=False,
    )

    source = ledger.get_account(account) if ledger is not None else None
    if isinstance(source, StockAccount) and source.snapshots:
        snaps = source.sorted_snapshots()
        fig.add_trace(
            go.Scatter(
                x=[pd.Timestamp(s.date) for s in snaps],
                y=[s.value for s in snaps],
                mode="markers",
                name="Snapshots",
                marker={"size": 10, "symbol": "diamond"},
            )
        )

    fig.update_layout(hovermode="x unified")

    return fig, tidy


def balance_sheet_composition(output: LedgerOutput) -> tuple[go.Figure, pd.DataFrame]:
    """
    Plot balance sheet accounts as stacked areas, one facet per account type.

    Args:
        output: Result of ``densify_ledger``

    Returns:
        Tuple of (plotly_figure, tidy_dataframe_used)
    """
    _check_plotly()

    tidy = output.to_tidy()
    tidy = tidy[tidy["behavior"] == "stock"].reset_index(drop=True)

    fig = px.area(
        tidy,
        x="date",
        y="value",
        color="account",
        facet_row="account_type",
        title="Balance Sheet Composition",
        labels={"value": "Balance", "date": "Date", "account": "Account"},
    )

    fig.update_layout(hovermode="x unified", legend_title="Account")

    return fig, tidy


def balance_check_chart(output: LedgerOutput) -> tuple[go.Figure, pd.DataFrame]:
    """
    Plot total assets against liabilities plus equity, month by month.

    The two lines coincide for a balanced ledger; the residual is kept in the
    returned frame for inspection.

    Args:
        output: Result of ``densify_ledger``

    Returns:
        Tuple of (plotly_figure, tidy_dataframe_used)
    """
    _check_plotly()

    totals = output.balance_sheet_totals()
    tidy = pd.DataFrame(
        {
            "date": totals.index,
            "assets": totals["assets"].to_numpy(),
            "liabilities_plus_equity": (
                totals["liabilities"] + totals["equity"]
            ).to_numpy(),
            "residual": totals["residual"].to_numpy(),
        }
    )

    fig = go.Figure()
    fig.add_trace(
        go.Scatter(x=tidy["date"], y=tidy["assets"], mode="lines", name="Assets")
    )
    fig.add_trace(
        go.Scatter(
            x=tidy["date"],
            y=tidy["liabilities_plus_equity"],
            mode="lines",
            name="Liabilities + Equity",
            line={"dash": "dash"},
        )
    )
    fig.update_layout(
        title="Accounting Equation Check",
        xaxis_title="Date",
        yaxis_title="Amount",
        hovermode="x unified",
    )

    return fig, tidy


def save_chart(fig: go.Figure, filename: str, format: str = "html") -> None:
    """
    Save chart to file.

    Args:
        fig: Plotly figure
        filename: Output filename
        format: Output format ('html', 'png', 'pdf', 'svg')
    """
    _check_plotly()

    if format == "html":
        fig.write_html(filename)
    elif format in {"png", "pdf", "svg"}:
        fig.write_image(filename, format=format)
    else:
        raise ValueError(f"Unsupported format: {format}")
