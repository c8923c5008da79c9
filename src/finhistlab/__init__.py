"""
FinHistLab - Densify Sparse Financial History into Monthly Ledgers

FinHistLab turns the figures people actually report (an annual revenue total,
a quarterly expense, a handful of year-end balances) into complete monthly
series for every account of a ledger, while guaranteeing that:

- flow accounts sum back to every reported period total
- stock accounts pass exactly through every reported balance
- Assets = Liabilities + Equity holds in every generated month

Architecture Overview:
- **Constraint Solver**: Finest periods first, coarser totals fill the rest
- **Interpolation Engine**: Linear, Step or Curve between balance snapshots
- **Seasonality Profiles**: Flat, RetailPeak, SummerHigh, SaasGrowth or custom
- **Noise Injector**: Organic variation that keeps totals and anchors intact
- **Accounting Balancer**: One plug account closes the equation every month
- **Chart Library**: Interactive inspection with Plotly integration

Quick Start:
    ```python
    from datetime import date
    from finhistlab import (
        AccountType, FlowAccount, LedgerSpec, PeriodConstraint,
        Snapshot, StockAccount, densify_ledger,
    )

    revenue = FlowAccount(
        name="Sales",
        account_type=AccountType.REVENUE,
        constraints=[PeriodConstraint.from_period("2023-01:2023-12", 120_000)],
        seasonality="RetailPeak",
    )
    cash = StockAccount(
        name="Cash",
        account_type=AccountType.ASSET,
        snapshots=[Snapshot(date(2023, 1, 31), 10_000), Snapshot(date(2023, 12, 31), 25_000)],
    )

    ledger = LedgerSpec("Acme Ltd", stock_accounts=[cash], flow_accounts=[revenue])
    output = densify_ledger(ledger, seed=42)
    frame = output.to_frame()
    ```

Extending the System:
    To add a new interpolation curve:
    1. Create a strategy class implementing ``IInterpolationStrategy``
    2. Register it in ``InterpolationRegistry`` under an ``InterpolationMethod``
"""

# Version information
__version__ = "0.1.0"
__author__ = "FinHistLab Team"
__description__ = "Densification engine for sparse financial history"

# Import core components for easy access
import finhistlab.strategies

from .core import (
    AccountBehavior,
    AccountingBalancer,
    AccountType,
    AnchorInvariant,
    ConstraintConflict,
    ConstraintConflictWarning,
    ConstraintSolver,
    Delete,
    Densifier,
    DensifyConfig,
    EquationBreach,
    FinHistError,
    FlowAccount,
    IInterpolationStrategy,
    InterpolationEngine,
    InterpolationMethod,
    InterpolationRegistry,
    LedgerLoadError,
    LedgerOutput,
    LedgerOverrides,
    LedgerSpec,
    MalformedInputError,
    Merge,
    NoiseInjector,
    OverrideError,
    PeriodConstraint,
    Rename,
    ScaleValues,
    SeasonalityProfile,
    SeasonalityWeights,
    SetValue,
    Snapshot,
    StockAccount,
    SumInvariant,
    TrialBalanceRow,
    UnresolvedBalanceError,
    UpdateMetadata,
    ValidationReport,
    chart_of_accounts,
    densify_ledger,
    ensure_valid,
    load_ledger,
    load_trial_balance,
    month_range,
    validate_ledger,
    verify_accounting_equation,
)

# Import chart functions (plotly is optional; they raise ImportError when called without it)
from .charts import (
    PLOTLY_AVAILABLE,
    account_series_chart,
    balance_check_chart,
    balance_sheet_composition,
    save_chart,
)

CHARTS_AVAILABLE = PLOTLY_AVAILABLE

# Define what gets imported with "from finhistlab import *"
__all__ = [
    # Data model
    "AccountBehavior",
    "AccountType",
    "InterpolationMethod",
    "PeriodConstraint",
    "Snapshot",
    "FlowAccount",
    "StockAccount",
    "LedgerSpec",
    "SeasonalityProfile",
    "SeasonalityWeights",
    # Engine
    "densify_ledger",
    "Densifier",
    "DensifyConfig",
    "ConstraintSolver",
    "InterpolationEngine",
    "NoiseInjector",
    "SumInvariant",
    "AnchorInvariant",
    "AccountingBalancer",
    # Results and verification
    "LedgerOutput",
    "EquationBreach",
    "chart_of_accounts",
    "verify_accounting_equation",
    # Input handling
    "load_ledger",
    "load_trial_balance",
    "TrialBalanceRow",
    "validate_ledger",
    "ensure_valid",
    "ValidationReport",
    "LedgerOverrides",
    "Rename",
    "Merge",
    "UpdateMetadata",
    "Delete",
    "ScaleValues",
    "SetValue",
    # Errors
    "FinHistError",
    "MalformedInputError",
    "LedgerLoadError",
    "OverrideError",
    "UnresolvedBalanceError",
    "ConstraintConflict",
    "ConstraintConflictWarning",
    # Strategy interface and registry
    "IInterpolationStrategy",
    "InterpolationRegistry",
    # Utility functions
    "month_range",
    # Charts
    "account_series_chart",
    "balance_sheet_composition",
    "balance_check_chart",
    "save_chart",
    "CHARTS_AVAILABLE",
    # Version info
    "__version__",
    "__author__",
    "__description__",
]
