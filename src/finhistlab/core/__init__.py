"""
Core module for FinHistLab.

This module contains the densification engine: data model, seasonality,
constraint solver, interpolation, noise, accounting balancer and orchestrator.
"""

from .accounts import AccountBehavior, AccountType, InterpolationMethod
from .balancer import (
    BALANCE_REL_TOL,
    BALANCING_ACCOUNT_NAME,
    AccountingBalancer,
    BalanceResult,
    EquationBreach,
    find_breaches,
    verify_accounting_equation,
)
from .engine import Densifier, DensifyConfig, densify_ledger, ledger_date_range
from .errors import (
    ConstraintConflict,
    ConstraintConflictWarning,
    FinHistError,
    LedgerLoadError,
    MalformedInputError,
    OverrideError,
    UnresolvedBalanceError,
)
from .interfaces import IInterpolationStrategy
from .interpolation import InterpolationEngine, InterpolationRegistry, get_strategy
from .ledger_loader import TrialBalanceRow, load_ledger, load_trial_balance
from .noise import AnchorInvariant, NoiseInjector, SumInvariant
from .overrides import (
    Delete,
    LedgerOverrides,
    Merge,
    Rename,
    ScaleValues,
    SetValue,
    UpdateMetadata,
)
from .results import LedgerOutput, chart_of_accounts
from .seasonality import (
    WEIGHT_SUM_TOLERANCE,
    SeasonalityProfile,
    SeasonalityTable,
    SeasonalityWeights,
    profile_weights,
    rotate_weights_for_fiscal_year,
)
from .solver import CONFLICT_REL_TOL, ConstraintSolver, SolveResult
from .specs import FlowAccount, LedgerSpec, PeriodConstraint, Snapshot, StockAccount
from .utils import month_end_range, month_range, parse_period_string
from .validation import ValidationReport, ensure_valid, validate_ledger

__all__ = [
    # Accounts
    "AccountBehavior",
    "AccountType",
    "InterpolationMethod",
    # Specs
    "PeriodConstraint",
    "Snapshot",
    "FlowAccount",
    "StockAccount",
    "LedgerSpec",
    # Errors
    "FinHistError",
    "MalformedInputError",
    "LedgerLoadError",
    "OverrideError",
    "UnresolvedBalanceError",
    "ConstraintConflict",
    "ConstraintConflictWarning",
    # Seasonality
    "SeasonalityProfile",
    "SeasonalityWeights",
    "SeasonalityTable",
    "WEIGHT_SUM_TOLERANCE",
    "profile_weights",
    "rotate_weights_for_fiscal_year",
    # Noise
    "NoiseInjector",
    "SumInvariant",
    "AnchorInvariant",
    # Solver and interpolation
    "ConstraintSolver",
    "SolveResult",
    "CONFLICT_REL_TOL",
    "IInterpolationStrategy",
    "InterpolationEngine",
    "InterpolationRegistry",
    "get_strategy",
    # Balancer
    "AccountingBalancer",
    "BalanceResult",
    "EquationBreach",
    "BALANCE_REL_TOL",
    "BALANCING_ACCOUNT_NAME",
    "find_breaches",
    "verify_accounting_equation",
    # Engine
    "Densifier",
    "DensifyConfig",
    "densify_ledger",
    "ledger_date_range",
    # Results
    "LedgerOutput",
    "chart_of_accounts",
    # Input
    "load_ledger",
    "load_trial_balance",
    "TrialBalanceRow",
    "validate_ledger",
    "ensure_valid",
    "ValidationReport",
    # Overrides
    "LedgerOverrides",
    "Rename",
    "Merge",
    "UpdateMetadata",
    "Delete",
    "ScaleValues",
    "SetValue",
    # Utilities
    "month_range",
    "month_end_range",
    "parse_period_string",
]
