"""
Smoke tests to verify basic imports and functionality.
"""

from datetime import date


def test_import_finhistlab():
    """Test that we can import the main package."""
    import finhistlab

    assert hasattr(finhistlab, "__version__")
    assert finhistlab.__version__ == "0.1.0"


def test_import_core_components():
    """Test that core components can be imported."""
    from finhistlab import (
        AccountingBalancer,
        ConstraintSolver,
        InterpolationEngine,
        LedgerSpec,
        NoiseInjector,
        densify_ledger,
        load_ledger,
        verify_accounting_equation,
    )

    assert callable(densify_ledger)
    assert callable(load_ledger)
    assert callable(verify_accounting_equation)
    assert LedgerSpec and ConstraintSolver and InterpolationEngine
    assert NoiseInjector and AccountingBalancer


def test_strategies_registered_on_import():
    """Importing the package wires every interpolation method."""
    from finhistlab import InterpolationMethod, InterpolationRegistry

    assert set(InterpolationRegistry) == set(InterpolationMethod)


def test_basic_run():
    """Test a minimal densification run."""
    from finhistlab import (
        AccountType,
        FlowAccount,
        LedgerSpec,
        PeriodConstraint,
        densify_ledger,
    )

    ledger = LedgerSpec(
        "Smoke",
        flow_accounts=[
            FlowAccount(
                "Sales",
                AccountType.REVENUE,
                constraints=[PeriodConstraint(date(2024, 1, 1), date(2024, 12, 31), 12.0)],
            )
        ],
    )
    output = densify_ledger(ledger)
    assert len(output["Sales"]) == 12
    assert abs(output["Sales"].sum() - 12.0) < 1e-9
