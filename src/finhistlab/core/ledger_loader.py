"""Utilities for loading ledger descriptions from YAML/JSON sources and trial balances."""

from __future__ import annotations

import json
import numbers
from collections.abc import Iterable, Mapping
from copy import deepcopy
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Union

import pandas as pd

try:  # PyYAML is declared as a runtime dependency but guard for safety
    import yaml
except ImportError:  # pragma: no cover - fallback for reduced installs
    yaml = None  # type: ignore[assignment]

from .accounts import AccountType, InterpolationMethod
from .errors import LedgerLoadError
from .seasonality import SeasonalityProfile, SeasonalityRef
from .specs import FlowAccount, LedgerSpec, PeriodConstraint, Snapshot, StockAccount
from .utils import month_end, parse_period_string

__all__ = ["TrialBalanceRow", "load_ledger", "load_trial_balance"]

_STOCK_KEYS = ("balance_sheet", "stock_accounts")
_FLOW_KEYS = ("income_statement", "flow_accounts")


def load_ledger(
    source: str | Path | dict[str, Any], *, format: str | None = None
) -> LedgerSpec:
    """
    Parse a ledger description from YAML/JSON/dict into a ``LedgerSpec``.

    Only the structure is checked here; semantic checks (month alignment,
    weight sums, duplicate names) run when the ledger is densified or passed
    to ``validate_ledger``.

    Raises:
        FileNotFoundError: If ``source`` is a path that does not exist
        LedgerLoadError: If the document is unreadable or structurally invalid
    """
    mapping, label = _read_source(source, format=format)

    name = mapping.get("organization_name")
    if not isinstance(name, str) or not name.strip():
        raise LedgerLoadError(f"{label}: 'organization_name' is required")

    fy_end = mapping.get("fiscal_year_end_month", 12)
    if isinstance(fy_end, bool) or not isinstance(fy_end, int):
        raise LedgerLoadError(f"{label}: 'fiscal_year_end_month' must be an integer")

    stocks = _section(mapping, _STOCK_KEYS, label)
    flows = _section(mapping, _FLOW_KEYS, label)

    metadata = {
        key: value
        for key, value in mapping.items()
        if key
        not in {"organization_name", "fiscal_year_end_month", *_STOCK_KEYS, *_FLOW_KEYS}
    }
    metadata["source"] = label

    return LedgerSpec(
        organization_name=name,
        fiscal_year_end_month=fy_end,
        stock_accounts=tuple(
            _normalize_stock(entry, f"{label}::stock_accounts[{idx}]")
            for idx, entry in enumerate(stocks)
        ),
        flow_accounts=tuple(
            _normalize_flow(entry, f"{label}::flow_accounts[{idx}]")
            for idx, entry in enumerate(flows)
        ),
        metadata=metadata,
    )


def _read_source(
    source: str | Path | dict[str, Any], *, format: str | None
) -> tuple[dict[str, Any], str]:
    if isinstance(source, dict):
        return deepcopy(source), "<mapping>"

    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(path)

    fmt = (format or path.suffix.lstrip(".")).lower()
    text = path.read_text(encoding="utf-8")
    try:
        if fmt in {"yaml", "yml", ""}:
            if yaml is None:
                raise LedgerLoadError(
                    "PyYAML is required to parse YAML ledgers. Install with 'pip install PyYAML'."
                )
            data = yaml.safe_load(text)
        elif fmt == "json":
            data = json.loads(text)
        else:
            raise LedgerLoadError(f"Unsupported ledger format '{fmt}' for {path}")
    except (json.JSONDecodeError, _yaml_error()) as exc:
        raise LedgerLoadError(f"Could not parse {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise LedgerLoadError(f"Ledger root must be a mapping (source={path})")
    return data, str(path)


def _yaml_error() -> type[Exception]:
    if yaml is None:  # pragma: no cover
        return json.JSONDecodeError
    return yaml.YAMLError


def _section(mapping: dict[str, Any], keys: tuple[str, ...], label: str) -> list[Any]:
    present = [k for k in keys if k in mapping]
    if len(present) > 1:
        raise LedgerLoadError(f"{label}: use only one of {', '.join(present)}")
    if not present:
        return []
    entries = mapping[present[0]]
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise LedgerLoadError(f"{label}::{present[0]}: expected a list")
    return entries


def _normalize_stock(entry: Any, ctx: str) -> StockAccount:
    data = _ensure_dict(entry, ctx)
    name = _coerce_str(data.get("name"), f"{ctx}.name")
    account_type = _coerce_enum(AccountType, data.get("account_type"), f"{ctx}.account_type")
    method = _coerce_enum(
        InterpolationMethod, data.get("method", "linear"), f"{ctx}.method"
    )

    snapshots = []
    for idx, raw in enumerate(_ensure_list(data.get("snapshots"), f"{ctx}.snapshots")):
        sctx = f"{ctx}.snapshots[{idx}]"
        snap = _ensure_dict(raw, sctx)
        snapshots.append(
            Snapshot(
                date=_coerce_date(snap.get("date"), f"{sctx}.date"),
                value=_coerce_number(snap.get("value"), f"{sctx}.value"),
            )
        )

    balancing = data.get("is_balancing_account", False)
    if not isinstance(balancing, bool):
        raise LedgerLoadError(f"{ctx}.is_balancing_account must be boolean")
    category = data.get("category")
    if category is not None and not isinstance(category, str):
        raise LedgerLoadError(f"{ctx}.category must be a string when provided")

    return StockAccount(
        name=name,
        account_type=account_type,
        snapshots=tuple(snapshots),
        method=method,
        noise_factor=_coerce_noise(data, ctx),
        is_balancing_account=balancing,
        category=category,
    )


def _normalize_flow(entry: Any, ctx: str) -> FlowAccount:
    data = _ensure_dict(entry, ctx)
    name = _coerce_str(data.get("name"), f"{ctx}.name")
    account_type = _coerce_enum(AccountType, data.get("account_type"), f"{ctx}.account_type")

    constraints = []
    for idx, raw in enumerate(
        _ensure_list(data.get("constraints"), f"{ctx}.constraints")
    ):
        constraints.append(_normalize_constraint(raw, f"{ctx}.constraints[{idx}]"))

    return FlowAccount(
        name=name,
        account_type=account_type,
        constraints=tuple(constraints),
        seasonality=_coerce_seasonality(data.get("seasonality", "flat"), f"{ctx}.seasonality"),
        noise_factor=_coerce_noise(data, ctx),
    )


def _normalize_constraint(raw: Any, ctx: str) -> PeriodConstraint:
    data = _ensure_dict(raw, ctx)
    value = _coerce_number(data.get("value"), f"{ctx}.value")
    if "period" in data:
        try:
            start, end = parse_period_string(data["period"])
        except ValueError as exc:
            raise LedgerLoadError(f"{ctx}.period: {exc}") from exc
        return PeriodConstraint(start=start, end=end, value=value)
    if "start" in data and "end" in data:
        return PeriodConstraint(
            start=_coerce_bound(data["start"], f"{ctx}.start", first=True),
            end=_coerce_bound(data["end"], f"{ctx}.end", first=False),
            value=value,
        )
    raise LedgerLoadError(f"{ctx}: expected 'period' or both 'start' and 'end'")


def _coerce_bound(value: Any, ctx: str, *, first: bool) -> date:
    # "YYYY-MM" names a whole month
    if isinstance(value, str) and len(value.strip()) == 7:
        try:
            start, end = parse_period_string(value)
        except ValueError as exc:
            raise LedgerLoadError(f"{ctx}: {exc}") from exc
        return start if first else end
    return _coerce_date(value, ctx)


def _coerce_seasonality(value: Any, ctx: str) -> SeasonalityRef:
    if isinstance(value, str):
        try:
            return SeasonalityProfile.parse(value)
        except ValueError as exc:
            raise LedgerLoadError(f"{ctx}: {exc}") from exc
    if isinstance(value, list):
        return tuple(_coerce_number(v, f"{ctx}[{i}]") for i, v in enumerate(value))
    raise LedgerLoadError(f"{ctx}: expected a profile name or a list of 12 weights")


def _coerce_noise(data: dict[str, Any], ctx: str) -> float:
    raw = data.get("noise", data.get("noise_factor", 0.0))
    return _coerce_number(raw, f"{ctx}.noise")


def _coerce_enum(enum_cls, value: Any, ctx: str):
    if not isinstance(value, str) or not value.strip():
        raise LedgerLoadError(f"{ctx}: expected non-empty string")
    try:
        return enum_cls.parse(value)
    except ValueError as exc:
        raise LedgerLoadError(f"{ctx}: {exc}") from exc


def _coerce_date(value: Any, ctx: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as exc:
            raise LedgerLoadError(f"{ctx}: invalid ISO date '{value}'") from exc
    raise LedgerLoadError(f"{ctx}: expected ISO date string")


def _coerce_number(value: Any, ctx: str) -> float:
    if isinstance(value, bool):  # Avoid bool being treated as int
        raise LedgerLoadError(f"{ctx}: expected a number")
    if isinstance(value, numbers.Real):
        return float(value)
    raise LedgerLoadError(f"{ctx}: expected a number")


def _coerce_str(value: Any, ctx: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise LedgerLoadError(f"{ctx}: expected non-empty string")
    return value


def _ensure_dict(value: Any, ctx: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise LedgerLoadError(f"{ctx}: expected a mapping")
    return value


def _ensure_list(value: Any, ctx: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise LedgerLoadError(f"{ctx}: expected a list")
    return list(value)


@dataclass(frozen=True)
class TrialBalanceRow:
    """
    One line of a trial balance export.

    Attributes:
        account_name: Account the line belongs to
        account_type: Classification; decides stock or flow treatment
        date: Reporting date (a month-end)
        ytd_value: Closing balance for stock accounts, fiscal year-to-date
            total for flow accounts
        source_doc: Document the figure was read from
    """

    account_name: str
    account_type: AccountType
    date: date
    ytd_value: float
    source_doc: str = ""


TrialBalanceInput = Union[
    pd.DataFrame, Iterable[Union[TrialBalanceRow, Mapping[str, Any]]]
]


def load_trial_balance(
    rows: TrialBalanceInput,
    organization_name: str,
    fiscal_year_end_month: int = 12,
) -> LedgerSpec:
    """
    Convert trial balance rows into a ``LedgerSpec``.

    Stock rows become Linear snapshots on the row date. Flow rows become
    constraints running from the start of the row's fiscal year to the end of
    the row's month, so successive year-to-date rows nest and the solver turns
    them into monthly increments. Accounts keep the order of their first row.

    Args:
        rows: ``TrialBalanceRow`` objects, mappings with the same keys, or a
            DataFrame with those columns
        organization_name: Name of the organization
        fiscal_year_end_month: Last month of the fiscal year (1..12)

    Returns:
        Ledger description ready for ``densify_ledger``

    Raises:
        LedgerLoadError: If a row is incomplete or an account's type changes
            between rows

    Example:
        ```python
        rows = [
            TrialBalanceRow("Sales", AccountType.REVENUE, date(2023, 1, 31), 100.0),
            TrialBalanceRow("Sales", AccountType.REVENUE, date(2023, 2, 28), 250.0),
        ]
        ledger = load_trial_balance(rows, "Acme")
        densify_ledger(ledger)["Sales"].tolist()  # [100.0, 150.0]
        ```
    """
    if not isinstance(organization_name, str) or not organization_name.strip():
        raise LedgerLoadError("trial balance: 'organization_name' is required")
    if (
        isinstance(fiscal_year_end_month, bool)
        or not isinstance(fiscal_year_end_month, int)
        or not 1 <= fiscal_year_end_month <= 12
    ):
        raise LedgerLoadError(
            f"trial balance: invalid fiscal year end month {fiscal_year_end_month!r}"
        )
    if isinstance(rows, pd.DataFrame):
        rows = rows.to_dict("records")

    types: dict[str, AccountType] = {}
    snapshots: dict[str, list[Snapshot]] = {}
    constraints: dict[str, list[PeriodConstraint]] = {}
    documents: list[str] = []

    for idx, raw in enumerate(rows):
        row = _coerce_tb_row(raw, f"trial_balance[{idx}]")
        name = row.account_name
        known = types.setdefault(name, row.account_type)
        if known is not row.account_type:
            raise LedgerLoadError(
                f"trial_balance[{idx}]: account '{name}' is {known.value} in an "
                f"earlier row but {row.account_type.value} here"
            )
        if row.source_doc and row.source_doc not in documents:
            documents.append(row.source_doc)

        if row.account_type.is_stock():
            snapshots.setdefault(name, []).append(Snapshot(row.date, row.ytd_value))
        else:
            constraints.setdefault(name, []).append(
                PeriodConstraint(
                    start=_fiscal_year_start(row.date, fiscal_year_end_month),
                    end=month_end(row.date),
                    value=row.ytd_value,
                )
            )

    return LedgerSpec(
        organization_name=organization_name,
        fiscal_year_end_month=fiscal_year_end_month,
        stock_accounts=tuple(
            StockAccount(name=name, account_type=types[name], snapshots=tuple(snaps))
            for name, snaps in snapshots.items()
        ),
        flow_accounts=tuple(
            FlowAccount(name=name, account_type=types[name], constraints=tuple(items))
            for name, items in constraints.items()
        ),
        metadata={"source": "<trial balance>", "source_documents": documents},
    )


def _fiscal_year_start(d: date, fiscal_year_end_month: int) -> date:
    start_month = fiscal_year_end_month % 12 + 1
    year = d.year if d.month >= start_month else d.year - 1
    return date(year, start_month, 1)


def _coerce_tb_row(raw: Any, ctx: str) -> TrialBalanceRow:
    if isinstance(raw, TrialBalanceRow):
        account_type = raw.account_type
        if not isinstance(account_type, AccountType):
            account_type = _coerce_enum(AccountType, account_type, f"{ctx}.account_type")
        return TrialBalanceRow(
            account_name=_coerce_str(raw.account_name, f"{ctx}.account_name"),
            account_type=account_type,
            date=_coerce_date(raw.date, f"{ctx}.date"),
            ytd_value=_coerce_number(raw.ytd_value, f"{ctx}.ytd_value"),
            source_doc=raw.source_doc or "",
        )

    if not isinstance(raw, Mapping):
        raise LedgerLoadError(f"{ctx}: expected a TrialBalanceRow or a mapping")
    account_type = raw.get("account_type")
    if not isinstance(account_type, AccountType):
        account_type = _coerce_enum(AccountType, account_type, f"{ctx}.account_type")
    source_doc = raw.get("source_doc") or ""
    if not isinstance(source_doc, str):
        raise LedgerLoadError(f"{ctx}.source_doc must be a string when provided")
    return TrialBalanceRow(
        account_name=_coerce_str(raw.get("account_name"), f"{ctx}.account_name"),
        account_type=account_type,
        date=_coerce_date(raw.get("date"), f"{ctx}.date"),
        ytd_value=_coerce_number(raw.get("ytd_value"), f"{ctx}.ytd_value"),
        source_doc=source_doc,
    )
