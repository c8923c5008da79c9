"""
Ledger overrides for FinHistLab.

An override is an ordered set of edits applied on top of a base ledger:
new accounts are added first, so later modifications can target them, and
then every modification runs in order. The base ledger is never mutated;
``LedgerOverrides.apply`` returns a new ``LedgerSpec``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Optional, Union

from .accounts import AccountType
from .errors import LedgerLoadError, OverrideError
from .specs import FlowAccount, LedgerSpec, PeriodConstraint, Snapshot, StockAccount
from .utils import parse_period_string

Account = Union[StockAccount, FlowAccount]


@dataclass(frozen=True)
class Rename:
    """Rename an account (e.g. 'Telco' -> 'Telephone & Internet')."""

    target: str
    new_name: str


@dataclass(frozen=True)
class Merge:
    """
    Merge several accounts of the same statement into one.

    Stock accounts sum snapshots on matching dates. Flow accounts sum
    constraints covering identical periods and keep the rest side by side.
    The merged account takes its other properties from the first matching
    account in ledger order and is appended at the end.
    """

    sources: tuple[str, ...]
    target_name: str

    def __post_init__(self):
        object.__setattr__(self, "sources", tuple(self.sources))


@dataclass(frozen=True)
class UpdateMetadata:
    """Change the category, account type or balancing flag of an account."""

    target: str
    new_category: Optional[str] = None
    new_type: Optional[AccountType] = None
    new_is_balancing_account: Optional[bool] = None


@dataclass(frozen=True)
class Delete:
    target: str


@dataclass(frozen=True)
class ScaleValues:
    """Multiply every snapshot or constraint value (e.g. -1.0 to flip sign)."""

    target: str
    factor: float


@dataclass(frozen=True)
class SetValue:
    """
    Set one reported figure.

    For a stock account ``date_or_period`` is a ``YYYY-MM-DD`` date and the
    snapshot on that date is added or replaced. For a flow account it is a
    ``YYYY-MM`` or ``YYYY-MM:YYYY-MM`` period and the constraint over exactly
    that period is added or replaced.
    """

    target: str
    date_or_period: str
    value: float


Modification = Union[Rename, Merge, UpdateMetadata, Delete, ScaleValues, SetValue]

_ACTIONS: dict[str, type] = {
    "rename": Rename,
    "merge": Merge,
    "update_metadata": UpdateMetadata,
    "delete": Delete,
    "scale_values": ScaleValues,
    "set_value": SetValue,
}


@dataclass
class LedgerOverrides:
    """
    Strategic adjustments to a ledger description.

    Attributes:
        new_stock_accounts: Balance sheet accounts to add
        new_flow_accounts: Income statement accounts to add
        modifications: Edits applied in order after the new accounts are added
    """

    new_stock_accounts: list[StockAccount] = field(default_factory=list)
    new_flow_accounts: list[FlowAccount] = field(default_factory=list)
    modifications: list[Modification] = field(default_factory=list)

    def apply(self, base: LedgerSpec) -> LedgerSpec:
        """Return a new ledger with the overrides applied to ``base``."""
        stocks = list(base.stock_accounts) + list(self.new_stock_accounts)
        flows = list(base.flow_accounts) + list(self.new_flow_accounts)
        for modification in self.modifications:
            stocks, flows = _apply_one(stocks, flows, modification)
        return replace(
            base,
            stock_accounts=tuple(stocks),
            flow_accounts=tuple(flows),
            metadata=dict(base.metadata),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LedgerOverrides:
        """
        Build overrides from a mapping.

        Modifications are tagged by an ``action`` key in snake_case, e.g.
        ``{"action": "rename", "target": "Telco", "new_name": "Telephone"}``.

        Raises:
            LedgerLoadError: If an entry cannot be understood
        """
        from .ledger_loader import _normalize_flow, _normalize_stock

        if not isinstance(data, dict):
            raise LedgerLoadError("overrides: expected a mapping")

        modifications: list[Modification] = []
        for idx, raw in enumerate(data.get("modifications") or []):
            ctx = f"overrides::modifications[{idx}]"
            if not isinstance(raw, dict):
                raise LedgerLoadError(f"{ctx}: expected a mapping")
            fields = dict(raw)
            action = fields.pop("action", None)
            if action not in _ACTIONS:
                raise LedgerLoadError(f"{ctx}: unknown action {action!r}")
            if "new_type" in fields and fields["new_type"] is not None:
                try:
                    fields["new_type"] = AccountType.parse(fields["new_type"])
                except ValueError as exc:
                    raise LedgerLoadError(f"{ctx}.new_type: {exc}") from exc
            try:
                modifications.append(_ACTIONS[action](**fields))
            except TypeError as exc:
                raise LedgerLoadError(f"{ctx}: {exc}") from exc

        return cls(
            new_stock_accounts=[
                _normalize_stock(entry, f"overrides::new_stock_accounts[{i}]")
                for i, entry in enumerate(data.get("new_stock_accounts") or [])
            ],
            new_flow_accounts=[
                _normalize_flow(entry, f"overrides::new_flow_accounts[{i}]")
                for i, entry in enumerate(data.get("new_flow_accounts") or [])
            ],
            modifications=modifications,
        )


def _apply_one(
    stocks: list[StockAccount], flows: list[FlowAccount], modification: Modification
) -> tuple[list[StockAccount], list[FlowAccount]]:
    if isinstance(modification, Merge):
        return _merge(stocks, flows, modification)
    if isinstance(modification, Delete):
        _locate(stocks, flows, modification.target)
        return (
            [a for a in stocks if a.name != modification.target],
            [a for a in flows if a.name != modification.target],
        )

    accounts, pos = _locate(stocks, flows, modification.target)
    accounts[pos] = _edit(accounts[pos], modification)
    return stocks, flows


def _locate(
    stocks: list[StockAccount], flows: list[FlowAccount], name: str
) -> tuple[list, int]:
    for accounts in (stocks, flows):
        for pos, account in enumerate(accounts):
            if account.name == name:
                return accounts, pos
    raise OverrideError(f"No account named '{name}' to modify")


def _edit(account: Account, modification: Modification) -> Account:
    if isinstance(modification, Rename):
        return replace(account, name=modification.new_name)

    if isinstance(modification, UpdateMetadata):
        changes: dict[str, Any] = {}
        if modification.new_type is not None:
            changes["account_type"] = modification.new_type
        if isinstance(account, StockAccount):
            if modification.new_category is not None:
                changes["category"] = modification.new_category
            if modification.new_is_balancing_account is not None:
                changes["is_balancing_account"] = modification.new_is_balancing_account
        return replace(account, **changes)

    if isinstance(modification, ScaleValues):
        factor = modification.factor
        if isinstance(account, StockAccount):
            return replace(
                account,
                snapshots=tuple(replace(s, value=s.value * factor) for s in account.snapshots),
            )
        return replace(
            account,
            constraints=tuple(
                replace(c, value=c.value * factor) for c in account.constraints
            ),
        )

    if isinstance(modification, SetValue):
        if isinstance(account, StockAccount):
            return _set_snapshot(account, modification)
        return _set_constraint(account, modification)

    raise TypeError(f"Unsupported modification {modification!r}")


def _set_snapshot(account: StockAccount, modification: SetValue) -> StockAccount:
    try:
        when = date.fromisoformat(modification.date_or_period)
    except ValueError as exc:
        raise OverrideError(
            f"{account.name}: '{modification.date_or_period}' is not a YYYY-MM-DD date"
        ) from exc
    kept = tuple(s for s in account.snapshots if s.date != when)
    return replace(account, snapshots=kept + (Snapshot(when, float(modification.value)),))


def _set_constraint(account: FlowAccount, modification: SetValue) -> FlowAccount:
    try:
        start, end = parse_period_string(modification.date_or_period)
    except ValueError as exc:
        raise OverrideError(f"{account.name}: {exc}") from exc
    kept = tuple(c for c in account.constraints if (c.start, c.end) != (start, end))
    added = PeriodConstraint(start=start, end=end, value=float(modification.value))
    return replace(account, constraints=kept + (added,))


def _merge(
    stocks: list[StockAccount], flows: list[FlowAccount], modification: Merge
) -> tuple[list[StockAccount], list[FlowAccount]]:
    names = set(modification.sources) | {modification.target_name}
    in_stocks = [a for a in stocks if a.name in names]
    in_flows = [a for a in flows if a.name in names]

    if in_stocks and in_flows:
        raise OverrideError(
            f"Cannot merge balance sheet and income statement accounts into "
            f"'{modification.target_name}'"
        )
    if not in_stocks and not in_flows:
        raise OverrideError(
            f"None of {', '.join(modification.sources)} exist to merge into "
            f"'{modification.target_name}'"
        )

    if in_stocks:
        merged = replace(
            in_stocks[0],
            name=modification.target_name,
            snapshots=tuple(_sum_snapshots(a.snapshots for a in in_stocks)),
        )
        return [a for a in stocks if a.name not in names] + [merged], flows

    merged = replace(
        in_flows[0],
        name=modification.target_name,
        constraints=tuple(_sum_constraints(a.constraints for a in in_flows)),
    )
    return stocks, [a for a in flows if a.name not in names] + [merged]


def _sum_snapshots(groups: Iterable[Iterable[Snapshot]]) -> list[Snapshot]:
    sums: dict[date, float] = {}
    for snapshots in groups:
        for snap in snapshots:
            sums[snap.date] = sums.get(snap.date, 0.0) + snap.value
    return [Snapshot(d, v) for d, v in sorted(sums.items())]


def _sum_constraints(
    groups: Iterable[Iterable[PeriodConstraint]],
) -> list[PeriodConstraint]:
    sums: dict[tuple[date, date], float] = {}
    for constraints in groups:
        for c in constraints:
            key = (c.start, c.end)
            sums[key] = sums.get(key, 0.0) + c.value
    return [PeriodConstraint(start=s, end=e, value=v) for (s, e), v in sums.items()]
