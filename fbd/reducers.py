"""Pure state transitions ``(snapshot, edit) -> new snapshot``.

Every reducer works on a deep copy; the snapshot passed in is never mutated.
New entity ids are supplied by the caller (see ``Store.new_id``).
"""

from __future__ import annotations

import copy
from dataclasses import fields, replace
from datetime import date
import logging
from typing import Any, Callable, Iterable

from .defaults import default_month, default_investments
from .ledger import sum_entries
from .networth import upsert_balance_history, upsert_portfolio_history
from .periods import parse_period_key, period_key, previous_period_key
from .schema import GlobalConfig, Id, IncomeEntry, MonthRecord, PortfolioItem, Snapshot

logger = logging.getLogger(__name__)

_CONFIG_FIELDS = {f.name for f in fields(GlobalConfig)}
_MONTH_FIELDS = {f.name for f in fields(MonthRecord)}
_MOVABLE = ("clients", "shared_expenses", "personal_expenses", "alerts", "tasks")


def _canonical_key(key: str) -> str:
    return period_key(*parse_period_key(key))


def _month(snapshot: Snapshot, key: str) -> MonthRecord:
    record = snapshot.months.get(key)
    if record is None:
        record = default_month()
        snapshot.months[key] = record
    return record


def _numeric_ids(values: Iterable[Any]) -> Iterable[int]:
    for value in values:
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, float)):
            yield int(value)


def next_id(snapshot: Snapshot) -> int:
    """One past the largest numeric id used anywhere in the snapshot."""
    config = snapshot.config
    ids: list[Any] = []
    for seq in (
        config.clients,
        config.shared_expenses,
        config.personal_expenses,
        config.partner.income,
        config.partner.expenses,
        config.partner.allocations,
        config.alerts,
        config.tasks,
    ):
        ids.extend(item.id for item in seq)
    for record in snapshot.months.values():
        for seq in (record.taxed_income, record.untaxed_income, record.investments, record.portfolio or []):
            ids.extend(item.id for item in seq)
    return max(_numeric_ids(ids), default=0) + 1


def set_config_field(snapshot: Snapshot, name: str, value: Any) -> Snapshot:
    if name not in _CONFIG_FIELDS:
        raise ValueError(f"unknown config field '{name}'")
    new = copy.deepcopy(snapshot)
    new.config = replace(new.config, **{name: copy.deepcopy(value)})
    return new


def update_month(snapshot: Snapshot, key: str, **changes: Any) -> Snapshot:
    """Replace fields of a month, creating it from the month template if needed."""
    unknown = set(changes) - _MONTH_FIELDS
    if unknown:
        raise ValueError(f"unknown month field(s): {', '.join(sorted(unknown))}")
    key = _canonical_key(key)
    new = copy.deepcopy(snapshot)
    record = _month(new, key)
    new.months[key] = replace(record, **copy.deepcopy(changes))
    return new


def add_income(snapshot: Snapshot, key: str, entry: IncomeEntry, *, taxed: bool = True) -> Snapshot:
    key = _canonical_key(key)
    new = copy.deepcopy(snapshot)
    record = _month(new, key)
    target = record.taxed_income if taxed else record.untaxed_income
    target.append(copy.deepcopy(entry))
    return new


def remove_income(snapshot: Snapshot, key: str, entry_id: Id, *, taxed: bool = True) -> Snapshot:
    key = _canonical_key(key)
    new = copy.deepcopy(snapshot)
    record = new.months.get(key)
    if record is None:
        return new
    if taxed:
        record.taxed_income = [e for e in record.taxed_income if e.id != entry_id]
    else:
        record.untaxed_income = [e for e in record.untaxed_income if e.id != entry_id]
    return new


def move_item(snapshot: Snapshot, sequence: str, from_index: int, to_index: int) -> Snapshot:
    """Reorder one of the user-ordered config lists (display order only)."""
    if sequence not in _MOVABLE:
        raise ValueError(f"'{sequence}' is not a reorderable list")
    new = copy.deepcopy(snapshot)
    items = getattr(new.config, sequence)
    if not (0 <= from_index < len(items) and 0 <= to_index < len(items)):
        raise IndexError(f"{sequence}: cannot move {from_index} to {to_index} in a list of {len(items)}")
    items.insert(to_index, items.pop(from_index))
    return new


def set_portfolio(snapshot: Snapshot, key: str, portfolio: Iterable[PortfolioItem]) -> Snapshot:
    """Store a month's holdings and keep the portfolio history series in step."""
    key = _canonical_key(key)
    new = copy.deepcopy(snapshot)
    items = copy.deepcopy(list(portfolio))
    _month(new, key).portfolio = items
    new.config.portfolio_history = upsert_portfolio_history(new.config.portfolio_history, key, sum_entries(items))
    return new


def record_loan_balance(snapshot: Snapshot, key: str, balance: float) -> Snapshot:
    key = _canonical_key(key)
    new = copy.deepcopy(snapshot)
    loan = new.config.loan
    loan.current_balance = float(balance)
    loan.balance_history = upsert_balance_history(loan.balance_history, key, balance)
    return new


def apply_investments_forward(snapshot: Snapshot, key: str) -> Snapshot:
    """Copy a month's investment plan to the rest of its year and all of the next.

    Copied entries start with ``done`` cleared. Other month fields are kept.
    """
    year, month = parse_period_key(key)
    new = copy.deepcopy(snapshot)
    source = new.months.get(period_key(year, month))
    template = source.investments if source is not None else default_investments()
    targets = [period_key(year, m) for m in range(month + 1, 13)]
    targets += [period_key(year + 1, m) for m in range(1, 13)]
    for target in targets:
        record = _month(new, target)
        record.investments = [replace(entry, done=False) for entry in copy.deepcopy(template)]
    return new


def duplicate_previous_income(
    snapshot: Snapshot,
    key: str,
    id_factory: Callable[[], Id],
    today: date,
) -> Snapshot:
    """Append copies of last month's income entries with fresh ids and today's date.

    Returns the snapshot unchanged when the previous month has no income.
    """
    key = _canonical_key(key)
    previous = snapshot.months.get(previous_period_key(key))
    if previous is None or (not previous.taxed_income and not previous.untaxed_income):
        logger.debug("no income in the month before %s to duplicate", key)
        return snapshot

    stamp = today.isoformat()
    new = copy.deepcopy(snapshot)
    record = _month(new, key)
    record.taxed_income.extend(replace(e, id=id_factory(), date=stamp) for e in copy.deepcopy(previous.taxed_income))
    record.untaxed_income.extend(replace(e, id=id_factory(), date=stamp) for e in copy.deepcopy(previous.untaxed_income))
    return new


def toggle_task(snapshot: Snapshot, key: str) -> Snapshot:
    """Flip the completion mark of a task occurrence (key from ``alerts.task_key``)."""
    new = copy.deepcopy(snapshot)
    completed = new.config.completed_tasks
    completed[key] = not completed.get(key, False)
    return new
