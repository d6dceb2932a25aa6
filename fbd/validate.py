"""Semantic and cross-reference validation for snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from .alerts import ALERT_KINDS, TASK_FREQUENCIES
from .defaults import EXPENSE_CATEGORIES
from .loan import MAX_SIMULATION_MONTHS, months_to_payoff
from .periods import is_period_key, period_key, period_sort_key
from .schema import Snapshot


@dataclass(slots=True)
class ValidationResult:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _check_enum(result: ValidationResult, path: str, value: str, allowed: Iterable[str]) -> None:
    allowed_set = set(allowed)
    if value not in allowed_set:
        expected = ", ".join(sorted(allowed_set))
        result.errors.append(f"{path}: '{value}' is not valid; expected one of [{expected}]")


def _check_percent(result: ValidationResult, path: str, value: float) -> None:
    if not 0 <= value <= 100:
        result.errors.append(f"{path}: {value} must be between 0 and 100")


def _check_unique_ids(result: ValidationResult, path: str, items: Iterable[Any]) -> None:
    seen: set[Any] = set()
    for idx, item in enumerate(items):
        if item.id in seen:
            result.errors.append(f"{path}[{idx}].id: duplicate id {item.id!r}")
        seen.add(item.id)


def _check_amounts(result: ValidationResult, path: str, items: Iterable[Any]) -> None:
    for idx, item in enumerate(items):
        if item.amount < 0:
            result.errors.append(f"{path}[{idx}].amount: must be >= 0")


def _check_history(result: ValidationResult, path: str, dates: list[str]) -> None:
    previous: tuple[int, int] | None = None
    for idx, value in enumerate(dates):
        if not is_period_key(value):
            result.errors.append(f"{path}[{idx}].date: '{value}' is not valid; expected YYYY-M")
            continue
        current = period_sort_key(value)
        if previous is not None:
            if current == previous:
                result.errors.append(f"{path}[{idx}].date: duplicate entry for '{value}'")
            elif current < previous:
                result.errors.append(f"{path}[{idx}].date: '{value}' is out of order")
        previous = current


def validate_snapshot(snapshot: Snapshot) -> ValidationResult:
    result = ValidationResult()
    config = snapshot.config

    _check_percent(result, "config.taxRate", config.tax_rate)
    _check_percent(result, "config.contributionRate", config.contribution_rate)
    _check_percent(result, "config.amortizationSplit", config.amortization_split)
    if config.vacation_reserve < 0:
        result.errors.append("config.vacationReserve: must be >= 0")

    sequences = {
        "config.clients": config.clients,
        "config.sharedExpenses": config.shared_expenses,
        "config.personalExpenses": config.personal_expenses,
        "config.partner.income": config.partner.income,
        "config.partner.expenses": config.partner.expenses,
        "config.partner.allocations": config.partner.allocations,
        "config.alerts": config.alerts,
        "config.tasks": config.tasks,
    }
    for path, items in sequences.items():
        _check_unique_ids(result, path, items)
        if path not in ("config.clients", "config.alerts", "config.tasks"):
            _check_amounts(result, path, items)

    for path in ("config.sharedExpenses", "config.personalExpenses"):
        for idx, line in enumerate(sequences[path]):
            if line.category not in EXPENSE_CATEGORIES:
                result.warnings.append(f"{path}[{idx}].category: '{line.category}' is not a known expense category")

    meal_cards = [item for item in config.partner.income if item.is_meal_card]
    if len(meal_cards) > 1:
        result.warnings.append("config.partner.income: more than one meal card entry; only the first is deducted")

    for idx, alert in enumerate(config.alerts):
        _check_enum(result, f"config.alerts[{idx}].kind", alert.kind, ALERT_KINDS)
    for idx, task in enumerate(config.tasks):
        base = f"config.tasks[{idx}]"
        _check_enum(result, f"{base}.frequency", task.frequency, TASK_FREQUENCIES)
        if not 1 <= task.day <= 31:
            result.errors.append(f"{base}.day: {task.day} must be between 1 and 31")
        for m_idx, month in enumerate(task.months):
            if not 1 <= month <= 12:
                result.errors.append(f"{base}.months[{m_idx}]: {month} must be between 1 and 12")
        if task.frequency in ("quarterly", "annual") and not task.months:
            result.warnings.append(f"{base}.months: {task.frequency} task has no months and never applies")

    _check_history(result, "config.portfolioHistory", [point.date for point in config.portfolio_history])
    _check_history(result, "config.loan.balanceHistory", [point.date for point in config.loan.balance_history])

    loan = config.loan
    if loan.current_balance > 0 and loan.monthly_payment > 0:
        if months_to_payoff(loan.current_balance, loan.annual_rate, loan.monthly_payment) >= MAX_SIMULATION_MONTHS:
            result.warnings.append("config.loan.monthlyPayment: payment does not amortize the loan within the simulation cap")
        if loan.monthly_payment <= loan.current_balance * loan.annual_rate / 1200:
            result.warnings.append("config.loan.monthlyPayment: payment does not cover monthly interest")

    client_ids = {client.id for client in config.clients}
    categories = set(config.investment_categories)
    seen_periods: dict[tuple[int, int], str] = {}
    for key, record in snapshot.months.items():
        base = f"months.{key}"
        if not is_period_key(key):
            result.errors.append(f"{base}: '{key}' is not a valid month key; expected YYYY-M")
        else:
            period = period_sort_key(key)
            if period in seen_periods:
                result.errors.append(f"{base}: same month as '{seen_periods[period]}'")
            seen_periods[period] = key
            if key != period_key(*period):
                result.warnings.append(f"{base}: zero-padded key; lookups use '{period_key(*period)}'")
        for name, entries in (("taxedIncome", record.taxed_income), ("untaxedIncome", record.untaxed_income)):
            _check_unique_ids(result, f"{base}.{name}", entries)
            _check_amounts(result, f"{base}.{name}", entries)
            for idx, entry in enumerate(entries):
                if entry.client_id not in client_ids:
                    result.warnings.append(
                        f"{base}.{name}[{idx}].clientId: '{entry.client_id}' does not match any client; excluded from client totals"
                    )
        _check_unique_ids(result, f"{base}.investments", record.investments)
        _check_amounts(result, f"{base}.investments", record.investments)
        for idx, entry in enumerate(record.investments):
            if categories and entry.category not in categories:
                result.warnings.append(f"{base}.investments[{idx}].category: '{entry.category}' is not in investmentCategories")
        if record.portfolio is not None:
            _check_unique_ids(result, f"{base}.portfolio", record.portfolio)
            _check_amounts(result, f"{base}.portfolio", record.portfolio)
            portfolio_ids = {item.id for item in record.portfolio}
            for idx, entry in enumerate(record.investments):
                if entry.portfolio_item_id is not None and entry.portfolio_item_id not in portfolio_ids:
                    result.warnings.append(
                        f"{base}.investments[{idx}].portfolioItemId: '{entry.portfolio_item_id}' does not match any portfolio item"
                    )

    return result
