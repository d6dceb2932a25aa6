"""Percentage splits turning a month's income into disposable and allocated amounts."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Iterable

from .defaults import (
    BENCHMARKS,
    CHILDREN_INSURANCE_KEYWORDS,
    DEFAULT_CHILDREN_INSURANCE,
    FOOD_CATEGORY,
    HOUSING_CATEGORY,
    TRANSPORT_CATEGORY,
)
from .ledger import finite, month_income, month_investments, sum_entries
from .schema import ExpenseLine, GlobalConfig, MonthRecord, PartnerIncome

logger = logging.getLogger(__name__)


def clamp_percent(value: float) -> float:
    """Clamp a percentage to [0, 100]; non-finite values become 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return min(100.0, max(0.0, number))


def split_disposable(disposable: float, amortization_split: float) -> tuple[float, float]:
    """Return (amortization, investment) shares of the non-negative part of ``disposable``."""
    base = max(finite(disposable), 0.0)
    split = clamp_percent(amortization_split)
    amortization = base * split / 100.0
    return amortization, base - amortization


@dataclass(slots=True)
class MonthAllocation:
    taxed_income: float
    untaxed_income: float
    tax_reserve: float
    shared_total: float
    my_shared_share: float
    partner_shared_share: float
    personal_total: float
    vacation_reserve: float
    amortization_amount: float
    investment_amount: float
    investments_total: float

    @property
    def total_income(self) -> float:
        return self.taxed_income + self.untaxed_income

    @property
    def net_income(self) -> float:
        return self.total_income - self.tax_reserve

    @property
    def disposable(self) -> float:
        """Net income after shared, personal and vacation outflows. May be negative."""
        return self.net_income - self.my_shared_share - self.personal_total - self.vacation_reserve


def allocate_month(record: MonthRecord | None, config: GlobalConfig) -> MonthAllocation:
    taxed, untaxed = month_income(record)
    tax_rate = clamp_percent(config.tax_rate)
    contribution = clamp_percent(config.contribution_rate)

    shared_total = sum_entries(config.shared_expenses)
    personal_total = sum_entries(config.personal_expenses)
    vacation = finite(config.vacation_reserve)
    tax_reserve = taxed * tax_rate / 100.0
    my_share = shared_total * contribution / 100.0

    disposable = (taxed + untaxed) - tax_reserve - my_share - personal_total - vacation
    amortization, investment = split_disposable(disposable, config.amortization_split)

    return MonthAllocation(
        taxed_income=taxed,
        untaxed_income=untaxed,
        tax_reserve=tax_reserve,
        shared_total=shared_total,
        my_shared_share=my_share,
        partner_shared_share=shared_total * (1.0 - contribution / 100.0),
        personal_total=personal_total,
        vacation_reserve=vacation,
        amortization_amount=amortization,
        investment_amount=investment,
        investments_total=month_investments(record, include_credit=True),
    )


def meal_card_deduction(partner_income: Iterable[PartnerIncome]) -> float:
    for entry in partner_income:
        if entry.is_meal_card:
            return finite(entry.amount)
    return 0.0


def children_insurance_deduction(
    shared_expenses: Iterable[ExpenseLine],
    default: float = DEFAULT_CHILDREN_INSURANCE,
) -> float:
    """Shared-expense line paid fully by the partner.

    The explicit ``is_children_insurance`` flag wins; otherwise the first line
    whose description contains one of CHILDREN_INSURANCE_KEYWORDS is used.
    A matched line with a zero amount also falls back to ``default``.
    """
    lines = list(shared_expenses)
    flagged = next((line for line in lines if line.is_children_insurance), None)
    if flagged is not None:
        return finite(flagged.amount) or default

    for line in lines:
        text = line.description.lower()
        if any(keyword in text for keyword in CHILDREN_INSURANCE_KEYWORDS):
            logger.debug("children insurance matched by description %r", line.description)
            return finite(line.amount) or default
    return default


@dataclass(slots=True)
class PartnerSummary:
    total_income: float
    total_expenses: float
    shared_share: float
    meal_card: float
    children_insurance: float
    allocated: float

    @property
    def contribution(self) -> float:
        return self.shared_share - self.meal_card - self.children_insurance

    @property
    def surplus(self) -> float:
        return self.total_income - self.total_expenses - self.contribution

    @property
    def unallocated(self) -> float:
        return self.surplus - self.allocated


def partner_summary(config: GlobalConfig) -> PartnerSummary:
    contribution = clamp_percent(config.contribution_rate)
    shared_total = sum_entries(config.shared_expenses)
    return PartnerSummary(
        total_income=sum_entries(config.partner.income),
        total_expenses=sum_entries(config.partner.expenses),
        shared_share=shared_total * (1.0 - contribution / 100.0),
        meal_card=meal_card_deduction(config.partner.income),
        children_insurance=children_insurance_deduction(config.shared_expenses),
        allocated=sum_entries(config.partner.allocations),
    )


def savings_rate(allocation: MonthAllocation) -> float:
    """Invested plus unspent share of net income, in percent (0 without net income)."""
    net = allocation.net_income
    if net <= 0:
        return 0.0
    return (allocation.investments_total + max(allocation.disposable, 0.0)) / net * 100.0


@dataclass(slots=True)
class TransferPlan:
    shared_account: float
    personal_account: float
    investment_account: float
    vacation_account: float


def transfer_plan(allocation: MonthAllocation) -> TransferPlan:
    """Amounts to move into each account at month end.

    Income lands in the investment account, which must also cover the shared
    share, personal expenses and the tax reserve before they are moved out.
    """
    return TransferPlan(
        shared_account=allocation.my_shared_share,
        personal_account=allocation.personal_total,
        investment_account=allocation.my_shared_share + allocation.personal_total + allocation.tax_reserve,
        vacation_account=allocation.vacation_reserve,
    )


def pending_transfers(record: MonthRecord | None, plan: TransferPlan) -> list[tuple[str, float]]:
    """Transfers not yet ticked off for the month, as (account, amount)."""
    done = record.transfers if record is not None else None
    out: list[tuple[str, float]] = []
    for name in ("shared_account", "personal_account", "investment_account", "vacation_account"):
        if done is None or not getattr(done, name):
            out.append((name, getattr(plan, name)))
    return out


@dataclass(slots=True)
class BenchmarkResult:
    actual: float
    benchmark: float

    @property
    def within(self) -> bool:
        return self.actual <= self.benchmark


def benchmark_comparison(config: GlobalConfig, allocation: MonthAllocation) -> dict[str, BenchmarkResult]:
    """Spending shares of net income against fixed national averages."""
    net = allocation.net_income or 1.0
    contribution = clamp_percent(config.contribution_rate) / 100.0

    def _shared(category: str) -> float:
        return sum_entries([line for line in config.shared_expenses if line.category == category]) * contribution

    transport = sum_entries([line for line in config.personal_expenses if line.category == TRANSPORT_CATEGORY])
    return {
        "housing": BenchmarkResult(_shared(HOUSING_CATEGORY) / net * 100.0, BENCHMARKS["housing"]),
        "food": BenchmarkResult(_shared(FOOD_CATEGORY) / net * 100.0, BENCHMARKS["food"]),
        "transport": BenchmarkResult(transport / net * 100.0, BENCHMARKS["transport"]),
        # Savings is the one benchmark where higher is better.
        "savings": BenchmarkResult(savings_rate(allocation), BENCHMARKS["savings"]),
    }
