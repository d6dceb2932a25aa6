"""Mortgage amortization: annuity payment, payoff simulation and debt projection.

All simulations run month by month with ``interest = balance * annual_rate / 1200``.
A simulation that has not paid the loan off after MAX_SIMULATION_MONTHS
iterations stops there and returns MAX_SIMULATION_MONTHS; callers must read that
value as "does not amortize" rather than as a literal month count.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
import logging
import math
from typing import Final, Iterator

from .ledger import finite
from .periods import next_period_key, parse_period_key
from .schema import Loan

logger = logging.getLogger(__name__)

MAX_SIMULATION_MONTHS: Final[int] = 500
EXTRA_PAYMENT_CEILING: Final[float] = 5_000.0
EXTRA_PAYMENT_PRECISION: Final[float] = 1.0
AVERAGE_DAYS_PER_MONTH: Final[float] = 30.44
MAX_PROJECTION_SAMPLES: Final[int] = 15
# Residual balance treated as fully repaid (float noise from D/n payments).
PAID_OFF_EPSILON: Final[float] = 1e-6


def _monthly_rate(annual_rate: float) -> float:
    return finite(annual_rate) / 100.0 / 12.0


def monthly_payment(balance: float, annual_rate: float, term_months: int) -> float:
    """Annuity payment ``D * i(1+i)^n / ((1+i)^n - 1)``; ``D / n`` at zero interest."""
    balance = finite(balance)
    term = finite(term_months)
    if term <= 0 or balance <= 0:
        return 0.0
    rate = _monthly_rate(annual_rate)
    if rate == 0:
        return balance / term
    try:
        factor = (1.0 + rate) ** term
    except OverflowError:
        # Very long terms: the annuity converges to interest only.
        return balance * rate
    if factor == 1.0:
        return balance / term
    payment = balance * (rate * factor) / (factor - 1.0)
    return payment if math.isfinite(payment) else balance * rate


def _as_date(value: date | str) -> date | None:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def remaining_term_months(end_date: date | str, today: date) -> int:
    """Whole months left until ``end_date`` (30.44-day months), never less than 1."""
    end = _as_date(end_date)
    if end is None:
        logger.debug("unparseable loan end date %r", end_date)
        return 1
    days = (end - today).days
    return max(1, round(days / AVERAGE_DAYS_PER_MONTH))


def months_to_payoff(balance: float, annual_rate: float, fixed_payment: float, extra_monthly: float = 0.0) -> int:
    balance = finite(balance)
    if balance <= 0:
        return 0
    rate = _monthly_rate(annual_rate)
    payment = finite(fixed_payment)
    extra = finite(extra_monthly)

    months = 0
    while balance > PAID_OFF_EPSILON and months < MAX_SIMULATION_MONTHS:
        interest = balance * rate
        balance -= (payment - interest) + extra
        months += 1
        if not math.isfinite(balance):
            break
    if months >= MAX_SIMULATION_MONTHS or not math.isfinite(balance):
        logger.debug("loan does not amortize within %d months", MAX_SIMULATION_MONTHS)
        return MAX_SIMULATION_MONTHS
    return months


def never_amortizes(balance: float, annual_rate: float, fixed_payment: float, extra_monthly: float = 0.0) -> bool:
    return months_to_payoff(balance, annual_rate, fixed_payment, extra_monthly) >= MAX_SIMULATION_MONTHS


def extra_payment_for_target_years(
    balance: float,
    annual_rate: float,
    fixed_payment: float,
    target_years: float,
) -> float:
    """Smallest whole extra monthly payment that clears the loan within ``target_years``.

    Binary search over (0, EXTRA_PAYMENT_CEILING] down to EXTRA_PAYMENT_PRECISION.
    Returns 0 when the plain payment already meets the target and
    EXTRA_PAYMENT_CEILING when even the ceiling does not.
    """
    target_months = finite(target_years) * 12
    if months_to_payoff(balance, annual_rate, fixed_payment) <= target_months:
        return 0.0

    low, high = 0.0, EXTRA_PAYMENT_CEILING
    while high - low > EXTRA_PAYMENT_PRECISION:
        mid = (low + high) / 2
        if months_to_payoff(balance, annual_rate, fixed_payment, mid) <= target_months:
            high = mid
        else:
            low = mid
    return float(math.ceil(high))


def total_interest(balance: float, annual_rate: float, fixed_payment: float, extra_monthly: float = 0.0) -> float:
    balance = finite(balance)
    rate = _monthly_rate(annual_rate)
    payment = finite(fixed_payment)
    extra = finite(extra_monthly)

    paid = 0.0
    months = 0
    while balance > PAID_OFF_EPSILON and months < MAX_SIMULATION_MONTHS:
        interest = balance * rate
        remaining = balance - (payment - interest) - extra
        if not (math.isfinite(interest) and math.isfinite(remaining) and math.isfinite(paid + interest)):
            logger.debug("interest diverges after %d months; stopping at %.2f", months, paid)
            break
        paid += interest
        balance = max(0.0, remaining)
        months += 1
    return paid


@dataclass(slots=True, frozen=True)
class ProjectionPoint:
    month_offset: int
    balance: float


@dataclass(slots=True, frozen=True)
class DebtProjection:
    """Sampled balance path. Iterating twice replays the same samples.

    Starts at offset 0, samples every 12 months (24 when the horizon exceeds
    120 months), adds a closing zero sample when the loan is paid off between
    samples, and never yields more than MAX_PROJECTION_SAMPLES points.
    """

    balance: float
    annual_rate: float
    fixed_payment: float
    extra_monthly: float = 0.0
    horizon_months: int = 360

    @property
    def interval(self) -> int:
        return 12 if self.horizon_months <= 120 else 24

    def _samples(self) -> Iterator[ProjectionPoint]:
        balance = finite(self.balance)
        rate = _monthly_rate(self.annual_rate)
        payment = finite(self.fixed_payment)
        extra = finite(self.extra_monthly)
        interval = self.interval

        yield ProjectionPoint(0, balance)
        last = balance
        month = 0
        while month < self.horizon_months and balance > PAID_OFF_EPSILON:
            month += 1
            interest = balance * rate
            remaining = balance - (payment - interest) - extra
            if not math.isfinite(remaining):
                logger.debug("projected balance diverges after %d months", month - 1)
                return
            balance = max(0.0, remaining)
            if balance <= PAID_OFF_EPSILON:
                balance = 0.0
            if month % interval == 0:
                last = balance
                yield ProjectionPoint(month, balance)
        if balance <= 0 and last > 0:
            yield ProjectionPoint(month, 0.0)

    def __iter__(self) -> Iterator[ProjectionPoint]:
        for count, point in enumerate(self._samples()):
            if count >= MAX_PROJECTION_SAMPLES:
                return
            yield point


def debt_projection(
    balance: float,
    annual_rate: float,
    fixed_payment: float,
    extra_monthly: float = 0.0,
    horizon_months: int = 360,
) -> DebtProjection:
    return DebtProjection(balance, annual_rate, fixed_payment, extra_monthly, horizon_months)


@dataclass(slots=True)
class PlannedPayoff:
    months: int
    points: list[ProjectionPoint]

    @property
    def years(self) -> int:
        return self.months // 12

    @property
    def remainder_months(self) -> int:
        return self.months % 12


def planned_payoff(loan: Loan, start_key: str) -> PlannedPayoff:
    """Simulate the loan with its one-off planned amortizations.

    Month 1 of the simulation is the period after ``start_key``. Planned
    amortizations are matched on (year, month), so "2026-03" and "2026-3" are
    the same period. Yearly samples plus the payoff month are recorded.
    """
    planned: dict[tuple[int, int], float] = {}
    for item in loan.planned_amortizations:
        try:
            period = parse_period_key(item.date)
        except ValueError:
            logger.debug("ignoring planned amortization with bad date %r", item.date)
            continue
        planned[period] = planned.get(period, 0.0) + finite(item.amount)

    balance = finite(loan.current_balance)
    rate = _monthly_rate(loan.annual_rate)
    payment = finite(loan.monthly_payment)
    points = [ProjectionPoint(0, balance)]
    key = start_key
    months = 0
    while balance > PAID_OFF_EPSILON and months < MAX_SIMULATION_MONTHS:
        months += 1
        key = next_period_key(key)
        interest = balance * rate
        remaining = balance - (payment - interest) - planned.get(parse_period_key(key), 0.0)
        if not math.isfinite(remaining):
            logger.debug("planned payoff diverges after %d months", months - 1)
            return PlannedPayoff(months=MAX_SIMULATION_MONTHS, points=points)
        balance = max(0.0, remaining)
        if balance <= PAID_OFF_EPSILON:
            balance = 0.0
        if months % 12 == 0 or balance <= 0:
            points.append(ProjectionPoint(months, balance))
    return PlannedPayoff(months=months, points=points)


@dataclass(slots=True)
class LoanSummary:
    balance: float
    remaining_months: int
    theoretical_payment: float
    market_rate_payment: float
    monthly_cost: float
    repaid_amount: float
    repaid_percent: float
    equity_percent: float
    payoff_months: int
    payoff_months_with_extra: int
    interest_remaining: float
    interest_with_extra: float

    @property
    def interest_saved(self) -> float:
        return self.interest_remaining - self.interest_with_extra

    @property
    def amortizes(self) -> bool:
        return self.payoff_months < MAX_SIMULATION_MONTHS


def loan_summary(loan: Loan, today: date, extra_monthly: float = 0.0) -> LoanSummary:
    balance = finite(loan.current_balance)
    remaining = remaining_term_months(loan.end_date, today)
    principal = finite(loan.initial_principal)
    home = finite(loan.home_value)
    args = (balance, loan.annual_rate, loan.monthly_payment)
    return LoanSummary(
        balance=balance,
        remaining_months=remaining,
        theoretical_payment=monthly_payment(balance, loan.annual_rate, remaining),
        market_rate_payment=monthly_payment(balance, finite(loan.euribor_rate) + finite(loan.spread), remaining),
        monthly_cost=finite(loan.monthly_payment) + finite(loan.insurance),
        repaid_amount=principal - balance,
        repaid_percent=(principal - balance) / principal * 100.0 if principal > 0 else 0.0,
        equity_percent=(home - balance) / home * 100.0 if home > 0 else 0.0,
        payoff_months=months_to_payoff(*args),
        payoff_months_with_extra=months_to_payoff(*args, extra_monthly),
        interest_remaining=total_interest(*args),
        interest_with_extra=total_interest(*args, extra_monthly),
    )
