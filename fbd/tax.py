"""Income tax and social security estimate for the simplified self-employment regime."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from .allocation import clamp_percent
from .ledger import annual_totals, finite
from .schema import GlobalConfig, MonthRecord, TaxRegime


@dataclass(slots=True)
class TaxEstimate:
    gross_income: float
    taxable_income: float
    bracket_tax: float
    deductions: float
    estimated_tax: float
    social_security: float
    withheld: float

    @property
    def reconciliation(self) -> float:
        """Positive means a refund is expected, negative means more is due."""
        return self.withheld - (self.estimated_tax + self.social_security)

    @property
    def income_tax_balance(self) -> float:
        return self.withheld - self.estimated_tax

    @property
    def effective_rate(self) -> float:
        if self.gross_income <= 0:
            return 0.0
        return self.estimated_tax / self.gross_income * 100.0


def _progressive_tax(amount: float, brackets: list[tuple[float | None, float]]) -> float:
    if amount <= 0:
        return 0.0

    remaining = amount
    lower = 0.0
    tax = 0.0
    for upper, rate in brackets:
        if remaining <= 0:
            break
        if upper is None:
            taxable_at_rate = remaining
        else:
            taxable_at_rate = min(remaining, max(0.0, upper - lower))
        tax += taxable_at_rate * rate
        remaining -= taxable_at_rate
        if upper is None:
            break
        lower = upper
    return max(0.0, tax)


def flat_deduction(gross_income: float, regime: TaxRegime) -> float:
    return regime.base_deduction + min(max(gross_income, 0.0) * regime.expense_deduction_rate, regime.expense_deduction_cap)


def estimate_tax(gross_income: float, withheld: float = 0.0, regime: TaxRegime | None = None) -> TaxEstimate:
    regime = regime or TaxRegime.default()
    gross = max(finite(gross_income), 0.0)
    taxable = gross * regime.coefficient
    bracket_tax = _progressive_tax(taxable, [(b.upper, b.rate) for b in regime.brackets])
    deductions = flat_deduction(gross, regime)
    return TaxEstimate(
        gross_income=gross,
        taxable_income=taxable,
        bracket_tax=bracket_tax,
        deductions=deductions,
        estimated_tax=max(0.0, bracket_tax - deductions),
        social_security=gross * regime.social_security_rate,
        withheld=finite(withheld),
    )


def estimate_year_tax(months: Mapping[str, MonthRecord], year: int, config: GlobalConfig) -> TaxEstimate:
    """Estimate for a calendar year; withholding is the reserve kept on taxed income."""
    totals = annual_totals(months, year)
    withheld = totals.taxed_income * clamp_percent(config.tax_rate) / 100.0
    return estimate_tax(totals.income, withheld, config.tax_regime)
