"""Tax bracket and rate reference data for the simplified self-employment regime."""

from __future__ import annotations

from typing import Final

# Share of gross receipts treated as taxable income under the simplified regime.
SIMPLIFIED_REGIME_COEFFICIENT: Final[float] = 0.75

# Self-employed social security contribution, applied to gross receipts.
SOCIAL_SECURITY_RATE: Final[float] = 0.214

# Brackets are (upper_bound, marginal_rate). Upper bound None means infinity.
INCOME_TAX_BRACKETS: Final[list[tuple[float | None, float]]] = [
    (7_703.0, 0.145),
    (11_623.0, 0.21),
    (16_472.0, 0.265),
    (21_321.0, 0.285),
    (27_146.0, 0.35),
    (39_791.0, 0.37),
    (51_997.0, 0.435),
    (81_199.0, 0.45),
    (None, 0.48),
]

# Flat deduction estimate: personal allowance plus general expenses (capped).
BASE_PERSONAL_DEDUCTION: Final[float] = 4_104.0
EXPENSE_DEDUCTION_RATE: Final[float] = 0.15
EXPENSE_DEDUCTION_CAP: Final[float] = 250.0
