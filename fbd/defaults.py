"""Default configuration, month template and reference constants."""

from __future__ import annotations

from typing import Final

from .schema import (
    AlertRule,
    BalancePoint,
    Client,
    ExpenseLine,
    GlobalConfig,
    Goals,
    InvestmentEntry,
    Loan,
    MonthRecord,
    Partner,
    PartnerAllocation,
    PartnerExpense,
    PartnerIncome,
    PortfolioItem,
    RecurringTask,
)

# Loan amortization is capital reallocation, not new savings.
CREDIT_CATEGORY: Final[str] = "CREDITO"

INVESTMENT_CATEGORIES: Final[tuple[str, ...]] = ("ETF", "PPR", "P2P", "CRIPTO", "FE", CREDIT_CATEGORY)

# Legacy description match for the children's insurance shared expense.
CHILDREN_INSURANCE_KEYWORDS: Final[tuple[str, ...]] = ("seguro filhos", "children insurance")
DEFAULT_CHILDREN_INSURANCE: Final[float] = 60.0

# Share of net income, in percent.
BENCHMARKS: Final[dict[str, float]] = {
    "housing": 35.0,
    "food": 15.0,
    "transport": 10.0,
    "savings": 10.0,
}
HOUSING_CATEGORY: Final[str] = "Housing"
FOOD_CATEGORY: Final[str] = "Food"
TRANSPORT_CATEGORY: Final[str] = "Transport"

EXPENSE_CATEGORIES: Final[tuple[str, ...]] = (
    HOUSING_CATEGORY,
    "Utilities",
    FOOD_CATEGORY,
    "Health",
    "Leisure",
    TRANSPORT_CATEGORY,
    "Subscriptions",
    "Banking",
    "Services",
    "Miscellaneous",
    "Other",
    "Insurance",
)

_PORTFOLIO_TEMPLATE: Final[list[tuple[int, str, str]]] = [
    (1, "Trade Republic", "ETF"),
    (2, "Degiro", "ETF"),
    (3, "PPR", "PPR"),
    (4, "Crypto", "CRIPTO"),
    (5, "P2P", "P2P"),
    (6, "Emergency Fund", "FE"),
    (7, "Accumulated Amortization", CREDIT_CATEGORY),
]

_INVESTMENT_TEMPLATE: Final[list[tuple[int, str, str, int | None]]] = [
    (1, "Trade Republic", "ETF", 1),
    (2, "Degiro", "ETF", 2),
    (3, "PPR", "PPR", 3),
    (4, "Crypto", "CRIPTO", 4),
    (5, "P2P", "P2P", 5),
    (6, "Extra Amortization", CREDIT_CATEGORY, 7),
]


def default_portfolio() -> list[PortfolioItem]:
    return [PortfolioItem(id=i, description=d, category=c, amount=0.0) for i, d, c in _PORTFOLIO_TEMPLATE]


def default_investments() -> list[InvestmentEntry]:
    return [
        InvestmentEntry(id=i, description=d, category=c, amount=0.0, done=False, portfolio_item_id=link)
        for i, d, c, link in _INVESTMENT_TEMPLATE
    ]


def default_month() -> MonthRecord:
    """Template for a month that has not been written yet (portfolio left to carry-forward)."""
    return MonthRecord(investments=default_investments())


def default_config() -> GlobalConfig:
    return GlobalConfig(
        clients=[
            Client(id=1, name="Client A", color="#3b82f6"),
            Client(id=2, name="Client B", color="#ec4899"),
        ],
        tax_rate=38.0,
        contribution_rate=50.0,
        amortization_split=75.0,
        vacation_reserve=130.0,
        shared_expenses=[
            ExpenseLine(1, "Mortgage payment", HOUSING_CATEGORY, 971.0),
            ExpenseLine(2, "Property insurance", HOUSING_CATEGORY, 16.0),
            ExpenseLine(3, "Life insurance", HOUSING_CATEGORY, 36.0),
            ExpenseLine(4, "Water/Power", "Utilities", 200.0),
            ExpenseLine(5, "Groceries", FOOD_CATEGORY, 714.0),
            ExpenseLine(6, "Internet", "Utilities", 43.0),
            ExpenseLine(7, "Condominium", HOUSING_CATEGORY, 59.0),
            ExpenseLine(8, "Account fees", "Banking", 5.0),
            ExpenseLine(9, "Coffee", "Leisure", 50.0),
            ExpenseLine(10, "Cleaning", "Services", 175.0),
            ExpenseLine(11, "School", "Other", 120.0),
            ExpenseLine(12, "Gym", "Other", 45.0),
            ExpenseLine(13, "Children insurance", "Insurance", 60.0, is_children_insurance=True),
        ],
        personal_expenses=[
            ExpenseLine(1, "Phone", "Utilities", 14.0),
            ExpenseLine(2, "Car", TRANSPORT_CATEGORY, 30.0),
            ExpenseLine(3, "Gifts/Leisure", "Miscellaneous", 400.0),
            ExpenseLine(4, "Subscriptions", "Subscriptions", 47.0),
            ExpenseLine(5, "Crossfit", "Health", 85.0),
            ExpenseLine(6, "Coffee", FOOD_CATEGORY, 100.0),
        ],
        investment_categories=list(INVESTMENT_CATEGORIES),
        partner=Partner(
            income=[
                PartnerIncome(1, "Flex benefit", 1131.0),
                PartnerIncome(2, "Meal card", 224.0, is_meal_card=True),
                PartnerIncome(3, "Salary", 1360.0),
            ],
            expenses=[
                PartnerExpense(1, "Car insurance", 60.39),
                PartnerExpense(2, "Car", 720.0),
                PartnerExpense(3, "Crossfit", 89.0),
                PartnerExpense(4, "Health insurance", 20.0),
                PartnerExpense(5, "Streaming", 15.0),
                PartnerExpense(6, "Cloud storage", 2.0),
                PartnerExpense(7, "Extra expenses", 200.0),
            ],
            allocations=[
                PartnerAllocation(1, "Emergency", 230.0, "#3b82f6"),
                PartnerAllocation(2, "ETF", 100.0, "#8b5cf6"),
                PartnerAllocation(3, "Vacation", 130.0, "#f59e0b"),
                PartnerAllocation(4, "Amortization", 130.0, "#10b981"),
            ],
        ),
        loan=Loan(
            home_value=365_000.0,
            initial_down_payment=36_500.0,
            initial_principal=328_500.0,
            current_balance=229_693.43,
            annual_rate=2.0,
            monthly_payment=971.0,
            insurance=50.0,
            end_date="2054-02-01",
            spread=1.0,
            euribor_rate=2.5,
            balance_history=[BalancePoint("2022-01", 328_500.0), BalancePoint("2025-12", 229_693.43)],
        ),
        goals=Goals(income_target=80_000.0, amortization_target=15_000.0, investment_target=12_000.0),
        alerts=[
            AlertRule(1, "expense", "Personal expenses over 800", limit=800.0, subject="personalExpenses"),
            AlertRule(2, "goal", "Income under 80% of goal", percentage=80.0, subject="income"),
            AlertRule(3, "savings", "Savings rate under 20%", limit=20.0),
        ],
        tasks=[
            RecurringTask(1, "Submit invoices", 12, "monthly", category="VAT"),
            RecurringTask(2, "Pay social security", 20, "monthly", category="SS"),
            RecurringTask(3, "Quarterly VAT return", 15, "quarterly", months=[2, 5, 8, 11], category="VAT"),
            RecurringTask(4, "Income tax advance payment", 20, "quarterly", months=[7, 9, 12], category="IRS"),
            RecurringTask(5, "Annual income tax return", 30, "annual", months=[6], category="IRS"),
            RecurringTask(6, "Renew car insurance", 1, "annual", months=[3], category="Insurance"),
        ],
    )
