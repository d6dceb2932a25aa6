"""Snapshot schema dataclasses and JSON loading."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import math
from pathlib import Path
from typing import Any

from .tax_data import (
    BASE_PERSONAL_DEDUCTION,
    EXPENSE_DEDUCTION_CAP,
    EXPENSE_DEDUCTION_RATE,
    INCOME_TAX_BRACKETS,
    SIMPLIFIED_REGIME_COEFFICIENT,
    SOCIAL_SECURITY_RATE,
)

Id = int | float | str


class SchemaError(ValueError):
    """Raised when raw JSON cannot be parsed into schema objects."""


def _expect_dict(value: Any, path: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise SchemaError(f"{path}: expected object")
    return value


def _expect_list(value: Any, path: str) -> list[Any]:
    if not isinstance(value, list):
        raise SchemaError(f"{path}: expected array")
    return value


def _require(data: dict[str, Any], key: str, path: str) -> Any:
    if key not in data:
        raise SchemaError(f"{path}.{key}: missing required field")
    return data[key]


def _optional(data: dict[str, Any], key: str, default: Any = None) -> Any:
    return data.get(key, default)


def _number(value: Any, path: str) -> float:
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        raise SchemaError(f"{path}: expected number")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise SchemaError(f"{path}: expected number") from None
    if not math.isfinite(number):
        return 0.0
    return number


def _id(value: Any, path: str) -> Id:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise SchemaError(f"{path}: expected number or string id")
    return value


def _optional_id(data: dict[str, Any], key: str, path: str) -> Id | None:
    value = _optional(data, key)
    return None if value is None else _id(value, f"{path}.{key}")


def _extra(data: dict[str, Any], known: set[str]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if key not in known}


def _with_extra(out: dict[str, Any], extra: dict[str, Any]) -> dict[str, Any]:
    for key, value in extra.items():
        out.setdefault(key, value)
    return out


def _items(data: dict[str, Any], key: str, path: str, parser: Any) -> list[Any]:
    raw = _expect_list(_optional(data, key, []), f"{path}.{key}")
    return [parser(_expect_dict(item, f"{path}.{key}[{idx}]"), f"{path}.{key}[{idx}]") for idx, item in enumerate(raw)]


@dataclass(slots=True)
class Client:
    id: Id
    name: str
    color: str = "#64748b"
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "Client":
        return cls(
            id=_id(_require(data, "id", path), f"{path}.id"),
            name=str(_optional(data, "name", "")),
            color=str(_optional(data, "color", "#64748b")),
            extra=_extra(data, {"id", "name", "color"}),
        )

    def to_dict(self) -> dict[str, Any]:
        return _with_extra({"id": self.id, "name": self.name, "color": self.color}, self.extra)


@dataclass(slots=True)
class ExpenseLine:
    id: Id
    description: str
    category: str
    amount: float
    is_children_insurance: bool = False
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "ExpenseLine":
        return cls(
            id=_id(_require(data, "id", path), f"{path}.id"),
            description=str(_optional(data, "description", "")),
            category=str(_optional(data, "category", "")),
            amount=_number(_optional(data, "amount"), f"{path}.amount"),
            is_children_insurance=bool(_optional(data, "isChildrenInsurance", False)),
            extra=_extra(data, {"id", "description", "category", "amount", "isChildrenInsurance"}),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "description": self.description,
            "category": self.category,
            "amount": self.amount,
        }
        if self.is_children_insurance:
            out["isChildrenInsurance"] = True
        return _with_extra(out, self.extra)


@dataclass(slots=True)
class IncomeEntry:
    id: Id
    client_id: Id | None
    amount: float
    date: str = ""
    description: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "IncomeEntry":
        return cls(
            id=_id(_require(data, "id", path), f"{path}.id"),
            client_id=_optional_id(data, "clientId", path),
            amount=_number(_optional(data, "amount"), f"{path}.amount"),
            date=str(_optional(data, "date", "")),
            description=str(_optional(data, "description", "")),
            extra=_extra(data, {"id", "clientId", "amount", "date", "description"}),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "clientId": self.client_id,
            "amount": self.amount,
            "date": self.date,
            "description": self.description,
        }
        return _with_extra(out, self.extra)


@dataclass(slots=True)
class InvestmentEntry:
    id: Id
    description: str
    category: str
    amount: float
    done: bool = False
    portfolio_item_id: Id | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "InvestmentEntry":
        return cls(
            id=_id(_require(data, "id", path), f"{path}.id"),
            description=str(_optional(data, "description", "")),
            category=str(_optional(data, "category", "")),
            amount=_number(_optional(data, "amount"), f"{path}.amount"),
            done=bool(_optional(data, "done", False)),
            portfolio_item_id=_optional_id(data, "portfolioItemId", path),
            extra=_extra(data, {"id", "description", "category", "amount", "done", "portfolioItemId"}),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "description": self.description,
            "category": self.category,
            "amount": self.amount,
            "done": self.done,
        }
        if self.portfolio_item_id is not None:
            out["portfolioItemId"] = self.portfolio_item_id
        return _with_extra(out, self.extra)


@dataclass(slots=True)
class PortfolioItem:
    id: Id
    description: str
    category: str
    amount: float
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "PortfolioItem":
        return cls(
            id=_id(_require(data, "id", path), f"{path}.id"),
            description=str(_optional(data, "description", "")),
            category=str(_optional(data, "category", "")),
            amount=_number(_optional(data, "amount"), f"{path}.amount"),
            extra=_extra(data, {"id", "description", "category", "amount"}),
        )

    def to_dict(self) -> dict[str, Any]:
        return _with_extra({"id": self.id, "description": self.description, "category": self.category, "amount": self.amount}, self.extra)


@dataclass(slots=True)
class Transfers:
    shared_account: bool = False
    personal_account: bool = False
    investment_account: bool = False
    vacation_account: bool = False
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = "transfers") -> "Transfers":
        return cls(
            shared_account=bool(_optional(data, "sharedAccount", False)),
            personal_account=bool(_optional(data, "personalAccount", False)),
            investment_account=bool(_optional(data, "investmentAccount", False)),
            vacation_account=bool(_optional(data, "vacationAccount", False)),
            extra=_extra(data, {"sharedAccount", "personalAccount", "investmentAccount", "vacationAccount"}),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "sharedAccount": self.shared_account,
            "personalAccount": self.personal_account,
            "investmentAccount": self.investment_account,
            "vacationAccount": self.vacation_account,
        }
        return _with_extra(out, self.extra)


@dataclass(slots=True)
class PartnerIncome:
    id: Id
    description: str
    amount: float
    is_meal_card: bool = False
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "PartnerIncome":
        return cls(
            id=_id(_require(data, "id", path), f"{path}.id"),
            description=str(_optional(data, "description", "")),
            amount=_number(_optional(data, "amount"), f"{path}.amount"),
            is_meal_card=bool(_optional(data, "isMealCard", False)),
            extra=_extra(data, {"id", "description", "amount", "isMealCard"}),
        )

    def to_dict(self) -> dict[str, Any]:
        return _with_extra({"id": self.id, "description": self.description, "amount": self.amount, "isMealCard": self.is_meal_card}, self.extra)


@dataclass(slots=True)
class PartnerExpense:
    id: Id
    description: str
    amount: float
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "PartnerExpense":
        return cls(
            id=_id(_require(data, "id", path), f"{path}.id"),
            description=str(_optional(data, "description", "")),
            amount=_number(_optional(data, "amount"), f"{path}.amount"),
            extra=_extra(data, {"id", "description", "amount"}),
        )

    def to_dict(self) -> dict[str, Any]:
        return _with_extra({"id": self.id, "description": self.description, "amount": self.amount}, self.extra)


@dataclass(slots=True)
class PartnerAllocation:
    id: Id
    description: str
    amount: float
    color: str = "#64748b"
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "PartnerAllocation":
        return cls(
            id=_id(_require(data, "id", path), f"{path}.id"),
            description=str(_optional(data, "description", "")),
            amount=_number(_optional(data, "amount"), f"{path}.amount"),
            color=str(_optional(data, "color", "#64748b")),
            extra=_extra(data, {"id", "description", "amount", "color"}),
        )

    def to_dict(self) -> dict[str, Any]:
        return _with_extra({"id": self.id, "description": self.description, "amount": self.amount, "color": self.color}, self.extra)


@dataclass(slots=True)
class Partner:
    income: list[PartnerIncome] = field(default_factory=list)
    expenses: list[PartnerExpense] = field(default_factory=list)
    allocations: list[PartnerAllocation] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = "config.partner") -> "Partner":
        return cls(
            income=_items(data, "income", path, PartnerIncome.from_dict),
            expenses=_items(data, "expenses", path, PartnerExpense.from_dict),
            allocations=_items(data, "allocations", path, PartnerAllocation.from_dict),
            extra=_extra(data, {"income", "expenses", "allocations"}),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "income": [item.to_dict() for item in self.income],
            "expenses": [item.to_dict() for item in self.expenses],
            "allocations": [item.to_dict() for item in self.allocations],
        }
        return _with_extra(out, self.extra)


@dataclass(slots=True)
class BalancePoint:
    date: str
    balance: float
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "BalancePoint":
        return cls(
            date=str(_require(data, "date", path)),
            balance=_number(_require(data, "balance", path), f"{path}.balance"),
            extra=_extra(data, {"date", "balance"}),
        )

    def to_dict(self) -> dict[str, Any]:
        return _with_extra({"date": self.date, "balance": self.balance}, self.extra)


@dataclass(slots=True)
class PlannedAmortization:
    date: str
    amount: float
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "PlannedAmortization":
        return cls(
            date=str(_require(data, "date", path)),
            amount=_number(_require(data, "amount", path), f"{path}.amount"),
            extra=_extra(data, {"date", "amount"}),
        )

    def to_dict(self) -> dict[str, Any]:
        return _with_extra({"date": self.date, "amount": self.amount}, self.extra)


_LOAN_KEYS = {
    "homeValue",
    "initialDownPayment",
    "initialPrincipal",
    "currentBalance",
    "annualRate",
    "monthlyPayment",
    "insurance",
    "endDate",
    "spread",
    "euriborRate",
    "balanceHistory",
    "plannedAmortizations",
}


@dataclass(slots=True)
class Loan:
    home_value: float = 0.0
    initial_down_payment: float = 0.0
    initial_principal: float = 0.0
    current_balance: float = 0.0
    annual_rate: float = 0.0
    monthly_payment: float = 0.0
    insurance: float = 0.0
    end_date: str = ""
    spread: float = 0.0
    euribor_rate: float = 0.0
    balance_history: list[BalancePoint] = field(default_factory=list)
    planned_amortizations: list[PlannedAmortization] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = "config.loan") -> "Loan":
        return cls(
            home_value=_number(_optional(data, "homeValue"), f"{path}.homeValue"),
            initial_down_payment=_number(_optional(data, "initialDownPayment"), f"{path}.initialDownPayment"),
            initial_principal=_number(_optional(data, "initialPrincipal"), f"{path}.initialPrincipal"),
            current_balance=_number(_optional(data, "currentBalance"), f"{path}.currentBalance"),
            annual_rate=_number(_optional(data, "annualRate"), f"{path}.annualRate"),
            monthly_payment=_number(_optional(data, "monthlyPayment"), f"{path}.monthlyPayment"),
            insurance=_number(_optional(data, "insurance"), f"{path}.insurance"),
            end_date=str(_optional(data, "endDate", "")),
            spread=_number(_optional(data, "spread"), f"{path}.spread"),
            euribor_rate=_number(_optional(data, "euriborRate"), f"{path}.euriborRate"),
            balance_history=_items(data, "balanceHistory", path, BalancePoint.from_dict),
            planned_amortizations=_items(data, "plannedAmortizations", path, PlannedAmortization.from_dict),
            extra=_extra(data, _LOAN_KEYS),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "homeValue": self.home_value,
            "initialDownPayment": self.initial_down_payment,
            "initialPrincipal": self.initial_principal,
            "currentBalance": self.current_balance,
            "annualRate": self.annual_rate,
            "monthlyPayment": self.monthly_payment,
            "insurance": self.insurance,
            "endDate": self.end_date,
            "spread": self.spread,
            "euriborRate": self.euribor_rate,
            "balanceHistory": [point.to_dict() for point in self.balance_history],
            "plannedAmortizations": [item.to_dict() for item in self.planned_amortizations],
        }
        return _with_extra(out, self.extra)


@dataclass(slots=True)
class Goals:
    income_target: float = 0.0
    amortization_target: float = 0.0
    investment_target: float = 0.0
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = "config.goals") -> "Goals":
        return cls(
            income_target=_number(_optional(data, "incomeTarget"), f"{path}.incomeTarget"),
            amortization_target=_number(_optional(data, "amortizationTarget"), f"{path}.amortizationTarget"),
            investment_target=_number(_optional(data, "investmentTarget"), f"{path}.investmentTarget"),
            extra=_extra(data, {"incomeTarget", "amortizationTarget", "investmentTarget"}),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "incomeTarget": self.income_target,
            "amortizationTarget": self.amortization_target,
            "investmentTarget": self.investment_target,
        }
        return _with_extra(out, self.extra)


@dataclass(slots=True)
class PortfolioPoint:
    date: str
    total: float
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "PortfolioPoint":
        return cls(
            date=str(_require(data, "date", path)),
            total=_number(_require(data, "total", path), f"{path}.total"),
            extra=_extra(data, {"date", "total"}),
        )

    def to_dict(self) -> dict[str, Any]:
        return _with_extra({"date": self.date, "total": self.total}, self.extra)


@dataclass(slots=True)
class AlertRule:
    id: Id
    kind: str
    description: str = ""
    active: bool = True
    limit: float | None = None
    percentage: float | None = None
    subject: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "AlertRule":
        limit = _optional(data, "limit")
        percentage = _optional(data, "percentage")
        return cls(
            id=_id(_require(data, "id", path), f"{path}.id"),
            kind=str(_require(data, "kind", path)),
            description=str(_optional(data, "description", "")),
            active=bool(_optional(data, "active", True)),
            limit=_number(limit, f"{path}.limit") if limit is not None else None,
            percentage=_number(percentage, f"{path}.percentage") if percentage is not None else None,
            subject=_optional(data, "field"),
            extra=_extra(data, {"id", "kind", "description", "active", "limit", "percentage", "field"}),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "kind": self.kind, "description": self.description, "active": self.active}
        if self.limit is not None:
            out["limit"] = self.limit
        if self.percentage is not None:
            out["percentage"] = self.percentage
        if self.subject is not None:
            out["field"] = self.subject
        return _with_extra(out, self.extra)


@dataclass(slots=True)
class RecurringTask:
    id: Id
    description: str
    day: int
    frequency: str
    months: list[int] = field(default_factory=list)
    category: str = ""
    active: bool = True
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "RecurringTask":
        months = [int(_number(m, f"{path}.months[{idx}]")) for idx, m in enumerate(_expect_list(_optional(data, "months", []), f"{path}.months"))]
        return cls(
            id=_id(_require(data, "id", path), f"{path}.id"),
            description=str(_optional(data, "description", "")),
            day=int(_number(_require(data, "day", path), f"{path}.day")),
            frequency=str(_require(data, "frequency", path)),
            months=months,
            category=str(_optional(data, "category", "")),
            active=bool(_optional(data, "active", True)),
            extra=_extra(data, {"id", "description", "day", "frequency", "months", "category", "active"}),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "description": self.description,
            "day": self.day,
            "frequency": self.frequency,
            "months": list(self.months),
            "category": self.category,
            "active": self.active,
        }
        return _with_extra(out, self.extra)


@dataclass(slots=True)
class TaxBracket:
    upper: float | None
    rate: float
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "TaxBracket":
        upper = _optional(data, "upper")
        return cls(
            upper=_number(upper, f"{path}.upper") if upper is not None else None,
            rate=_number(_require(data, "rate", path), f"{path}.rate"),
            extra=_extra(data, {"upper", "rate"}),
        )

    def to_dict(self) -> dict[str, Any]:
        return _with_extra({"upper": self.upper, "rate": self.rate}, self.extra)


@dataclass(slots=True)
class TaxRegime:
    coefficient: float
    social_security_rate: float
    brackets: list[TaxBracket]
    base_deduction: float
    expense_deduction_rate: float
    expense_deduction_cap: float
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def default(cls) -> "TaxRegime":
        return cls(
            coefficient=SIMPLIFIED_REGIME_COEFFICIENT,
            social_security_rate=SOCIAL_SECURITY_RATE,
            brackets=[TaxBracket(upper=upper, rate=rate) for upper, rate in INCOME_TAX_BRACKETS],
            base_deduction=BASE_PERSONAL_DEDUCTION,
            expense_deduction_rate=EXPENSE_DEDUCTION_RATE,
            expense_deduction_cap=EXPENSE_DEDUCTION_CAP,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = "config.taxRegime") -> "TaxRegime":
        base = cls.default()
        brackets_raw = _optional(data, "brackets")
        brackets = base.brackets
        if brackets_raw is not None:
            brackets = [
                TaxBracket.from_dict(_expect_dict(item, f"{path}.brackets[{idx}]"), f"{path}.brackets[{idx}]")
                for idx, item in enumerate(_expect_list(brackets_raw, f"{path}.brackets"))
            ]

        def _get(key: str, fallback: float) -> float:
            return _number(data[key], f"{path}.{key}") if key in data else fallback

        return cls(
            coefficient=_get("coefficient", base.coefficient),
            social_security_rate=_get("socialSecurityRate", base.social_security_rate),
            brackets=brackets,
            base_deduction=_get("baseDeduction", base.base_deduction),
            expense_deduction_rate=_get("expenseDeductionRate", base.expense_deduction_rate),
            expense_deduction_cap=_get("expenseDeductionCap", base.expense_deduction_cap),
            extra=_extra(
                data,
                {"coefficient", "socialSecurityRate", "brackets", "baseDeduction", "expenseDeductionRate", "expenseDeductionCap"},
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "coefficient": self.coefficient,
            "socialSecurityRate": self.social_security_rate,
            "brackets": [bracket.to_dict() for bracket in self.brackets],
            "baseDeduction": self.base_deduction,
            "expenseDeductionRate": self.expense_deduction_rate,
            "expenseDeductionCap": self.expense_deduction_cap,
        }
        return _with_extra(out, self.extra)


_CONFIG_KEYS = {
    "clients",
    "taxRate",
    "contributionRate",
    "amortizationSplit",
    "vacationReserve",
    "sharedExpenses",
    "personalExpenses",
    "investmentCategories",
    "partner",
    "loan",
    "goals",
    "portfolioHistory",
    "alerts",
    "tasks",
    "completedTasks",
    "taxRegime",
}


@dataclass(slots=True)
class GlobalConfig:
    clients: list[Client] = field(default_factory=list)
    tax_rate: float = 0.0
    contribution_rate: float = 50.0
    amortization_split: float = 0.0
    vacation_reserve: float = 0.0
    shared_expenses: list[ExpenseLine] = field(default_factory=list)
    personal_expenses: list[ExpenseLine] = field(default_factory=list)
    investment_categories: list[str] = field(default_factory=list)
    partner: Partner = field(default_factory=Partner)
    loan: Loan = field(default_factory=Loan)
    goals: Goals = field(default_factory=Goals)
    portfolio_history: list[PortfolioPoint] = field(default_factory=list)
    alerts: list[AlertRule] = field(default_factory=list)
    tasks: list[RecurringTask] = field(default_factory=list)
    completed_tasks: dict[str, bool] = field(default_factory=dict)
    tax_regime: TaxRegime | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str = "config") -> "GlobalConfig":
        tax_regime_raw = _optional(data, "taxRegime")
        tax_regime = None
        if tax_regime_raw is not None:
            tax_regime = TaxRegime.from_dict(_expect_dict(tax_regime_raw, f"{path}.taxRegime"), f"{path}.taxRegime")
        completed = _expect_dict(_optional(data, "completedTasks", {}), f"{path}.completedTasks")
        return cls(
            clients=_items(data, "clients", path, Client.from_dict),
            tax_rate=_number(_optional(data, "taxRate"), f"{path}.taxRate"),
            contribution_rate=_number(_optional(data, "contributionRate", 50.0), f"{path}.contributionRate"),
            amortization_split=_number(_optional(data, "amortizationSplit"), f"{path}.amortizationSplit"),
            vacation_reserve=_number(_optional(data, "vacationReserve"), f"{path}.vacationReserve"),
            shared_expenses=_items(data, "sharedExpenses", path, ExpenseLine.from_dict),
            personal_expenses=_items(data, "personalExpenses", path, ExpenseLine.from_dict),
            investment_categories=[str(c) for c in _expect_list(_optional(data, "investmentCategories", []), f"{path}.investmentCategories")],
            partner=Partner.from_dict(_expect_dict(_optional(data, "partner", {}), f"{path}.partner"), f"{path}.partner"),
            loan=Loan.from_dict(_expect_dict(_optional(data, "loan", {}), f"{path}.loan"), f"{path}.loan"),
            goals=Goals.from_dict(_expect_dict(_optional(data, "goals", {}), f"{path}.goals"), f"{path}.goals"),
            portfolio_history=_items(data, "portfolioHistory", path, PortfolioPoint.from_dict),
            alerts=_items(data, "alerts", path, AlertRule.from_dict),
            tasks=_items(data, "tasks", path, RecurringTask.from_dict),
            completed_tasks={str(key): bool(value) for key, value in completed.items()},
            tax_regime=tax_regime,
            extra=_extra(data, _CONFIG_KEYS),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "clients": [client.to_dict() for client in self.clients],
            "taxRate": self.tax_rate,
            "contributionRate": self.contribution_rate,
            "amortizationSplit": self.amortization_split,
            "vacationReserve": self.vacation_reserve,
            "sharedExpenses": [line.to_dict() for line in self.shared_expenses],
            "personalExpenses": [line.to_dict() for line in self.personal_expenses],
            "investmentCategories": list(self.investment_categories),
            "partner": self.partner.to_dict(),
            "loan": self.loan.to_dict(),
            "goals": self.goals.to_dict(),
            "portfolioHistory": [point.to_dict() for point in self.portfolio_history],
            "alerts": [alert.to_dict() for alert in self.alerts],
            "tasks": [task.to_dict() for task in self.tasks],
            "completedTasks": dict(self.completed_tasks),
        }
        if self.tax_regime is not None:
            out["taxRegime"] = self.tax_regime.to_dict()
        return _with_extra(out, self.extra)


_MONTH_KEYS = {"taxedIncome", "untaxedIncome", "investments", "transfers", "portfolio"}


@dataclass(slots=True)
class MonthRecord:
    taxed_income: list[IncomeEntry] = field(default_factory=list)
    untaxed_income: list[IncomeEntry] = field(default_factory=list)
    investments: list[InvestmentEntry] = field(default_factory=list)
    transfers: Transfers = field(default_factory=Transfers)
    portfolio: list[PortfolioItem] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str) -> "MonthRecord":
        portfolio = None
        if _optional(data, "portfolio") is not None:
            portfolio = _items(data, "portfolio", path, PortfolioItem.from_dict)
        return cls(
            taxed_income=_items(data, "taxedIncome", path, IncomeEntry.from_dict),
            untaxed_income=_items(data, "untaxedIncome", path, IncomeEntry.from_dict),
            investments=_items(data, "investments", path, InvestmentEntry.from_dict),
            transfers=Transfers.from_dict(_expect_dict(_optional(data, "transfers", {}), f"{path}.transfers"), f"{path}.transfers"),
            portfolio=portfolio,
            extra=_extra(data, _MONTH_KEYS),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "taxedIncome": [entry.to_dict() for entry in self.taxed_income],
            "untaxedIncome": [entry.to_dict() for entry in self.untaxed_income],
            "investments": [entry.to_dict() for entry in self.investments],
            "transfers": self.transfers.to_dict(),
        }
        if self.portfolio is not None:
            out["portfolio"] = [item.to_dict() for item in self.portfolio]
        return _with_extra(out, self.extra)


@dataclass(slots=True)
class Snapshot:
    config: GlobalConfig
    months: dict[str, MonthRecord] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Snapshot":
        config = GlobalConfig.from_dict(_expect_dict(_require(data, "config", "snapshot"), "config"))
        months_raw = _expect_dict(_optional(data, "months", {}), "months")
        months = {
            str(key): MonthRecord.from_dict(_expect_dict(value, f"months.{key}"), f"months.{key}")
            for key, value in months_raw.items()
        }
        return cls(config=config, months=months)

    def to_dict(self) -> dict[str, Any]:
        return {
            "config": self.config.to_dict(),
            "months": {key: record.to_dict() for key, record in self.months.items()},
        }


def load_snapshot(path: str | Path) -> Snapshot:
    """Load snapshot JSON into strongly-typed dataclasses."""
    source = Path(path)
    raw = json.loads(source.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise SchemaError("snapshot: root must be a JSON object")
    return Snapshot.from_dict(raw)
