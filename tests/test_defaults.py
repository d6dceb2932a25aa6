from fbd.allocation import children_insurance_deduction, partner_summary
from fbd.defaults import (
    CREDIT_CATEGORY,
    EXPENSE_CATEGORIES,
    default_config,
    default_investments,
    default_month,
    default_portfolio,
)
from fbd.schema import Snapshot
from fbd.validate import validate_snapshot


def test_default_config_validates_cleanly():
    result = validate_snapshot(Snapshot(config=default_config()))
    assert result.is_valid, result.errors
    assert result.warnings == []


def test_default_expense_totals():
    config = default_config()
    assert sum(line.amount for line in config.shared_expenses) == 2494
    assert sum(line.amount for line in config.personal_expenses) == 676
    assert children_insurance_deduction(config.shared_expenses) == 60
    assert {line.category for line in config.shared_expenses} <= set(EXPENSE_CATEGORIES)


def test_default_partner_has_one_meal_card():
    config = default_config()
    assert [item.description for item in config.partner.income if item.is_meal_card] == ["Meal card"]
    assert partner_summary(config).total_income == sum(item.amount for item in config.partner.income)


def test_portfolio_and_investment_templates_link_up():
    portfolio_ids = [item.id for item in default_portfolio()]
    assert portfolio_ids == [1, 2, 3, 4, 5, 6, 7]

    credit = [entry for entry in default_investments() if entry.category == CREDIT_CATEGORY]
    assert len(credit) == 1
    assert credit[0].portfolio_item_id == 7
    assert all(entry.portfolio_item_id in portfolio_ids for entry in default_investments())


def test_default_month_leaves_portfolio_to_carry_forward():
    record = default_month()
    assert record.portfolio is None
    assert record.taxed_income == []
    assert [entry.id for entry in record.investments] == [1, 2, 3, 4, 5, 6]


def test_templates_return_fresh_objects():
    first = default_config()
    first.shared_expenses.clear()
    assert len(default_config().shared_expenses) == 13
