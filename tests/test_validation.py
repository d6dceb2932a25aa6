from tests.helpers import clone_snapshot
from fbd.schema import Snapshot
from fbd.validate import validate_snapshot


def _validate(data: dict):
    return validate_snapshot(Snapshot.from_dict(data))


def test_sample_snapshot_is_valid(sample_snapshot):
    result = validate_snapshot(sample_snapshot)
    assert result.is_valid, result.errors
    assert result.warnings == []


def test_percentages_must_be_in_range(sample_snapshot_dict):
    data = clone_snapshot(sample_snapshot_dict)
    data["config"]["taxRate"] = 120
    data["config"]["amortizationSplit"] = -1

    result = _validate(data)
    assert not result.is_valid
    assert any(e.startswith("config.taxRate:") for e in result.errors)
    assert any(e.startswith("config.amortizationSplit:") for e in result.errors)


def test_duplicate_ids_are_errors(sample_snapshot_dict):
    data = clone_snapshot(sample_snapshot_dict)
    data["config"]["sharedExpenses"][1]["id"] = 1

    result = _validate(data)
    assert "config.sharedExpenses[1].id: duplicate id 1" in result.errors


def test_negative_amounts_are_errors(sample_snapshot_dict):
    data = clone_snapshot(sample_snapshot_dict)
    data["months"]["2025-2"]["taxedIncome"][0]["amount"] = -5

    result = _validate(data)
    assert "months.2025-2.taxedIncome[0].amount: must be >= 0" in result.errors


def test_malformed_and_duplicate_month_keys(sample_snapshot_dict):
    data = clone_snapshot(sample_snapshot_dict)
    data["months"]["2025-13"] = {}
    data["months"]["2025-01"] = {}

    result = _validate(data)
    assert any("'2025-13' is not a valid month key" in e for e in result.errors)
    assert "months.2025-01: same month as '2025-1'" in result.errors
    assert any("zero-padded key" in w for w in result.warnings)


def test_portfolio_history_must_be_sorted_and_unique(sample_snapshot_dict):
    data = clone_snapshot(sample_snapshot_dict)
    history = data["config"]["portfolioHistory"]
    history.append({"date": "2024-12", "total": 1})
    history.append({"date": "2024-12", "total": 2})

    result = _validate(data)
    assert "config.portfolioHistory[2].date: '2024-12' is out of order" in result.errors
    assert "config.portfolioHistory[3].date: duplicate entry for '2024-12'" in result.errors


def test_unknown_kinds_and_frequencies(sample_snapshot_dict):
    data = clone_snapshot(sample_snapshot_dict)
    data["config"]["alerts"][0]["kind"] = "weather"
    data["config"]["tasks"][0]["frequency"] = "weekly"

    result = _validate(data)
    assert any(e.startswith("config.alerts[0].kind: 'weather' is not valid") for e in result.errors)
    assert any(e.startswith("config.tasks[0].frequency: 'weekly' is not valid") for e in result.errors)


def test_cross_reference_warnings(sample_snapshot_dict):
    data = clone_snapshot(sample_snapshot_dict)
    data["months"]["2025-1"]["taxedIncome"][0]["clientId"] = 42
    data["months"]["2025-1"]["investments"][0]["category"] = "GOLD"
    data["months"]["2025-1"]["investments"][1]["portfolioItemId"] = 77
    data["config"]["partner"]["income"][0]["isMealCard"] = True

    result = _validate(data)
    assert result.is_valid
    assert any("clientId: '42' does not match any client" in w for w in result.warnings)
    assert any("'GOLD' is not in investmentCategories" in w for w in result.warnings)
    assert any("portfolioItemId: '77' does not match" in w for w in result.warnings)
    assert any("more than one meal card" in w for w in result.warnings)


def test_loan_that_never_amortizes_is_flagged(sample_snapshot_dict):
    data = clone_snapshot(sample_snapshot_dict)
    data["config"]["loan"]["monthlyPayment"] = 100

    result = _validate(data)
    assert result.is_valid
    assert any("does not cover monthly interest" in w for w in result.warnings)
    assert any("does not amortize" in w for w in result.warnings)


def test_unknown_expense_category_is_a_warning(sample_snapshot_dict):
    data = clone_snapshot(sample_snapshot_dict)
    data["config"]["personalExpenses"][0]["category"] = "Pets"

    result = _validate(data)
    assert result.is_valid
    assert "config.personalExpenses[0].category: 'Pets' is not a known expense category" in result.warnings
