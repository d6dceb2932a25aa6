from datetime import date

from fbd.alerts import active_alerts, task_applies, task_key, tasks_for_month
from fbd.schema import ExpenseLine, RecurringTask


def test_task_key_format():
    assert task_key(2025, 3, 7) == "2025-3-7"


def test_task_applies_by_frequency():
    assert task_applies(RecurringTask(1, "Invoices", 12, "monthly"), 5)
    assert task_applies(RecurringTask(2, "VAT", 15, "quarterly", months=[2, 5]), 5)
    assert not task_applies(RecurringTask(2, "VAT", 15, "quarterly", months=[2, 5]), 6)
    assert not task_applies(RecurringTask(3, "Off", 1, "monthly", active=False), 5)
    assert not task_applies(RecurringTask(4, "Odd", 1, "weekly"), 5)


def test_tasks_for_month_flags(sample_snapshot):
    config = sample_snapshot.config
    rows = tasks_for_month(config.tasks, config.completed_tasks, date(2025, 1, 10))

    assert [row.task.id for row in rows] == [1, 2]
    invoices, social_security = rows
    assert invoices.key == "2025-1-1"
    assert invoices.done
    assert invoices.upcoming and not invoices.overdue
    assert not social_security.done
    assert not social_security.upcoming and not social_security.overdue


def test_overdue_tasks_raise_alerts(sample_snapshot):
    alerts = active_alerts(sample_snapshot, "2025-2", date(2025, 2, 25))

    assert [a.kind for a in alerts] == ["task", "task", "task"]
    assert all(a.message.startswith("Overdue task") for a in alerts)


def test_month_end_alerts(sample_snapshot):
    alerts = active_alerts(sample_snapshot, "2025-3", date(2025, 3, 30))
    kinds = [a.kind for a in alerts]

    assert kinds.count("goal") == 1
    assert kinds.count("task") == 3
    transfers = [a for a in alerts if a.kind == "transfer"]
    assert len(transfers) == 2
    assert transfers[0].message.startswith("Transfer to investment account")


def test_expense_and_savings_rules(sample_snapshot):
    config = sample_snapshot.config
    config.personal_expenses.append(ExpenseLine(99, "Holiday", "Leisure", 500.0))
    config.alerts[2].limit = 99.0
    config.tasks = []

    alerts = active_alerts(sample_snapshot, "2025-1", date(2025, 1, 5))
    kinds = [a.kind for a in alerts]

    assert "expense" in kinds
    assert "savings" in kinds
    expense = next(a for a in alerts if a.kind == "expense")
    assert expense.amount == 1_176.0


def test_inactive_rules_are_ignored(sample_snapshot):
    for rule in sample_snapshot.config.alerts:
        rule.active = False
    sample_snapshot.config.tasks = []

    assert active_alerts(sample_snapshot, "2025-3", date(2025, 3, 15)) == []
