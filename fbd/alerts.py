"""Recurring task status and budget alerts for the current month."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
import logging
from typing import Final, Iterable, Mapping

from .allocation import allocate_month, savings_rate, transfer_plan
from .ledger import annual_totals
from .periods import period_key
from .schema import RecurringTask, Snapshot

logger = logging.getLogger(__name__)

UPCOMING_TASK_DAYS: Final[int] = 5
ALERT_TASK_DAYS: Final[int] = 3
TASK_FREQUENCIES: Final[tuple[str, ...]] = ("monthly", "quarterly", "annual")
ALERT_KINDS: Final[tuple[str, ...]] = ("expense", "goal", "savings")
# Share of the pro-rated income goal under which the goal alert fires.
DEFAULT_GOAL_PERCENTAGE: Final[float] = 80.0

# Day-of-month windows for the month-end transfer reminders.
MID_TRANSFER_DAYS: Final[range] = range(24, 27)
LATE_TRANSFER_FIRST_DAY: Final[int] = 30
LATE_TRANSFER_LAST_DAY: Final[int] = 2


def task_key(year: int, month: int, task_id: object) -> str:
    return f"{period_key(year, month)}-{task_id}"


def task_applies(task: RecurringTask, month: int) -> bool:
    if not task.active:
        return False
    if task.frequency == "monthly":
        return True
    if task.frequency in ("quarterly", "annual"):
        return month in task.months
    return False


@dataclass(slots=True)
class TaskStatus:
    task: RecurringTask
    key: str
    done: bool
    overdue: bool
    upcoming: bool


def tasks_for_month(
    tasks: Iterable[RecurringTask],
    completed: Mapping[str, bool],
    today: date,
    upcoming_days: int = UPCOMING_TASK_DAYS,
) -> list[TaskStatus]:
    rows: list[TaskStatus] = []
    for task in tasks:
        if not task_applies(task, today.month):
            continue
        key = task_key(today.year, today.month, task.id)
        rows.append(
            TaskStatus(
                task=task,
                key=key,
                done=bool(completed.get(key, False)),
                overdue=task.day < today.day,
                upcoming=today.day <= task.day <= today.day + upcoming_days,
            )
        )
    return rows


@dataclass(slots=True)
class Alert:
    kind: str
    message: str
    amount: float | None = None


def _fmt(amount: float) -> str:
    return f"{amount:,.2f}"


def active_alerts(snapshot: Snapshot, key: str, today: date) -> list[Alert]:
    """Alerts for month ``key`` as of ``today``.

    Covers the configured alert rules, pending and late tasks and the
    month-end transfer reminders that have not been ticked off.
    """
    config = snapshot.config
    record = snapshot.months.get(key)
    allocation = allocate_month(record, config)
    alerts: list[Alert] = []

    for rule in config.alerts:
        if not rule.active:
            continue
        if rule.kind == "expense" and rule.subject == "personalExpenses" and rule.limit is not None:
            if allocation.personal_total > rule.limit:
                alerts.append(
                    Alert("expense", f"{rule.description}: {_fmt(allocation.personal_total)} (limit {_fmt(rule.limit)})", allocation.personal_total)
                )
        elif rule.kind == "savings" and rule.limit is not None:
            rate = savings_rate(allocation)
            if rate < rule.limit:
                alerts.append(Alert("savings", f"{rule.description}: {rate:.1f}%", rate))
        elif rule.kind == "goal":
            percentage = rule.percentage if rule.percentage is not None else DEFAULT_GOAL_PERCENTAGE
            expected = config.goals.income_target * today.month / 12
            income = annual_totals(snapshot.months, today.year).income
            if income < expected * percentage / 100.0:
                alerts.append(Alert("goal", f"Income below expected: {_fmt(income)} vs {_fmt(expected)}", income))
        elif rule.kind not in ALERT_KINDS:
            logger.debug("ignoring alert %s with unknown kind %r", rule.id, rule.kind)

    for status in tasks_for_month(config.tasks, config.completed_tasks, today, ALERT_TASK_DAYS):
        if status.done:
            continue
        if status.overdue:
            alerts.append(Alert("task", f"Overdue task: {status.task.description} (day {status.task.day})"))
        elif status.upcoming:
            alerts.append(Alert("task", f"Due soon: {status.task.description} (day {status.task.day})"))

    plan = transfer_plan(allocation)
    done = record.transfers if record is not None else None

    def _pending(name: str) -> bool:
        return done is None or not getattr(done, name)

    if today.day in MID_TRANSFER_DAYS:
        if _pending("shared_account"):
            alerts.append(Alert("transfer", f"Transfer to shared account: {_fmt(plan.shared_account)}", plan.shared_account))
        if _pending("personal_account"):
            alerts.append(Alert("transfer", f"Transfer to personal account: {_fmt(plan.personal_account)}", plan.personal_account))
    if today.day >= LATE_TRANSFER_FIRST_DAY or today.day <= LATE_TRANSFER_LAST_DAY:
        if _pending("investment_account"):
            alerts.append(Alert("transfer", f"Transfer to investment account: {_fmt(plan.investment_account)}", plan.investment_account))
        if _pending("vacation_account"):
            alerts.append(Alert("transfer", f"Transfer to vacation account: {_fmt(plan.vacation_account)}", plan.vacation_account))
    return alerts
