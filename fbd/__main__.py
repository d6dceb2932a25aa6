"""CLI entry point for FBD."""

from __future__ import annotations

import argparse
from datetime import date
import logging
import sys

from .alerts import active_alerts
from .allocation import allocate_month, partner_summary, savings_rate
from .defaults import default_config
from .export import annual_rows, client_rows, expense_category_rows, month_rows
from .loan import MAX_SIMULATION_MONTHS, extra_payment_for_target_years, loan_summary
from .networth import net_worth_summary
from .periods import period_key, resolve_portfolio
from .schema import SchemaError, Snapshot, load_snapshot
from .store import save_snapshot
from .tax import estimate_year_tax
from .validate import validate_snapshot


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Family budget dashboard engine")
    parser.add_argument("snapshot", help="Path to snapshot JSON file")
    parser.add_argument("--validate", action="store_true", help="Validate JSON only")
    parser.add_argument("--init", action="store_true", help="Write a snapshot with the default configuration and exit")
    parser.add_argument("--year", type=int, help="Year to report (default: year of --today)")
    parser.add_argument("--month", type=int, help="Month 1-12 to report (default: month of --today)")
    parser.add_argument("--today", type=date.fromisoformat, help="Reference date YYYY-MM-DD (default: system date)")
    parser.add_argument("--extra", type=float, default=0.0, help="Extra monthly loan amortization to simulate")
    parser.add_argument("--target-years", type=float, help="Solve the extra payment needed to close the loan in N years")
    parser.add_argument("--rows", action="store_true", help="Print export rows for the year")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def _print_validation(errors: list[str], warnings: list[str]) -> None:
    for warning in warnings:
        print(f"WARNING: {warning}")
    for error in errors:
        print(f"ERROR: {error}", file=sys.stderr)


def _format_months(months: int) -> str:
    if months >= MAX_SIMULATION_MONTHS:
        return "never (payment does not reduce the balance)"
    return f"{months // 12}y {months % 12}m"


def _print_rows(title: str, rows: list[tuple[str, float]]) -> None:
    print(title)
    for label, value in rows:
        print(f"  {label}: {value:,.2f}")


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if args.init:
        try:
            save_snapshot(args.snapshot, Snapshot(config=default_config()))
        except OSError as exc:
            print(f"Failed to write snapshot: {exc}", file=sys.stderr)
            return 2
        print(f"Wrote {args.snapshot}")
        return 0

    try:
        snapshot = load_snapshot(args.snapshot)
    except (SchemaError, OSError, ValueError) as exc:
        print(f"Failed to load snapshot: {exc}", file=sys.stderr)
        return 2

    validation = validate_snapshot(snapshot)
    _print_validation(validation.errors, validation.warnings)
    if not validation.is_valid:
        return 1

    if args.validate:
        print("Snapshot is valid.")
        return 0

    today = args.today or date.today()
    year = args.year or today.year
    month = args.month or today.month
    if not 1 <= month <= 12:
        print("--month must be between 1 and 12", file=sys.stderr)
        return 2
    key = period_key(year, month)
    config = snapshot.config

    allocation = allocate_month(snapshot.months.get(key), config)
    print(f"Month: {key}")
    print(f"Income: {allocation.total_income:,.2f} (taxed {allocation.taxed_income:,.2f})")
    print(f"Tax reserve: {allocation.tax_reserve:,.2f}")
    print(f"Net income: {allocation.net_income:,.2f}")
    print(f"Shared share: {allocation.my_shared_share:,.2f}")
    print(f"Disposable: {allocation.disposable:,.2f}")
    print(f"Amortization / investment: {allocation.amortization_amount:,.2f} / {allocation.investment_amount:,.2f}")
    print(f"Savings rate: {savings_rate(allocation):.1f}%")

    partner = partner_summary(config)
    print(f"Partner contribution: {partner.contribution:,.2f} (surplus {partner.surplus:,.2f})")

    estimate = estimate_year_tax(snapshot.months, year, config)
    print(f"Tax estimate {year}: {estimate.estimated_tax:,.2f} + social security {estimate.social_security:,.2f}")
    print(f"Reconciliation: {estimate.reconciliation:,.2f}")

    loan = loan_summary(config.loan, today, args.extra)
    print(f"Loan balance: {loan.balance:,.2f} ({loan.repaid_percent:.1f}% repaid)")
    print(f"Payoff: {_format_months(loan.payoff_months)}")
    if args.extra:
        print(f"Payoff with extra {args.extra:,.2f}: {_format_months(loan.payoff_months_with_extra)}")
        print(f"Interest saved: {loan.interest_saved:,.2f}")
    if args.target_years is not None:
        needed = extra_payment_for_target_years(
            config.loan.current_balance, config.loan.annual_rate, config.loan.monthly_payment, args.target_years
        )
        print(f"Extra needed for {args.target_years:g} years: {needed:,.0f}")

    worth = net_worth_summary(resolve_portfolio(key, snapshot.months), config.loan)
    print(f"Net worth: {worth.total:,.2f}")

    for alert in active_alerts(snapshot, key, today):
        print(f"ALERT: {alert.message}")

    if args.rows:
        _print_rows(f"Annual {year}", annual_rows(snapshot, year))
        _print_rows("Clients", client_rows(snapshot, year))
        _print_rows("Expenses by category", expense_category_rows(config))
        _print_rows("Months", month_rows(snapshot.months, config, year))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
