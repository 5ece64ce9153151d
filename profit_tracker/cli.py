"""Console interface for the profit tracker."""

from __future__ import annotations

import argparse
import os
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ledger.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from ledger.logging_utils import configure_logging
from ledger.models import BusinessSummary, TransactionKind
from ledger.services import (
    BusinessRegistry,
    ReportService,
    TransactionService,
    record_transaction,
    revise_transaction,
)
from ledger.storage import DocumentStore
from ledger.validators import validate_iso_date

TRANSACTION_ENTITIES = {kind.value: kind for kind in TransactionKind}


def _parse_date(value: str) -> str:
    try:
        return validate_iso_date(value)
    except ValidationError as exc:
        raise argparse.ArgumentTypeError(
            f"Invalid date '{value}'. Expected format YYYY-MM-DD."
        ) from exc


def _parse_amount(value: str) -> str:
    try:
        amount = Decimal(value)
    except InvalidOperation as exc:
        raise argparse.ArgumentTypeError("Amount must be a numeric value") from exc
    if not amount.is_finite():
        raise argparse.ArgumentTypeError("Amount must be a finite number")
    if amount <= 0:
        raise argparse.ArgumentTypeError("Amount must be greater than zero")
    return value


def _load_services(
    data_dir: Path,
) -> Tuple[BusinessRegistry, Dict[TransactionKind, TransactionService], ReportService]:
    storage = DocumentStore(data_dir)
    services = {kind: TransactionService(storage, kind) for kind in TransactionKind}
    reports = ReportService(services[TransactionKind.CREDIT], services[TransactionKind.EXPENSE])
    return BusinessRegistry(storage), services, reports


def _format_transaction(record: Dict[str, Any]) -> str:
    return (
        f"[{record['id']}] {record['date']} {record['amount']}\n"
        f"  Business: {record['business']}\n"
        f"  Note: {record.get('note') or '-'}\n"
    )


def _format_summary(summary: BusinessSummary) -> str:
    data = summary.to_dict()
    lines = [
        f"{data['business']}: credit {data['total_credit']} | expense {data['total_expense']}"
        f" | profit {data['profit']} | margin {data['profit_margin_percent']}%"
    ]
    for bucket in data["chart"]:
        lines.append(f"  {bucket['month']}: credit {bucket['credit']} | expense {bucket['expense']}")
    return "\n".join(lines)


def handle_transaction(
    args: argparse.Namespace, registry: BusinessRegistry, service: TransactionService
) -> None:
    label = service.kind.value.capitalize()
    if args.command == "add":
        payload = {
            "business": args.business,
            "amount": args.amount,
            "date": args.date,
            "note": args.note,
        }
        transaction = record_transaction(registry, service, payload)
        print(f"{label} added:\n" + _format_transaction(transaction.to_dict()))
    elif args.command == "list":
        filters = {"business": args.business, "start": args.start, "end": args.end}
        applied = {k: v for k, v in filters.items() if v is not None}
        records = service.list(**applied)
        if not records:
            print(f"No {service.kind.collection} found.")
            return
        total = service.total(**applied)
        print(f"Found {len(records)} {service.kind.collection} (total {total:.2f}):")
        for record in records:
            print(_format_transaction(record.to_dict()))
    elif args.command == "edit":
        changes = {
            "business": args.business,
            "amount": args.amount,
            "date": args.date,
            "note": args.note,
        }
        cleaned = {k: v for k, v in changes.items() if v is not None}
        transaction = revise_transaction(registry, service, args.id, cleaned)
        print(f"{label} updated:\n" + _format_transaction(transaction.to_dict()))
    elif args.command == "delete":
        service.delete(args.id)
        print(f"{label} {args.id} deleted.")


def handle_business(args: argparse.Namespace, registry: BusinessRegistry) -> None:
    if args.command == "add":
        business = registry.ensure(args.name)
        print(f"Business ready: {business.name}")
    elif args.command == "list":
        businesses = registry.list()
        if not businesses:
            print("No businesses found.")
            return
        for business in businesses:
            print(business.name)


def handle_summary(reports: ReportService) -> None:
    summary = reports.summary()
    for business in summary.businesses.values():
        print(_format_summary(business))
    print(_format_summary(summary.overall))
    if summary.skipped:
        print(f"Left out of charts (unreadable dates): {', '.join(summary.skipped)}")


def handle_ranking(reports: ReportService) -> None:
    ranking = reports.ranking()
    if not ranking:
        print("No businesses found.")
        return
    for entry in ranking:
        data = entry.summary.to_dict()
        print(
            f"{entry.rank}. {data['business']} margin {data['profit_margin_percent']}%"
            f" (profit {data['profit']})"
        )


def handle_report(args: argparse.Namespace, reports: ReportService) -> None:
    report = reports.business_report(args.name)
    print(_format_summary(report["summary"]))
    for heading, key in (("Credits", "credits"), ("Expenses", "expenses")):
        print(f"{heading}:")
        for record in report[key]:
            print(_format_transaction(record.to_dict()))


def _add_transaction_parser(subparsers: Any, kind: TransactionKind) -> None:
    parser = subparsers.add_parser(kind.value, help=f"Manage {kind.collection}")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help=f"Add a new {kind.value}")
    add.add_argument("business")
    add.add_argument("amount", type=_parse_amount)
    add.add_argument("date", type=_parse_date)
    add.add_argument("--note", default="")

    listing = sub.add_parser("list", help=f"List {kind.collection}")
    listing.add_argument("--business")
    listing.add_argument("--start", type=_parse_date)
    listing.add_argument("--end", type=_parse_date)

    edit = sub.add_parser("edit", help=f"Edit an existing {kind.value}")
    edit.add_argument("id")
    edit.add_argument("--business")
    edit.add_argument("--amount", type=_parse_amount)
    edit.add_argument("--date", type=_parse_date)
    edit.add_argument("--note")

    delete = sub.add_parser("delete", help=f"Delete a {kind.value}")
    delete.add_argument("id")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Business profit tracker CLI")
    parser.add_argument(
        "--data-dir",
        default=os.getenv("PROFIT_TRACKER_DATA_DIR", "data"),
        type=Path,
        help="Directory to store JSON data (default: ./data)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: PROFIT_TRACKER_LOG_LEVEL or INFO)",
    )

    subparsers = parser.add_subparsers(dest="entity", required=True)
    for kind in TransactionKind:
        _add_transaction_parser(subparsers, kind)

    business_parser = subparsers.add_parser("business", help="Manage businesses")
    business_sub = business_parser.add_subparsers(dest="command", required=True)
    business_add = business_sub.add_parser("add", help="Register a business name")
    business_add.add_argument("name")
    business_sub.add_parser("list", help="List businesses")

    subparsers.add_parser("summary", help="Show per-business and overall summaries")
    subparsers.add_parser("ranking", help="Rank businesses by profit margin")

    report_parser = subparsers.add_parser("report", help="Show one business in detail")
    report_parser.add_argument("name")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    try:
        registry, services, reports = _load_services(args.data_dir)
        if args.entity in TRANSACTION_ENTITIES:
            handle_transaction(args, registry, services[TRANSACTION_ENTITIES[args.entity]])
        elif args.entity == "business":
            handle_business(args, registry)
        elif args.entity == "summary":
            handle_summary(reports)
        elif args.entity == "ranking":
            handle_ranking(reports)
        elif args.entity == "report":
            handle_report(args, reports)
        else:  # pragma: no cover - argparse should prevent this
            parser.error(f"Unknown entity: {args.entity}")
            return 2
    except ValidationError as exc:
        print(f"Validation error: {exc}", file=sys.stderr)
        return 1
    except RecordNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
