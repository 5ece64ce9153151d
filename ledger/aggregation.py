"""Aggregation engine turning raw transactions into financial summaries.

Every function here is pure: callers pass a snapshot of transactions and
receive fresh summary objects. Nothing is cached between calls and the input
sequence is never mutated.

Dates that cannot be parsed are kept in totals but left out of the monthly
charts; their transaction ids are reported in ``LedgerSummary.skipped``.
Transactions without a business name count toward the overall summary only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .exceptions import RecordNotFoundError, ValidationError
from .logging_utils import get_logger
from .models import (
    OVERALL_KEY,
    BusinessSummary,
    LedgerSummary,
    MonthBucket,
    RankedSummary,
    Transaction,
    TransactionKind,
)
from .validators import parse_iso_date, validate_optional_date

LOGGER = get_logger(__name__)

MonthKey = Tuple[int, int]


@dataclass
class _Accumulator:
    name: str
    total_credit: Decimal = Decimal("0.00")
    total_expense: Decimal = Decimal("0.00")
    buckets: Dict[MonthKey, MonthBucket] = field(default_factory=dict)

    def add(self, transaction: Transaction, month: Optional[MonthKey]) -> None:
        if transaction.kind is TransactionKind.CREDIT:
            self.total_credit += transaction.amount
        else:
            self.total_expense += transaction.amount
        if month is None:
            return
        bucket = self.buckets.get(month)
        if bucket is None:
            bucket = self.buckets[month] = MonthBucket(year=month[0], month=month[1])
        bucket.add(transaction.kind, transaction.amount)

    def build(self) -> BusinessSummary:
        return BusinessSummary(
            business=self.name,
            total_expense=self.total_expense,
            total_credit=self.total_credit,
            chart=[self.buckets[key] for key in sorted(self.buckets)],
        )


def month_key(value: str) -> Optional[MonthKey]:
    """Return the ``(year, month)`` of a ``YYYY-MM-DD`` string, or None if unparseable."""
    parsed = parse_iso_date(value)
    if parsed is None:
        return None
    return (parsed.year, parsed.month)


def _check_transaction(transaction: object) -> Transaction:
    if not isinstance(transaction, Transaction):
        raise ValidationError(
            f"Expected Transaction records, got {type(transaction).__name__}"
        )
    if not isinstance(transaction.kind, TransactionKind):
        raise ValidationError(f"Transaction {transaction.id} has an unknown kind")
    if transaction.business is not None and not isinstance(transaction.business, str):
        raise ValidationError(f"Transaction {transaction.id} business must be a string")
    if not isinstance(transaction.date, str):
        raise ValidationError(
            f"Transaction {transaction.id} date must be a YYYY-MM-DD string"
        )
    amount = transaction.amount
    if isinstance(amount, bool) or not isinstance(amount, (Decimal, int, float)):
        raise ValidationError(f"Transaction {transaction.id} amount must be numeric")
    if not Decimal(amount).is_finite():
        raise ValidationError(f"Transaction {transaction.id} amount must be finite")
    return transaction


def _as_decimal(transaction: Transaction) -> Transaction:
    if isinstance(transaction.amount, Decimal):
        return transaction
    return Transaction(
        id=transaction.id,
        kind=transaction.kind,
        business=transaction.business,
        amount=Decimal(str(transaction.amount)),
        date=transaction.date,
        note=transaction.note,
    )


def summarize(transactions: Iterable[Transaction]) -> LedgerSummary:
    """Aggregate transactions into per-business and overall summaries.

    The input is validated up front so a type violation rejects the whole
    snapshot instead of producing a partial summary. Businesses are returned
    ordered by name.
    """
    records = [_as_decimal(_check_transaction(item)) for item in transactions]

    overall = _Accumulator(OVERALL_KEY)
    per_business: Dict[str, _Accumulator] = {}
    skipped: List[str] = []
    unnamed = 0

    for transaction in records:
        month = month_key(transaction.date)
        if month is None:
            skipped.append(transaction.id)
        overall.add(transaction, month)

        name = (transaction.business or "").strip()
        if not name:
            unnamed += 1
            continue
        accumulator = per_business.get(name)
        if accumulator is None:
            accumulator = per_business[name] = _Accumulator(name)
        accumulator.add(transaction, month)

    if skipped:
        LOGGER.warning(
            "Left %s transaction(s) with unparseable dates out of the charts: %s",
            len(skipped),
            ", ".join(skipped),
        )
    if unnamed:
        LOGGER.warning("Counted %s transaction(s) without a business in overall only", unnamed)

    return LedgerSummary(
        businesses={name: per_business[name].build() for name in sorted(per_business)},
        overall=overall.build(),
        skipped=skipped,
    )


def rank_businesses(businesses: Mapping[str, BusinessSummary]) -> List[RankedSummary]:
    """Order summaries by profit margin, highest first.

    The sort is stable, so businesses with equal margins keep the mapping's
    order (alphabetical when the mapping comes from ``summarize``).
    """
    ordered = sorted(
        businesses.values(),
        key=lambda summary: summary.profit_margin_percent,
        reverse=True,
    )
    return [RankedSummary(rank=index, summary=summary) for index, summary in enumerate(ordered, start=1)]


def filter_transactions(
    records: Iterable[Transaction],
    business: Optional[str] = None,
    start: Optional[object] = None,
    end: Optional[object] = None,
) -> List[Transaction]:
    """Keep records matching the business and inclusive date range.

    Missing criteria match everything. Dates compare as ``YYYY-MM-DD``
    strings; the relative order of the input is preserved.
    """
    start_date = validate_optional_date(start, "start")
    end_date = validate_optional_date(end, "end")
    business_name = business if business else None

    def matches(transaction: Transaction) -> bool:
        if business_name is not None and transaction.business != business_name:
            return False
        if start_date is not None and transaction.date < start_date:
            return False
        if end_date is not None and transaction.date > end_date:
            return False
        return True

    return [transaction for transaction in records if matches(transaction)]


def sort_for_display(records: Iterable[Transaction]) -> List[Transaction]:
    """Newest first; records sharing a date keep their relative order."""
    return sorted(records, key=lambda transaction: transaction.date, reverse=True)


def business_detail(transactions: Sequence[Transaction], name: str) -> Dict[str, object]:
    """Summary plus the credit and expense records of a single business."""
    name = name.strip()
    records = filter_transactions(transactions, business=name) if name else []
    if not records:
        raise RecordNotFoundError(f"Business {name} has no transactions")
    summary = summarize(records)
    return {
        "summary": summary.businesses[name],
        "credits": sort_for_display(
            record for record in records if record.kind is TransactionKind.CREDIT
        ),
        "expenses": sort_for_display(
            record for record in records if record.kind is TransactionKind.EXPENSE
        ),
        "skipped": summary.skipped,
    }
