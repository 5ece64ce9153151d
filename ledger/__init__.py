"""Core business logic package for the profit tracker."""

from .aggregation import (
    business_detail,
    filter_transactions,
    rank_businesses,
    sort_for_display,
    summarize,
)
from .exceptions import PersistenceError, RecordNotFoundError, ValidationError
from .models import (
    Business,
    BusinessSummary,
    LedgerSummary,
    MonthBucket,
    RankedSummary,
    Transaction,
    TransactionKind,
)
from .services import (
    BusinessRegistry,
    ReportService,
    TransactionService,
    record_transaction,
    revise_transaction,
)
from .storage import DocumentStore

__all__ = [
    "Business",
    "BusinessSummary",
    "LedgerSummary",
    "MonthBucket",
    "RankedSummary",
    "Transaction",
    "TransactionKind",
    "BusinessRegistry",
    "ReportService",
    "TransactionService",
    "record_transaction",
    "revise_transaction",
    "DocumentStore",
    "business_detail",
    "filter_transactions",
    "rank_businesses",
    "sort_for_display",
    "summarize",
    "PersistenceError",
    "ValidationError",
    "RecordNotFoundError",
]
