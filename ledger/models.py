"""Data models for the profit tracker domain."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Dict, List, Tuple

__all__ = [
    "Business",
    "BusinessSummary",
    "LedgerSummary",
    "MonthBucket",
    "OVERALL_KEY",
    "RankedSummary",
    "Transaction",
    "TransactionKind",
    "format_amount",
    "month_label",
]

OVERALL_KEY = "overall"

# Fixed English abbreviations so labels never depend on the process locale.
MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def format_amount(amount: Decimal) -> str:
    """Render an amount with exactly two fraction digits."""
    return f"{amount:.2f}"


def month_label(year: int, month: int) -> str:
    """Return the ``"Mon YYYY"`` display label for a calendar month."""
    return f"{MONTH_ABBREVIATIONS[month - 1]} {year}"


class TransactionKind(str, Enum):
    CREDIT = "credit"
    EXPENSE = "expense"

    @property
    def collection(self) -> str:
        """Name of the document collection holding this kind."""
        return f"{self.value}s"


@dataclass(frozen=True)
class Transaction:
    id: str
    kind: TransactionKind
    business: str
    amount: Decimal
    date: str
    note: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the transaction to JSON-friendly natives."""
        return {
            "id": self.id,
            "kind": self.kind.value,
            "business": self.business,
            "amount": format_amount(self.amount),
            "date": self.date,
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], kind: TransactionKind) -> "Transaction":
        """Hydrate a Transaction from a stored document of the given collection."""
        return cls(
            id=data["id"],
            kind=kind,
            business=str(data.get("business") or "").strip(),
            amount=Decimal(str(data["amount"])),
            date=str(data.get("date") or ""),
            note=data.get("note") or "",
        )


@dataclass(frozen=True)
class Business:
    id: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Business":
        return cls(id=data["id"], name=data["name"])


@dataclass
class MonthBucket:
    """Credit and expense totals for one calendar month of a chart."""

    year: int
    month: int
    credit: Decimal = ZERO
    expense: Decimal = ZERO

    @property
    def key(self) -> Tuple[int, int]:
        return (self.year, self.month)

    @property
    def label(self) -> str:
        return month_label(self.year, self.month)

    def add(self, kind: TransactionKind, amount: Decimal) -> None:
        if kind is TransactionKind.CREDIT:
            self.credit += amount
        else:
            self.expense += amount

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.label,
            "credit": format_amount(self.credit),
            "expense": format_amount(self.expense),
        }


@dataclass
class BusinessSummary:
    """Totals and monthly chart for one business, or for every business."""

    business: str
    total_expense: Decimal = ZERO
    total_credit: Decimal = ZERO
    chart: List[MonthBucket] = field(default_factory=list)

    @property
    def profit(self) -> Decimal:
        return self.total_credit - self.total_expense

    @property
    def profit_margin_percent(self) -> Decimal:
        """Profit as a percentage of credit, 0.00 when nothing was credited."""
        if self.total_credit == 0:
            return ZERO
        margin = self.profit / self.total_credit * HUNDRED
        return margin.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "business": self.business,
            "total_expense": format_amount(self.total_expense),
            "total_credit": format_amount(self.total_credit),
            "profit": format_amount(self.profit),
            "profit_margin_percent": format_amount(self.profit_margin_percent),
            "chart": [bucket.to_dict() for bucket in self.chart],
        }


@dataclass
class LedgerSummary:
    businesses: Dict[str, BusinessSummary]
    overall: BusinessSummary
    skipped: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "businesses": {
                name: summary.to_dict() for name, summary in self.businesses.items()
            },
            "overall": self.overall.to_dict(),
            "skipped": list(self.skipped),
        }


@dataclass(frozen=True)
class RankedSummary:
    rank: int
    summary: BusinessSummary

    def to_dict(self) -> Dict[str, Any]:
        return {"rank": self.rank, **self.summary.to_dict()}
