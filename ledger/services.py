"""Framework-agnostic services backing the profit tracker."""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, List, Optional
from uuid import uuid4

from .aggregation import (
    business_detail,
    filter_transactions,
    rank_businesses,
    sort_for_display,
    summarize,
)
from .exceptions import PersistenceError, RecordNotFoundError
from .logging_utils import get_logger
from .models import Business, LedgerSummary, RankedSummary, Transaction, TransactionKind
from .storage import DocumentStore
from .validators import (
    parse_amount,
    validate_business_name,
    validate_iso_date,
    validate_note,
)

LOGGER = get_logger(__name__)

BUSINESS_COLLECTION = "businesses"


class BusinessRegistry:
    """Lookup collection of business names used by selection widgets."""

    def __init__(self, storage: DocumentStore, collection: str = BUSINESS_COLLECTION) -> None:
        self._storage = storage
        self._collection = collection
        self._businesses: Dict[str, Business] = {}
        self.load()

    def ensure(self, name: object) -> Business:
        """Return the business with this exact name, registering it if new."""
        validated = validate_business_name(name)
        existing = self._businesses.get(validated)
        if existing is not None:
            return existing
        business = Business(id=str(uuid4()), name=validated)
        self._businesses[validated] = business
        self._persist()
        LOGGER.info("Registered business %r", validated)
        return business

    def get_by_name(self, name: str) -> Business:
        try:
            return self._businesses[name]
        except KeyError as exc:
            raise RecordNotFoundError(f"Business {name} not found") from exc

    def exists(self, name: str) -> bool:
        return name in self._businesses

    def list(self) -> List[Business]:
        return sorted(self._businesses.values(), key=lambda business: business.name.lower())

    def load(self) -> None:
        documents = self._storage.read(self._collection)
        self._businesses = {
            payload["name"]: Business.from_dict(payload) for payload in documents.values()
        }

    def _persist(self) -> None:
        try:
            self._storage.write(
                self._collection, [business.to_dict() for business in self._businesses.values()]
            )
        except PersistenceError:
            raise
        except Exception as exc:  # pragma: no cover - defensive guard
            raise PersistenceError("Unexpected error while saving businesses") from exc


class TransactionService:
    """Manages the records of one transaction kind and mediates persistence."""

    def __init__(self, storage: DocumentStore, kind: TransactionKind) -> None:
        self._storage = storage
        self._kind = kind
        self._transactions: Dict[str, Transaction] = {}
        self.load()  # Hydrate in-memory cache from persistence on construction.

    @property
    def kind(self) -> TransactionKind:
        return self._kind

    # Public API -----------------------------------------------------------
    def add(self, payload: Dict[str, object]) -> Transaction:
        data = self._validate_payload(payload)
        transaction = Transaction(**data)
        self._transactions[transaction.id] = transaction
        self._persist()
        LOGGER.info(
            "Added %s %s for %s (%s)",
            self._kind.value,
            transaction.id,
            transaction.business,
            transaction.amount,
        )
        return transaction

    def update(self, transaction_id: str, changes: Dict[str, object]) -> Transaction:
        existing = self._get_or_raise(transaction_id)
        # Fields left out of ``changes`` keep their stored value; the merged
        # record is validated again and replaces the old one wholesale.
        merged_payload = {**existing.to_dict(), **changes}
        data = self._validate_payload(merged_payload, current=existing)
        updated = Transaction(**data)
        self._transactions[transaction_id] = updated
        self._persist()
        LOGGER.info("Updated %s %s", self._kind.value, transaction_id)
        return updated

    def delete(self, transaction_id: str) -> None:
        self._get_or_raise(transaction_id)
        del self._transactions[transaction_id]
        self._persist()
        LOGGER.info("Deleted %s %s", self._kind.value, transaction_id)

    def validate(self, payload: Dict[str, object]) -> None:
        """Raise ValidationError if ``payload`` could not be added."""
        self._validate_payload(payload)

    def get(self, transaction_id: str) -> Transaction:
        """Return a transaction or raise if it does not exist."""
        return self._get_or_raise(transaction_id)

    def all(self) -> List[Transaction]:
        """Every record in storage order, unfiltered."""
        return list(self._transactions.values())

    def list(
        self,
        business: Optional[str] = None,
        start: Optional[object] = None,
        end: Optional[object] = None,
    ) -> List[Transaction]:
        records = filter_transactions(self._transactions.values(), business, start, end)
        return sort_for_display(records)

    def total(self, **filters: object) -> Decimal:
        records = self.list(**filters)
        return sum((record.amount for record in records), start=Decimal("0.00"))

    def load(self) -> None:
        """Load existing records from persistence."""
        documents = self._storage.read(self._kind.collection)
        self._transactions = {
            doc_id: Transaction.from_dict(payload, self._kind)
            for doc_id, payload in documents.items()
        }

    # Internal helpers -----------------------------------------------------
    def _persist(self) -> None:
        documents = []
        for transaction in self._transactions.values():
            document = transaction.to_dict()
            # The collection already names the kind.
            del document["kind"]
            documents.append(document)
        try:
            self._storage.write(self._kind.collection, documents)
        except PersistenceError:
            raise
        except Exception as exc:  # pragma: no cover - defensive guard
            raise PersistenceError(
                f"Unexpected error while saving {self._kind.collection}"
            ) from exc

    def _get_or_raise(self, transaction_id: str) -> Transaction:
        try:
            return self._transactions[transaction_id]
        except KeyError as exc:
            label = self._kind.value.capitalize()
            raise RecordNotFoundError(f"{label} {transaction_id} not found") from exc

    def _validate_payload(
        self, payload: Dict[str, object], *, current: Optional[Transaction] = None
    ) -> Dict[str, object]:
        return {
            "id": current.id if current else str(uuid4()),
            "kind": self._kind,
            "business": validate_business_name(payload.get("business")),
            "amount": parse_amount(payload.get("amount"), "amount"),
            "date": validate_iso_date(payload.get("date"), "date"),
            "note": validate_note(payload.get("note")),
        }


def record_transaction(
    registry: BusinessRegistry, service: TransactionService, payload: Dict[str, object]
) -> Transaction:
    """Ensure the referenced business exists, then write the transaction."""
    service.validate(payload)
    business = registry.ensure(payload.get("business"))
    return service.add({**payload, "business": business.name})


def revise_transaction(
    registry: BusinessRegistry,
    service: TransactionService,
    transaction_id: str,
    changes: Dict[str, object],
) -> Transaction:
    """Ensure a renamed business exists, then replace the transaction."""
    existing = service.get(transaction_id)
    service.validate({**existing.to_dict(), **changes})
    if "business" in changes:
        business = registry.ensure(changes.get("business"))
        changes = {**changes, "business": business.name}
    return service.update(transaction_id, changes)


class ReportService:
    """Feeds store snapshots to the aggregation engine."""

    def __init__(self, credit_service: TransactionService, expense_service: TransactionService) -> None:
        self._credits = credit_service
        self._expenses = expense_service

    def snapshot(self) -> List[Transaction]:
        return self._credits.all() + self._expenses.all()

    def summary(self) -> LedgerSummary:
        return summarize(self.snapshot())

    def ranking(self) -> List[RankedSummary]:
        return rank_businesses(self.summary().businesses)

    def business_report(self, name: str) -> Dict[str, object]:
        return business_detail(self.snapshot(), name)

    def refresh(self) -> None:
        """Reload data from persistence for both services."""
        self._credits.load()
        self._expenses.load()
