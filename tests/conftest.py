"""Shared fixtures for the profit tracker tests."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Callable

import pytest

from ledger.models import Transaction, TransactionKind
from ledger.storage import DocumentStore


@pytest.fixture
def storage(tmp_path: Path) -> DocumentStore:
    return DocumentStore(tmp_path / "data")


@pytest.fixture
def make_transaction() -> Callable[..., Transaction]:
    """Build transactions with sequential ids."""
    counter = {"next": 0}

    def _make(business: str, kind: str, amount: object, date: str, note: str = "") -> Transaction:
        counter["next"] += 1
        return Transaction(
            id=f"t{counter['next']}",
            kind=TransactionKind(kind),
            business=business,
            amount=Decimal(str(amount)),
            date=date,
            note=note,
        )

    return _make
