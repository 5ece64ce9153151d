"""Tests for the JSON document store."""

from __future__ import annotations

import json

import pytest

from ledger.exceptions import PersistenceError
from ledger.storage import DocumentStore


def test_missing_collection_reads_empty(storage: DocumentStore) -> None:
    assert storage.read("credits") == {}


def test_write_then_read_keeps_order_and_keys(storage: DocumentStore) -> None:
    storage.write("businesses", [{"id": "b2", "name": "Zed"}, {"id": "b1", "name": "Abe"}])

    documents = storage.read("businesses")

    assert list(documents) == ["b2", "b1"]
    assert documents["b1"] == {"id": "b1", "name": "Abe"}
    assert sorted(path.name for path in storage.base_path.iterdir()) == ["businesses.json"]


def test_documents_without_id_are_rejected(storage: DocumentStore) -> None:
    storage.collection_path("credits").write_text(json.dumps([{"amount": 5}]), encoding="utf-8")

    with pytest.raises(PersistenceError):
        storage.read("credits")


def test_duplicate_ids_are_rejected(storage: DocumentStore) -> None:
    storage.collection_path("expenses").write_text(
        json.dumps([{"id": "e1"}, {"id": "e1"}]), encoding="utf-8"
    )

    with pytest.raises(PersistenceError):
        storage.read("expenses")


def test_unserialisable_documents_leave_collection_untouched(storage: DocumentStore) -> None:
    storage.write("credits", [{"id": "c1"}])

    with pytest.raises(PersistenceError):
        storage.write("credits", [{"id": "c2", "amount": object()}])

    assert list(storage.read("credits")) == ["c1"]
    assert sorted(path.name for path in storage.base_path.iterdir()) == ["credits.json"]
