"""Document store keeping named collections of JSON documents.

Each collection lives in ``<base_path>/<collection>.json`` as a list of
documents. Every document is a JSON object with a string ``id`` that is
unique within its collection. Collections are always read and written whole,
so a write replaces the file in one step through a temporary sibling.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, List

from .exceptions import PersistenceError
from .logging_utils import get_logger

LOGGER = get_logger(__name__)

Document = Dict[str, Any]


class DocumentStore:
    def __init__(self, base_path: Path) -> None:
        self._base_path = Path(base_path)
        try:
            self._base_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Unable to create data directory {self._base_path}") from exc

    @property
    def base_path(self) -> Path:
        return self._base_path

    def collection_path(self, collection: str) -> Path:
        return self._base_path / f"{collection}.json"

    def read(self, collection: str) -> Dict[str, Document]:
        """Return the documents of a collection keyed by id, in stored order.

        A missing file is an empty collection.
        """
        path = self.collection_path(collection)
        if not path.exists():
            return {}
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Corrupted JSON data in {path}") from exc
        except OSError as exc:
            raise PersistenceError(f"Unable to read from {path}") from exc

        if not isinstance(payload, list):
            raise PersistenceError(f"Expected a list of documents in {path}")
        documents: Dict[str, Document] = {}
        for position, document in enumerate(payload):
            doc_id = document.get("id") if isinstance(document, dict) else None
            if not isinstance(doc_id, str) or not doc_id:
                raise PersistenceError(f"Document #{position} in {path} has no string id")
            if doc_id in documents:
                raise PersistenceError(f"Duplicate document id {doc_id} in {path}")
            documents[doc_id] = document
        LOGGER.debug("Read %s documents from collection %s", len(documents), collection)
        return documents

    def write(self, collection: str, documents: Iterable[Document]) -> None:
        """Replace a collection with ``documents``."""
        path = self.collection_path(collection)
        records: List[Document] = list(documents)
        handle = None
        try:
            handle = tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._base_path,
                prefix=f".{collection}.",
                suffix=".tmp",
                delete=False,
            )
            with handle:
                json.dump(records, handle, indent=2)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(handle.name, path)
        except (OSError, TypeError, ValueError) as exc:
            if handle is not None and os.path.exists(handle.name):
                os.unlink(handle.name)
            raise PersistenceError(f"Unable to write collection {collection} to {path}") from exc
        LOGGER.debug("Wrote %s documents to collection %s", len(records), collection)
