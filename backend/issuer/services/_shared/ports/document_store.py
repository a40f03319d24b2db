from __future__ import annotations

import copy
import threading
from collections.abc import Iterable, Iterator, Mapping
from datetime import datetime
from typing import Any, Protocol

from issuer.services._shared.errors import StoreError

Document = dict[str, Any]

# Collections owned by the core (one writer each).
KEYS_COLLECTION = "keys"
REVOCATIONS_COLLECTION = "revocations"
REFRESH_TOKENS_COLLECTION = "refresh_tokens"


def expires_at_of(doc: Mapping[str, Any]) -> datetime | None:
    """Return the parsed ``expires_at`` of a stored document (ISO-8601)."""
    raw = doc.get("expires_at")
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw
    return datetime.fromisoformat(str(raw))


def project(doc: Mapping[str, Any], fields: Iterable[str] | None) -> Document:
    """Keep ``_id`` plus ``fields`` (all fields when ``None``)."""
    if fields is None:
        return dict(doc)
    wanted = {"_id", *fields}
    return {k: v for k, v in doc.items() if k in wanted}


class DocumentStore(Protocol):
    """
    Abstraction for the document store backing keys, revocations and refresh tokens.

    Documents are JSON-compatible dicts keyed by ``_id``. Only single-document
    writes are atomic; there are no multi-document transactions.
    """

    def get(self, collection: str, doc_id: str) -> Document | None:
        """Point lookup by id."""

    def insert(self, collection: str, doc: Mapping[str, Any]) -> str:
        """
        Insert a new document.

        :raises StoreError: If a document with the same ``_id`` already exists.
        :returns: The inserted id.
        """

    def upsert(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        """Insert-or-update: set ``fields`` on ``doc_id``, creating it if absent."""

    def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> bool:
        """Set ``fields`` on an existing document. :returns: True if it existed."""

    def delete(self, collection: str, doc_id: str) -> bool:
        """Delete by id. :returns: True if a document was removed."""

    def find(
        self,
        collection: str,
        *,
        expires_after: datetime | None = None,
        fields: Iterable[str] | None = None,
    ) -> Iterator[Document]:
        """
        Iterate documents, optionally filtered by ``expires_at > expires_after``
        and projected to ``fields`` (``_id`` is always kept).
        """

    def ping(self) -> bool:
        """Return True when the backend is reachable."""


class InMemoryDocumentStore(DocumentStore):
    """
    Dict-backed document store used in unit tests and local development.

    .. note::
       Uses a threading lock to mimic per-document atomicity.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, Document]] = {}
        self._lock = threading.Lock()

    def _col(self, collection: str) -> dict[str, Document]:
        return self._collections.setdefault(collection, {})

    def get(self, collection: str, doc_id: str) -> Document | None:
        with self._lock:
            doc = self._col(collection).get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    def insert(self, collection: str, doc: Mapping[str, Any]) -> str:
        doc_id = str(doc["_id"])
        with self._lock:
            col = self._col(collection)
            if doc_id in col:
                raise StoreError(f"Duplicate key in {collection}: {doc_id}")
            col[doc_id] = copy.deepcopy(dict(doc))
        return doc_id

    def upsert(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        with self._lock:
            current = self._col(collection).setdefault(doc_id, {"_id": doc_id})
            current.update(copy.deepcopy(dict(fields)))

    def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> bool:
        with self._lock:
            current = self._col(collection).get(doc_id)
            if current is None:
                return False
            current.update(copy.deepcopy(dict(fields)))
            return True

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._lock:
            return self._col(collection).pop(doc_id, None) is not None

    def find(
        self,
        collection: str,
        *,
        expires_after: datetime | None = None,
        fields: Iterable[str] | None = None,
    ) -> Iterator[Document]:
        with self._lock:
            snapshot = [copy.deepcopy(d) for d in self._col(collection).values()]
        for doc in snapshot:
            if expires_after is not None:
                exp = expires_at_of(doc)
                if exp is None or exp <= expires_after:
                    continue
            yield project(doc, fields)

    def ping(self) -> bool:
        return True
