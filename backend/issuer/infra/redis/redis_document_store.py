# comments in English; reST docstrings
from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import redis  # type: ignore[import-untyped]
from redis.exceptions import RedisError, WatchError  # type: ignore[import-untyped]

from issuer.services._shared.errors import StoreError
from issuer.services._shared.ports.document_store import (
    Document,
    DocumentStore,
    expires_at_of,
    project,
)


@dataclass(slots=True)
class RedisDocumentStore(DocumentStore):
    """
    Redis-backed document store.

    Layout per collection:

    - ``doc:{collection}:{id}``: JSON-encoded document.
    - ``doc:{collection}:ids``: set of ids (full scans).
    - ``doc:{collection}:exp``: sorted set of ids scored by ``expires_at``
      (range queries).

    Writes to one document run under ``WATCH``/``MULTI``/``EXEC`` so the
    document and its index entries change together.

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    def _k(collection: str, doc_id: str) -> str:
        return f"doc:{collection}:{doc_id}"

    @staticmethod
    def _kids(collection: str) -> str:
        return f"doc:{collection}:ids"

    @staticmethod
    def _kexp(collection: str) -> str:
        return f"doc:{collection}:exp"

    @staticmethod
    def _dumps(doc: Mapping[str, Any]) -> str:
        return json.dumps(dict(doc), separators=(",", ":"), default=str)

    @staticmethod
    def _loads(raw: bytes | str | None) -> Document | None:
        if raw is None:
            return None
        return json.loads(raw)

    @staticmethod
    def _decode(member: bytes | str) -> str:
        return member.decode() if isinstance(member, bytes | bytearray) else str(member)

    def _stage_write(self, p: Any, collection: str, doc: Document) -> None:
        """Queue the document body plus its index entries on a MULTI pipeline."""
        doc_id = str(doc["_id"])
        p.set(self._k(collection, doc_id), self._dumps(doc))
        p.sadd(self._kids(collection), doc_id)
        exp = expires_at_of(doc)
        if exp is not None:
            p.zadd(self._kexp(collection), {doc_id: exp.timestamp()})

    def _merge(
        self,
        collection: str,
        doc_id: str,
        fields: Mapping[str, Any],
        *,
        create: bool,
    ) -> bool:
        key = self._k(collection, doc_id)
        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(key)
                    current = self._loads(p.get(key))
                    if current is None:
                        if not create:
                            p.unwatch()
                            return False
                        current = {"_id": doc_id}
                    current.update(fields)
                    p.multi()
                    self._stage_write(p, collection, current)
                    p.execute()
                    return True
            except WatchError:
                # Concurrent modification of the same document; retry
                continue
            except RedisError as exc:
                raise StoreError(f"Redis write failed on {collection}/{doc_id}") from exc

    # -------------------- API ------------------------

    def get(self, collection: str, doc_id: str) -> Document | None:
        try:
            return self._loads(self.r.get(self._k(collection, doc_id)))
        except RedisError as exc:
            raise StoreError(f"Redis read failed on {collection}/{doc_id}") from exc

    def insert(self, collection: str, doc: Mapping[str, Any]) -> str:
        doc_id = str(doc["_id"])
        key = self._k(collection, doc_id)
        try:
            with self.r.pipeline() as p:
                p.watch(key)
                if p.exists(key):
                    p.unwatch()
                    raise StoreError(f"Duplicate key in {collection}: {doc_id}")
                p.multi()
                self._stage_write(p, collection, dict(doc))
                p.execute()
        except WatchError as exc:
            # Someone wrote the same id between WATCH and EXEC
            raise StoreError(f"Duplicate key in {collection}: {doc_id}") from exc
        except RedisError as exc:
            raise StoreError(f"Redis insert failed on {collection}/{doc_id}") from exc
        return doc_id

    def upsert(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> None:
        self._merge(collection, doc_id, fields, create=True)

    def update(self, collection: str, doc_id: str, fields: Mapping[str, Any]) -> bool:
        return self._merge(collection, doc_id, fields, create=False)

    def delete(self, collection: str, doc_id: str) -> bool:
        try:
            with self.r.pipeline(transaction=True) as p:
                p.delete(self._k(collection, doc_id))
                p.srem(self._kids(collection), doc_id)
                p.zrem(self._kexp(collection), doc_id)
                removed, _, _ = p.execute()
        except RedisError as exc:
            raise StoreError(f"Redis delete failed on {collection}/{doc_id}") from exc
        return bool(removed)

    def find(
        self,
        collection: str,
        *,
        expires_after: datetime | None = None,
        fields: Iterable[str] | None = None,
    ) -> Iterator[Document]:
        try:
            if expires_after is None:
                ids = sorted(self._decode(m) for m in self.r.smembers(self._kids(collection)))
            else:
                ids = [
                    self._decode(m)
                    for m in self.r.zrangebyscore(
                        self._kexp(collection), f"({expires_after.timestamp()}", "+inf"
                    )
                ]
            raws = self.r.mget([self._k(collection, i) for i in ids]) if ids else []
        except RedisError as exc:
            raise StoreError(f"Redis query failed on {collection}") from exc

        wanted = list(fields) if fields is not None else None
        for raw in raws:
            doc = self._loads(raw)
            if doc is None:
                # index entry outlived its document
                continue
            yield project(doc, wanted)

    def ping(self) -> bool:
        try:
            return bool(self.r.ping())
        except RedisError:
            return False
