# issuer/services/tokens/revocation.py
from __future__ import annotations

import logging
from datetime import datetime

from issuer.schemas.documents import revocation_document_schema
from issuer.services._shared.base import BaseService, Clock
from issuer.services._shared.ports.document_store import REVOCATIONS_COLLECTION, DocumentStore
from issuer.services.tokens.dto import RevocationEntry

log = logging.getLogger(__name__)


class RevocationRegistry(BaseService):
    """
    Denylist for **access tokens**, keyed by ``jti``.

    Entries keep the token's own expiry so they can be pruned once the token
    could no longer verify anyway. Writes are upserts, hence idempotent.
    """

    def __init__(self, *, store: DocumentStore, clock: Clock | None = None) -> None:
        super().__init__(clock=clock)
        self.store = store

    def revoke(self, *, jti: str, reason: str, expires_at: datetime) -> RevocationEntry:
        """Record (or overwrite) the revocation of ``jti``."""
        entry = RevocationEntry(
            token_id=jti,
            reason=reason,
            revoked_at=self.now_utc(),
            expires_at=expires_at,
        )
        doc = revocation_document_schema.dump(entry)
        self.store.upsert(REVOCATIONS_COLLECTION, jti, {k: v for k, v in doc.items() if k != "_id"})
        return entry

    def is_revoked(self, jti: str) -> bool:
        return self.store.get(REVOCATIONS_COLLECTION, jti) is not None

    def get(self, jti: str) -> RevocationEntry | None:
        doc = self.store.get(REVOCATIONS_COLLECTION, jti)
        return revocation_document_schema.load(doc) if doc is not None else None

    def purge_expired(self, now: datetime | None = None) -> int:
        """
        Delete entries whose ``expires_at`` has passed.

        :returns: Number of entries removed.
        """
        cutoff = now or self.now_utc()
        live = {doc["_id"] for doc in self.store.find(REVOCATIONS_COLLECTION, expires_after=cutoff, fields=())}
        removed = 0
        for doc in self.store.find(REVOCATIONS_COLLECTION, fields=()):
            if doc["_id"] not in live and self.store.delete(REVOCATIONS_COLLECTION, doc["_id"]):
                removed += 1
        if removed:
            log.info("purge_expired: removed %d revocation entries", removed)
        return removed
