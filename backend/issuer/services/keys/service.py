# issuer/services/keys/service.py
from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any
from uuid import uuid4

from marshmallow import ValidationError

from issuer.infra.jose import keys as key_material
from issuer.schemas.documents import key_document_schema
from issuer.services._shared.base import BaseService, Clock
from issuer.services._shared.errors import KeyNotFound, StoreError
from issuer.services._shared.ports.document_store import KEYS_COLLECTION, DocumentStore
from issuer.services._shared.workers import CryptoWorkers
from issuer.services.keys.dto import KeyPair, KeyPairRecord

log = logging.getLogger(__name__)


class KeyStore(BaseService):
    """
    Key lifecycle manager (generation, current-key selection, lookup, JWKS).

    Records are immutable once inserted and are never deleted here: tokens
    signed with an expired key still need it for verification, and the key
    stays published in the JWKS.

    Concurrent callers that both find no current key each generate one. Both
    records are valid for their own tokens, so the race only costs an extra
    key generation.
    """

    def __init__(
        self,
        *,
        store: DocumentStore,
        passphrase: str | None,
        key_max_age: timedelta = timedelta(days=30),
        workers: CryptoWorkers | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        :param store: Document store holding the ``keys`` collection.
        :param passphrase: Secret protecting private keys at rest.
        :param key_max_age: Eligibility window of a key for new issuance.
        :param workers: Pool for key generation and decryption.
        :param clock: Callable returning aware UTC datetimes.
        """
        super().__init__(workers=workers, clock=clock)
        self.store = store
        self._passphrase = passphrase
        self.key_max_age = key_max_age

    # ------------------------------------------------------------------ #
    # Generation
    # ------------------------------------------------------------------ #

    def generate_key_pair(self) -> KeyPairRecord:
        """
        Create, persist and return a new key-pair record.

        :raises KeyGenerationError: Crypto backend failure (not retried).
        :raises ConfigurationError: No passphrase configured.
        :raises StoreError: Insert failed.
        """
        public_pem, private_pem = self.workers.run(key_material.generate_rsa_pem, self._passphrase)
        now = self.now_utc()
        record = KeyPairRecord(
            id=str(uuid4()),
            public_key_pem=public_pem,
            private_key_pem=private_pem,
            created_at=now,
            expires_at=now + self.key_max_age,
        )
        self.store.insert(KEYS_COLLECTION, key_document_schema.dump(record))
        log.info("generate_key_pair: success", extra={"kid": record.id})
        return record

    # ------------------------------------------------------------------ #
    # Lookup
    # ------------------------------------------------------------------ #

    def get_current_key_pair(self) -> KeyPair:
        """
        Return the most recently created non-expired key pair, generating one
        when none exists.

        :raises ConfigurationError: Passphrase missing or wrong.
        """
        candidates = [
            self._load_record(doc)
            for doc in self.store.find(KEYS_COLLECTION, expires_after=self.now_utc())
        ]
        if candidates:
            record = max(candidates, key=lambda r: r.created_at)
        else:
            log.info("get_current_key_pair: no active key, generating")
            record = self.generate_key_pair()
        return self._unlock(record)

    def get_key_by_id(self, kid: str) -> KeyPair:
        """
        Resolve decrypted key material for ``kid``.

        :raises KeyNotFound: No record with that id.
        :raises ConfigurationError: Passphrase missing or wrong.
        """
        record = self.get_record(kid)
        if record is None:
            raise KeyNotFound(kid)
        return self._unlock(record)

    def get_record(self, kid: str) -> KeyPairRecord | None:
        doc = self.store.get(KEYS_COLLECTION, kid)
        return self._load_record(doc) if doc is not None else None

    def list_records(self) -> list[KeyPairRecord]:
        """All key records, oldest first."""
        records = [self._load_record(doc) for doc in self.store.find(KEYS_COLLECTION)]
        return sorted(records, key=lambda r: r.created_at)

    # ------------------------------------------------------------------ #
    # JWKS
    # ------------------------------------------------------------------ #

    def export_jwks(self) -> dict[str, Any] | None:
        """
        Publish the public half of every stored key.

        :returns: ``{"keys": [...]}`` with one JWK per record (``kid`` = record
            id), or ``None`` when no keys exist at all.
        """
        docs = sorted(
            self.store.find(KEYS_COLLECTION, fields=("public_key", "created_at")),
            key=lambda d: str(d.get("created_at", "")),
        )
        keys = [key_material.public_jwk(doc["public_key"], str(doc["_id"])) for doc in docs]
        return {"keys": keys} if keys else None

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _load_record(doc: dict[str, Any]) -> KeyPairRecord:
        try:
            return key_document_schema.load(doc)
        except ValidationError as exc:
            raise StoreError(f"Corrupt key document {doc.get('_id')!r}: {exc.messages}") from exc

    def _unlock(self, record: KeyPairRecord) -> KeyPair:
        private_key = self.workers.run(
            key_material.load_private_key, record.private_key_pem, self._passphrase
        )
        try:
            public_key = key_material.load_public_key(record.public_key_pem)
        except ValueError as exc:
            raise StoreError(f"Corrupt public key in record {record.id!r}") from exc
        return KeyPair(kid=record.id, public_key=public_key, private_key=private_key)
