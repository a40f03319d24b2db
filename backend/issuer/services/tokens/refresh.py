# issuer/services/tokens/refresh.py
from __future__ import annotations

import logging
from uuid import uuid4

from marshmallow import ValidationError

from issuer.infra.jose import compact
from issuer.schemas.documents import refresh_token_document_schema
from issuer.services._shared.base import BaseService, Clock
from issuer.services._shared.errors import (
    InvalidToken,
    KeyNotFound,
    RedeemFailed,
    ServiceError,
    StoreError,
    TokenError,
    TokenExpired,
    TokenNotFound,
    TokenRevoked,
)
from issuer.services._shared.ports.document_store import REFRESH_TOKENS_COLLECTION, DocumentStore
from issuer.services._shared.workers import CryptoWorkers
from issuer.services.keys.service import KeyStore
from issuer.services.tokens.codec import TokenCodec, log_token_failure
from issuer.services.tokens.dto import RefreshStatus, RefreshTokenRecord, TokenConfig

log = logging.getLogger(__name__)


class RefreshTokenLedger(BaseService):
    """
    Refresh token issuance, revocation and redemption.

    The wire token is a compact JWE whose plaintext is the bare record id; the
    id itself never leaves the server in clear form.

    Security
    --------
    - Redemption does **not** rotate or consume the refresh token: the same
      token keeps minting access tokens until it is revoked or expires.
    - Redemption failures are collapsed into :class:`RedeemFailed` so callers
      cannot learn which check failed.
    """

    def __init__(
        self,
        *,
        store: DocumentStore,
        keys: KeyStore,
        codec: TokenCodec,
        cfg: TokenConfig,
        workers: CryptoWorkers | None = None,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(workers=workers, clock=clock)
        self.store = store
        self.keys = keys
        self.codec = codec
        self.cfg = cfg

    # ------------------------------------------------------------------ #
    # Issuance
    # ------------------------------------------------------------------ #

    def issue_refresh_token(self, subject: str) -> str:
        """
        Create a refresh token for ``subject``.

        :returns: Compact JWE carrying the opaque record id.
        """
        token_id = str(uuid4())
        pair = self.keys.get_current_key_pair()
        wire = self.workers.run(
            compact.encrypt,
            token_id,
            pair.public_key,
            kid=pair.kid,
            alg=self.cfg.key_wrap_alg,
            enc=self.cfg.content_enc,
        )

        now = self.now_utc()
        record = RefreshTokenRecord(
            id=token_id,
            subject=subject,
            status=RefreshStatus.ACTIVE,
            created_at=now,
            expires_at=now + self.cfg.refresh_max_age,
        )
        self.store.insert(REFRESH_TOKENS_COLLECTION, refresh_token_document_schema.dump(record))
        return wire

    # ------------------------------------------------------------------ #
    # Decoding
    # ------------------------------------------------------------------ #

    def decode_refresh_token(self, wire_token: str) -> str:
        """
        Recover the record id from a wire token.

        :raises InvalidToken: Unreadable header, missing or unknown ``kid``.
        :raises DecryptionFailed: Ciphertext does not open with the key.
        """
        header = compact.read_unverified_header(wire_token)
        kid = header.get("kid")
        if not kid or not isinstance(kid, str):
            raise InvalidToken("Missing key ID in token header")
        try:
            pair = self.keys.get_key_by_id(kid)
        except KeyNotFound as exc:
            raise InvalidToken("Invalid key ID, no matching key found") from exc
        return self.workers.run(
            compact.decrypt,
            wire_token,
            pair.private_key,
            alg=self.cfg.key_wrap_alg,
            enc=self.cfg.content_enc,
        )

    def get(self, token_id: str) -> RefreshTokenRecord | None:
        doc = self.store.get(REFRESH_TOKENS_COLLECTION, token_id)
        if doc is None:
            return None
        try:
            return refresh_token_document_schema.load(doc)
        except ValidationError as exc:
            raise StoreError(f"Corrupt refresh token document {token_id!r}") from exc

    # ------------------------------------------------------------------ #
    # Revocation
    # ------------------------------------------------------------------ #

    def revoke_refresh_token(self, wire_token: str) -> None:
        """
        Mark the token's record revoked.

        Idempotent; unknown records and undecodable tokens are logged, not
        raised.
        """
        try:
            token_id = self.decode_refresh_token(wire_token)
            updated = self.store.update(
                REFRESH_TOKENS_COLLECTION, token_id, {"status": RefreshStatus.REVOKED.value}
            )
        except TokenError as exc:
            log_token_failure("revoke_refresh_token", exc.kind, str(exc))
            return
        if updated:
            log.info("revoke_refresh_token: success")
        else:
            log.info("revoke_refresh_token: no matching record")

    # ------------------------------------------------------------------ #
    # Redemption
    # ------------------------------------------------------------------ #

    def _lookup_redeemable(self, wire_token: str) -> RefreshTokenRecord:
        token_id = self.decode_refresh_token(wire_token)
        record = self.get(token_id)
        if record is None:
            raise TokenNotFound(token_id)
        if record.status is RefreshStatus.REVOKED:
            raise TokenRevoked("Refresh token is revoked")
        if record.is_expired(self.now_utc()):
            raise TokenExpired("Refresh token has expired")
        return record

    def redeem(self, wire_token: str) -> str:
        """
        Exchange a refresh token for a new encrypted access token.

        The record is left untouched (no rotation, no single use).

        :raises RedeemFailed: For every failure, chained from the real cause.
        """
        try:
            record = self._lookup_redeemable(wire_token)
            return self.codec.issue_access_token(record.subject, encrypt=True)
        except ServiceError as exc:
            log.warning("redeem: failed (%s) %s", type(exc).__name__, exc)
            raise RedeemFailed() from exc
