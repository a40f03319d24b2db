# issuer/services/tokens/codec.py
from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from issuer.infra.jose import compact
from issuer.services._shared.base import BaseService, Clock
from issuer.services._shared.errors import (
    InvalidToken,
    StoreError,
    TokenError,
    TokenFailure,
)
from issuer.services._shared.ports.identity import IdentityDirectory
from issuer.services._shared.workers import CryptoWorkers
from issuer.services.keys.service import KeyStore
from issuer.services.tokens.dto import TokenConfig, TokenInspection
from issuer.services.tokens.revocation import RevocationRegistry

log = logging.getLogger(__name__)

# Failures that point at our own infrastructure rather than at the token.
_OPERATIONAL_FAILURES = frozenset({TokenFailure.CONFIGURATION, TokenFailure.STORE_ERROR})


def log_token_failure(operation: str, failure: TokenFailure | None, detail: str = "") -> None:
    """Log a token failure with its kind; operational kinds at ERROR level."""
    kind = failure.value if failure else "unknown"
    level = logging.ERROR if failure in _OPERATIONAL_FAILURES else logging.WARNING
    log.log(level, "%s: failed (%s) %s", operation, kind, detail, extra={"failure": kind})


class TokenCodec(BaseService):
    """
    Access token issuance, verification and revocation.

    Tokens are compact RS256 JWS, optionally nested inside an RSA-OAEP/A256GCM
    JWE addressed to the same key pair. The ``kid`` protected header selects
    the key pair on the way back in.

    Verification and revocation never raise: every failure is reduced to a
    :class:`TokenFailure` kind, logged, and reported as ``False`` (verify) or
    ignored (revoke). Issuance propagates errors.
    """

    def __init__(
        self,
        *,
        keys: KeyStore,
        revocations: RevocationRegistry,
        identities: IdentityDirectory,
        cfg: TokenConfig,
        workers: CryptoWorkers | None = None,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(workers=workers, clock=clock)
        self.keys = keys
        self.revocations = revocations
        self.identities = identities
        self.cfg = cfg

    # ------------------------------------------------------------------ #
    # Issuance
    # ------------------------------------------------------------------ #

    def issue_access_token(self, subject: str, *, encrypt: bool = False) -> str:
        """
        Mint an access token for ``subject`` with the current key pair.

        :param subject: Identity the token is issued to (``sub``).
        :param encrypt: Wrap the signed token in a JWE envelope.
        :returns: Compact JWS (3 segments) or JWE (5 segments).
        """
        pair = self.keys.get_current_key_pair()
        issued_at = int(self.now_utc().timestamp())
        claims: dict[str, Any] = {
            "iss": self.cfg.issuer,
            "aud": self.cfg.audience,
            "iat": issued_at,
            "exp": issued_at + int(self.cfg.access_max_age.total_seconds()),
            "jti": str(uuid4()),
            "sub": subject,
        }
        token = self.workers.run(
            compact.sign_claims, claims, pair.private_key, kid=pair.kid, alg=self.cfg.signing_alg
        )
        if encrypt:
            token = self.workers.run(
                compact.encrypt,
                token,
                pair.public_key,
                kid=pair.kid,
                content_type=compact.SIGNED_TYPE,
                alg=self.cfg.key_wrap_alg,
                enc=self.cfg.content_enc,
            )
        return token

    # ------------------------------------------------------------------ #
    # Inspection (decrypt + verify)
    # ------------------------------------------------------------------ #

    def _open(self, token: str) -> tuple[dict[str, Any], dict[str, Any]]:
        header = compact.read_unverified_header(token)
        kid = header.get("kid")
        if not kid or not isinstance(kid, str):
            raise InvalidToken("Missing key ID in token header")

        pair = self.keys.get_key_by_id(kid)
        signed = token
        if compact.is_encrypted(header):
            signed = self.workers.run(
                compact.decrypt,
                token,
                pair.private_key,
                alg=self.cfg.key_wrap_alg,
                enc=self.cfg.content_enc,
            )

        claims = self.workers.run(
            compact.verify_signed,
            signed,
            pair.public_key,
            issuer=self.cfg.issuer,
            audience=self.cfg.audience,
            now=self.now_utc(),
            max_age=self.cfg.access_max_age,
            leeway=self.cfg.clock_tolerance,
            alg=self.cfg.signing_alg,
        )
        return header, claims

    def inspect_access_token(self, token: str) -> TokenInspection:
        """
        Decrypt (when ``typ`` is ``JWE``) and verify ``token``.

        Only cryptographic and claim checks run here; revocation and subject
        checks are layered on by :meth:`check_access_token`.
        """
        try:
            header, claims = self._open(token)
        except TokenError as exc:
            return TokenInspection.failed(exc.kind, str(exc))
        return TokenInspection(claims=claims, headers=header)

    def check_access_token(self, token: str) -> TokenInspection:
        """Full verification as a discriminated result."""
        inspection = self.inspect_access_token(token)
        if not inspection.ok or inspection.claims is None:
            return inspection

        claims = inspection.claims
        try:
            if self.revocations.is_revoked(str(claims["jti"])):
                return TokenInspection.failed(TokenFailure.REVOKED, "Token is revoked")
            if not self.identities.exists(str(claims["sub"])):
                return TokenInspection.failed(
                    TokenFailure.SUBJECT_NOT_FOUND, "Invalid user ID in token"
                )
        except StoreError as exc:
            return TokenInspection.failed(exc.kind, str(exc))
        return inspection

    def verify_access_token(self, token: str) -> bool:
        """
        :returns: ``True`` only when the token decrypts, verifies, is neither
            expired nor revoked, and its subject still exists.
        """
        result = self.check_access_token(token)
        if not result.ok:
            log_token_failure("verify_access_token", result.failure, result.detail)
            return False
        log.info("verify_access_token: success")
        return True

    # ------------------------------------------------------------------ #
    # Revocation
    # ------------------------------------------------------------------ #

    def revoke_access_token(self, reason: str, token: str) -> None:
        """
        Denylist ``token`` until its own expiry.

        Tokens that do not verify are ignored (logged, never raised).
        """
        inspection = self.inspect_access_token(token)
        if not inspection.ok or inspection.claims is None:
            log_token_failure("revoke_access_token", inspection.failure, inspection.detail)
            return

        claims = inspection.claims
        try:
            self.revocations.revoke(
                jti=str(claims["jti"]),
                reason=reason,
                expires_at=datetime.fromtimestamp(int(claims["exp"]), tz=UTC),
            )
        except StoreError as exc:
            log_token_failure("revoke_access_token", exc.kind, str(exc))
            return
        log.info("revoke_access_token: success", extra={"jti": claims["jti"]})
