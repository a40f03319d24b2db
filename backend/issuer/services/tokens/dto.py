# issuer/services/tokens/dto.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from issuer.services._shared.errors import TokenFailure


class RefreshStatus(Enum):
    """Lifecycle of a refresh token record (one-way ``active → revoked``)."""

    ACTIVE = "active"
    REVOKED = "revoked"


@dataclass(frozen=True, slots=True)
class RefreshTokenRecord:
    """
    Ledger entry for an issued refresh token.

    :param id: Opaque random identifier (never handed out in clear form).
    :param subject: Identity the token was issued to.
    :param status: ``active`` or ``revoked``.
    :param created_at: Issuance instant (UTC).
    :param expires_at: Absolute expiry (UTC).
    """

    id: str
    subject: str
    status: RefreshStatus
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


@dataclass(frozen=True, slots=True)
class RevocationEntry:
    """
    Revoked access token marker.

    :param token_id: The revoked token's ``jti``.
    :param reason: Free-form reason (e.g. ``"logout"``).
    :param revoked_at: When the revocation was recorded (UTC).
    :param expires_at: Copied from the token's ``exp``; safe to prune afterwards.
    """

    token_id: str
    reason: str
    revoked_at: datetime
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class TokenConfig:
    """
    Token emission and validation configuration.

    :param issuer: ``iss`` claim.
    :param audience: ``aud`` claim.
    :param access_max_age: Access token lifetime and maximum accepted age.
    :param refresh_max_age: Refresh token lifetime.
    :param clock_tolerance: Skew accepted on time-based claims.
    """

    issuer: str
    audience: str
    access_max_age: timedelta = timedelta(minutes=15)
    refresh_max_age: timedelta = timedelta(days=7)
    clock_tolerance: timedelta = timedelta(seconds=60)
    signing_alg: str = "RS256"
    key_wrap_alg: str = "RSA-OAEP"
    content_enc: str = "A256GCM"


@dataclass(frozen=True, slots=True)
class TokenInspection:
    """
    Result of decrypting and verifying an access token.

    Exactly one of ``claims`` (success) or ``failure`` (error kind) is set.
    """

    claims: dict[str, Any] | None = None
    failure: TokenFailure | None = None
    detail: str = ""
    headers: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.failure is None and self.claims is not None

    @classmethod
    def failed(cls, kind: TokenFailure, detail: str = "") -> TokenInspection:
        return cls(failure=kind, detail=detail)
