"""Service layer public API.

This package exposes the token core so that callers can import from
:mod:`issuer.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``issuer.services._shared``)
    * :class:`BaseService`, :class:`CryptoWorkers`, :class:`InlineWorkers`
    * error hierarchy rooted at :class:`ServiceError`

- Key lifecycle (from ``issuer.services.keys``)
    * :class:`KeyStore`, :class:`KeyPair`, :class:`KeyPairRecord`

- Tokens (from ``issuer.services.tokens``)
    * :class:`TokenCodec`, :class:`RevocationRegistry`,
      :class:`RefreshTokenLedger`
    * DTOs: :class:`TokenConfig`, :class:`TokenInspection`,
      :class:`RefreshTokenRecord`, :class:`RevocationEntry`

- Session façade (from ``issuer.services.auth``)
    * :class:`AuthService`
"""

from __future__ import annotations

# Base primitives
from ._shared.base import BaseService
from ._shared.errors import (
    RedeemFailed,
    ServiceError,
    StoreError,
    TokenError,
    TokenFailure,
)
from ._shared.workers import CryptoWorkers, InlineWorkers

# Session façade
from .auth.service import AuthService

# Key lifecycle
from .keys.dto import KeyPair, KeyPairRecord
from .keys.service import KeyStore

# Tokens
from .tokens.codec import TokenCodec
from .tokens.dto import (
    RefreshStatus,
    RefreshTokenRecord,
    RevocationEntry,
    TokenConfig,
    TokenInspection,
)
from .tokens.refresh import RefreshTokenLedger
from .tokens.revocation import RevocationRegistry

__all__ = [
    # Base
    "BaseService",
    "CryptoWorkers",
    "InlineWorkers",
    # Errors
    "ServiceError",
    "TokenError",
    "TokenFailure",
    "StoreError",
    "RedeemFailed",
    # Keys
    "KeyStore",
    "KeyPair",
    "KeyPairRecord",
    # Tokens
    "TokenCodec",
    "TokenConfig",
    "TokenInspection",
    "RevocationRegistry",
    "RevocationEntry",
    "RefreshTokenLedger",
    "RefreshTokenRecord",
    "RefreshStatus",
    # Auth
    "AuthService",
]
