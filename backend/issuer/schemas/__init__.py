"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    AccessTokenSchema,
    LoginSchema,
    LogoutSchema,
    RefreshTokenSchema,
    TokenPairSchema,
    VerifySchema,
)
from .documents import (
    KeyDocumentSchema,
    RefreshTokenDocumentSchema,
    RevocationDocumentSchema,
    key_document_schema,
    refresh_token_document_schema,
    revocation_document_schema,
)

__all__ = [
    "AccessTokenSchema",
    "LoginSchema",
    "LogoutSchema",
    "RefreshTokenSchema",
    "TokenPairSchema",
    "VerifySchema",
    "KeyDocumentSchema",
    "RefreshTokenDocumentSchema",
    "RevocationDocumentSchema",
    "key_document_schema",
    "refresh_token_document_schema",
    "revocation_document_schema",
]
