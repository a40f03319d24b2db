"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask, HTTP, Redis or JOSE libraries directly. They serve as stable
contracts between the stores, the key/token services and their callers.

The translation to HTTP responses (RFC 7807) is handled by
``issuer/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from stores, key material handling or
      token logic.
    - The API layer or BaseService will later translate them to APIError.
    """

    pass


class TokenFailure(Enum):
    """Discriminated failure kind for token inspection and verification."""

    INVALID_TOKEN = "invalid_token"
    KEY_NOT_FOUND = "key_not_found"
    DECRYPTION_FAILED = "decryption_failed"
    SIGNATURE_INVALID = "signature_invalid"
    CLAIMS_INVALID = "claims_invalid"
    REVOKED = "revoked"
    SUBJECT_NOT_FOUND = "subject_not_found"
    CONFIGURATION = "configuration"
    STORE_ERROR = "store_error"


class TokenError(ServiceError):
    """Base class for errors carrying a :class:`TokenFailure` kind."""

    kind: TokenFailure = TokenFailure.INVALID_TOKEN


# --------------------------------------------------------------------------- #
# Keys
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class KeyNotFound(TokenError):
    """
    Raised when no key-pair record exists for a ``kid``.

    :param kid: Key identifier that was looked up.
    :type kid: str
    """

    kid: str
    kind = TokenFailure.KEY_NOT_FOUND

    def __str__(self) -> str:
        return f"Key not found: {self.kid}"


class KeyGenerationError(ServiceError):
    """Raised when the underlying crypto backend fails to create a key pair."""


class ConfigurationError(TokenError):
    """Raised when the key passphrase is missing or cannot decrypt a key."""

    kind = TokenFailure.CONFIGURATION


# --------------------------------------------------------------------------- #
# Token artifacts
# --------------------------------------------------------------------------- #


class InvalidToken(TokenError):
    """Malformed token, unreadable header or missing ``kid``."""

    kind = TokenFailure.INVALID_TOKEN


class DecryptionFailed(TokenError):
    """Encrypted envelope could not be opened with the resolved key."""

    kind = TokenFailure.DECRYPTION_FAILED


class SignatureVerificationFailed(TokenError):
    """Signature does not match the resolved public key."""

    kind = TokenFailure.SIGNATURE_INVALID


class ClaimValidationFailed(TokenError):
    """Expired token, wrong issuer/audience, too old or missing claim."""

    kind = TokenFailure.CLAIMS_INVALID


class SubjectNotFound(TokenError):
    """The ``sub`` claim no longer names an existing identity."""

    kind = TokenFailure.SUBJECT_NOT_FOUND


# --------------------------------------------------------------------------- #
# Refresh tokens
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class TokenNotFound(ServiceError):
    """
    Raised when a refresh token id has no ledger record.

    :param token_id: Refresh token identifier.
    :type token_id: str
    """

    token_id: str

    def __str__(self) -> str:
        return f"Refresh token not found: {self.token_id}"


class TokenRevoked(ServiceError):
    """Refresh token has been explicitly revoked."""


class TokenExpired(ServiceError):
    """Refresh token is past its expiry."""


class RedeemFailed(ServiceError):
    """
    Generic redemption failure.

    Wraps every internal cause so callers cannot tell which check failed.
    """

    def __init__(self, message: str = "Failed to refresh token") -> None:
        super().__init__(message)


class InvalidCredentials(ServiceError):
    """Raised by login when the identity collaborator rejects credentials."""

    def __init__(self, message: str = "Invalid username or password") -> None:
        super().__init__(message)


# --------------------------------------------------------------------------- #
# Collaborators
# --------------------------------------------------------------------------- #


class StoreError(TokenError):
    """Wraps document store failures, including unique-constraint violations."""

    kind = TokenFailure.STORE_ERROR


class IdentityUnavailable(StoreError):
    """The identity collaborator could not be reached or answered badly."""
