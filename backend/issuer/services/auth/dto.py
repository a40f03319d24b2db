# issuer/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param username: Subject identifier known to the identity service.
    :type username: str
    :param password: Raw password (verified by the identity service).
    :type password: str
    """

    username: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encrypted refresh token (compact JWE).
    :type refresh_token: str
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param access_token: Access token to denylist.
    :type access_token: str
    :param refresh_token: Refresh token to revoke.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encrypted access token.
    :type access_token: str
    :param refresh_token: Encrypted refresh token.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class AccessTokenOut:
    """Output DTO for a refreshed access token."""

    access_token: str
