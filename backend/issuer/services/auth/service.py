# issuer/services/auth/service.py
from __future__ import annotations

import logging
from typing import Any

from issuer.services._shared.base import BaseService
from issuer.services._shared.errors import InvalidCredentials
from issuer.services._shared.ports.identity import IdentityDirectory
from issuer.services.auth.dto import (
    AccessTokenOut,
    LoginIn,
    LogoutIn,
    RefreshIn,
    TokenPairOut,
)
from issuer.services.keys.service import KeyStore
from issuer.services.tokens.codec import TokenCodec
from issuer.services.tokens.refresh import RefreshTokenLedger

LOGOUT_REASON = "logout"

log = logging.getLogger(__name__)


class AuthService(BaseService):
    """
    Session lifecycle service (login / refresh / logout / verify).

    Thin orchestration over the token core: the identity collaborator checks
    credentials, :class:`TokenCodec` handles access tokens and
    :class:`RefreshTokenLedger` handles refresh tokens.
    """

    def __init__(
        self,
        *,
        identities: IdentityDirectory,
        keys: KeyStore,
        codec: TokenCodec,
        ledger: RefreshTokenLedger,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param identities: Identity collaborator (credential check).
        :param keys: Key store (JWKS publication).
        :param codec: Access token engine.
        :param ledger: Refresh token ledger.
        """
        super().__init__()
        self.identities = identities
        self.keys = keys
        self.codec = codec
        self.ledger = ledger

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> TokenPairOut:
        """
        Authenticate credentials and issue a fresh token pair.

        :param dto: Login input.
        :returns: Encrypted access token and refresh token.
        :raises InvalidCredentials: If the identity service rejects them.
        """
        if not self.identities.verify_credentials(dto.username, dto.password):
            log.warning("login: failed (invalid_credentials)")
            raise InvalidCredentials()

        access = self.codec.issue_access_token(dto.username, encrypt=True)
        refresh = self.ledger.issue_refresh_token(dto.username)
        log.info("login: success")
        return TokenPairOut(access_token=access, refresh_token=refresh)

    # ------------------------------------------------------------------ #
    # Refresh (no rotation)
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> AccessTokenOut:
        """
        Redeem a refresh token for a new access token.

        :raises RedeemFailed: Whatever the underlying cause.
        """
        return AccessTokenOut(access_token=self.ledger.redeem(dto.refresh_token))

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> None:
        """Revoke both tokens; invalid tokens are ignored."""
        self.codec.revoke_access_token(LOGOUT_REASON, dto.access_token)
        self.ledger.revoke_refresh_token(dto.refresh_token)

    # ------------------------------------------------------------------ #
    # Read side
    # ------------------------------------------------------------------ #

    def verify(self, access_token: str) -> bool:
        return self.codec.verify_access_token(access_token)

    def jwks(self) -> dict[str, Any] | None:
        return self.keys.export_jwks()
