"""Unit tests for the session façade :class:`AuthService`."""

from __future__ import annotations

import pytest
from issuer.services._shared.errors import InvalidCredentials, RedeemFailed
from issuer.services.auth.dto import AccessTokenOut, LoginIn, LogoutIn, RefreshIn, TokenPairOut
from issuer.services.tokens.dto import RefreshStatus


def test_login_issues_encrypted_access_and_refresh(auth_service, codec, ledger) -> None:
    pair = auth_service.login(LoginIn(username="alice", password="wonderland"))

    assert isinstance(pair, TokenPairOut)
    assert len(pair.access_token.split(".")) == 5
    assert codec.verify_access_token(pair.access_token) is True
    record = ledger.get(ledger.decode_refresh_token(pair.refresh_token))
    assert record.subject == "alice"


@pytest.mark.parametrize(
    ("username", "password"),
    [("alice", "wrong"), ("mallory", "wonderland")],
)
def test_login_rejects_bad_credentials(auth_service, username, password) -> None:
    with pytest.raises(InvalidCredentials, match="Invalid username or password"):
        auth_service.login(LoginIn(username=username, password=password))


def test_refresh_mints_new_access_token(auth_service, codec) -> None:
    pair = auth_service.login(LoginIn(username="alice", password="wonderland"))

    out = auth_service.refresh(RefreshIn(refresh_token=pair.refresh_token))

    assert isinstance(out, AccessTokenOut)
    assert out.access_token != pair.access_token
    assert auth_service.verify(out.access_token) is True


def test_logout_revokes_both_tokens(auth_service, ledger) -> None:
    pair = auth_service.login(LoginIn(username="alice", password="wonderland"))

    auth_service.logout(LogoutIn(access_token=pair.access_token, refresh_token=pair.refresh_token))

    assert auth_service.verify(pair.access_token) is False
    record = ledger.get(ledger.decode_refresh_token(pair.refresh_token))
    assert record.status is RefreshStatus.REVOKED
    with pytest.raises(RedeemFailed):
        auth_service.refresh(RefreshIn(refresh_token=pair.refresh_token))


def test_logout_tolerates_garbage(auth_service) -> None:
    auth_service.logout(LogoutIn(access_token="nope", refresh_token="nope"))


def test_jwks_publishes_signing_key(auth_service, seeded_key) -> None:
    jwks = auth_service.jwks()

    assert [k["kid"] for k in jwks["keys"]] == [seeded_key.id]
