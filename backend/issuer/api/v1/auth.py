"""Session endpoints: login, logout, refresh and verification."""

from __future__ import annotations

from flask import Blueprint

from issuer.api.deps import load_body, services, success, timing
from issuer.schemas import (
    AccessTokenSchema,
    LoginSchema,
    LogoutSchema,
    RefreshTokenSchema,
    TokenPairSchema,
    VerifySchema,
)
from issuer.services.auth.dto import LoginIn, LogoutIn, RefreshIn

bp = Blueprint("auth", __name__)

login_schema = LoginSchema()
logout_schema = LogoutSchema()
refresh_schema = RefreshTokenSchema()
verify_schema = VerifySchema()
token_pair_schema = TokenPairSchema()
access_token_schema = AccessTokenSchema()


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and issue an access/refresh token pair."""

    data = load_body(login_schema)
    pair = services().auth.login(LoginIn(**data))
    return success(token_pair_schema.dump(pair))


@bp.post("/logout")
@timing
def logout():
    """Revoke the presented access and refresh tokens."""

    data = load_body(logout_schema)
    services().auth.logout(LogoutIn(**data))
    return success({"loggedOut": True})


@bp.post("/refresh-token")
@timing
def refresh_token():
    """Redeem a refresh token for a new access token."""

    data = load_body(refresh_schema)
    out = services().auth.refresh(RefreshIn(**data))
    return success(access_token_schema.dump(out))


@bp.post("/verify")
@timing
def verify():
    """Report whether an access token is currently valid."""

    data = load_body(verify_schema)
    return success({"valid": services().auth.verify(data["access_token"])})
