"""Session endpoint Marshmallow schemas (camelCase on the wire)."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

_TOKEN = validate.Length(min=1, max=16384)


class LoginSchema(Schema):
    """Input payload for authenticating a subject."""

    username = fields.String(required=True, validate=validate.Length(min=1, max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=1024))


class LogoutSchema(Schema):
    """Input payload for ending a session."""

    access_token = fields.String(required=True, data_key="accessToken", validate=_TOKEN)
    refresh_token = fields.String(required=True, data_key="refreshToken", validate=_TOKEN)


class RefreshTokenSchema(Schema):
    """Input payload for redeeming a refresh token."""

    refresh_token = fields.String(required=True, data_key="refreshToken", validate=_TOKEN)


class VerifySchema(Schema):
    """Input payload for checking an access token."""

    access_token = fields.String(required=True, data_key="accessToken", validate=_TOKEN)


class TokenPairSchema(Schema):
    """Response payload containing both session tokens."""

    access_token = fields.String(required=True, data_key="accessToken")
    refresh_token = fields.String(required=True, data_key="refreshToken")


class AccessTokenSchema(Schema):
    """Response payload containing a refreshed access token."""

    access_token = fields.String(required=True, data_key="accessToken")
