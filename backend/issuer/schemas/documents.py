"""Marshmallow schemas mapping service records to store documents."""

from __future__ import annotations

from datetime import UTC
from typing import Any

from marshmallow import EXCLUDE, Schema, fields, post_load

from issuer.services.keys.dto import KeyPairRecord
from issuer.services.tokens.dto import RefreshStatus, RefreshTokenRecord, RevocationEntry


class _DocumentSchema(Schema):
    """Base for stored documents: ISO-8601 aware timestamps, tolerant loads."""

    class Meta:
        unknown = EXCLUDE

    id = fields.String(required=True, data_key="_id")


def _timestamp(**kwargs: Any) -> fields.AwareDateTime:
    return fields.AwareDateTime(format="iso", default_timezone=UTC, **kwargs)


class KeyDocumentSchema(_DocumentSchema):
    """Document in the ``keys`` collection."""

    public_key = fields.String(required=True, attribute="public_key_pem")
    private_key = fields.String(required=True, attribute="private_key_pem")
    created_at = _timestamp(required=True)
    expires_at = _timestamp(required=True)

    @post_load
    def make_record(self, data: dict[str, Any], **_: Any) -> KeyPairRecord:
        return KeyPairRecord(**data)


class RevocationDocumentSchema(_DocumentSchema):
    """Document in the ``revocations`` collection (``_id`` is the ``jti``)."""

    id = fields.String(required=True, data_key="_id", attribute="token_id")
    reason = fields.String(required=True)
    revoked_at = _timestamp(required=True)
    expires_at = _timestamp(required=True)

    @post_load
    def make_entry(self, data: dict[str, Any], **_: Any) -> RevocationEntry:
        return RevocationEntry(**data)


class RefreshTokenDocumentSchema(_DocumentSchema):
    """Document in the ``refresh_tokens`` collection."""

    subject = fields.String(required=True)
    status = fields.Enum(RefreshStatus, by_value=True, required=True)
    created_at = _timestamp(required=True)
    expires_at = _timestamp(required=True)

    @post_load
    def make_record(self, data: dict[str, Any], **_: Any) -> RefreshTokenRecord:
        return RefreshTokenRecord(**data)


key_document_schema = KeyDocumentSchema()
revocation_document_schema = RevocationDocumentSchema()
refresh_token_document_schema = RefreshTokenDocumentSchema()
