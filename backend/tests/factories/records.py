"""Factories for key, revocation and refresh token records."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import factory
from issuer.services.keys.dto import KeyPairRecord
from issuer.services.tokens.dto import RefreshStatus, RefreshTokenRecord, RevocationEntry

from tests.factories import BaseFactory, faker
from tests.helpers.utils import rsa_pem_pair


class KeyPairRecordFactory(BaseFactory):
    """
    Build :class:`KeyPairRecord` instances from a cached RSA key.

    Pass ``slot`` to pick a different cached key pair.
    """

    class Meta:
        model = KeyPairRecord

    class Params:
        slot = 0

    id = factory.LazyFunction(lambda: faker.uuid4())
    public_key_pem = factory.LazyAttribute(lambda o: rsa_pem_pair(o.slot)[0])
    private_key_pem = factory.LazyAttribute(lambda o: rsa_pem_pair(o.slot)[1])
    created_at = factory.LazyFunction(lambda: datetime.now(UTC))
    expires_at = factory.LazyAttribute(lambda o: o.created_at + timedelta(days=30))


class RevocationEntryFactory(BaseFactory):
    """Build :class:`RevocationEntry` instances."""

    class Meta:
        model = RevocationEntry

    token_id = factory.LazyFunction(lambda: faker.uuid4())
    reason = "logout"
    revoked_at = factory.LazyFunction(lambda: datetime.now(UTC))
    expires_at = factory.LazyAttribute(lambda o: o.revoked_at + timedelta(minutes=15))


class RefreshTokenRecordFactory(BaseFactory):
    """Build :class:`RefreshTokenRecord` instances."""

    class Meta:
        model = RefreshTokenRecord

    id = factory.LazyFunction(lambda: faker.uuid4())
    subject = factory.LazyFunction(lambda: faker.user_name())
    status = RefreshStatus.ACTIVE
    created_at = factory.LazyFunction(lambda: datetime.now(UTC))
    expires_at = factory.LazyAttribute(lambda o: o.created_at + timedelta(days=7))
