"""Pytest fixtures wiring the token core to in-memory collaborators.

Services share one :class:`InMemoryDocumentStore`, a fixed clock and inline
crypto workers so every case is deterministic. A key pair is pre-seeded from
a cached RSA key to keep generation out of most tests.
"""

from __future__ import annotations

from typing import Any, Callable

import pytest
from issuer.core.config import TestingConfig
from issuer.factory import create_app
from issuer.schemas.documents import key_document_schema
from issuer.services._shared.ports.document_store import KEYS_COLLECTION, InMemoryDocumentStore
from issuer.services._shared.ports.identity import InMemoryIdentityDirectory
from issuer.services._shared.workers import InlineWorkers
from issuer.services.auth.service import AuthService
from issuer.services.keys.service import KeyStore
from issuer.services.tokens.codec import TokenCodec
from issuer.services.tokens.dto import TokenConfig
from issuer.services.tokens.refresh import RefreshTokenLedger
from issuer.services.tokens.revocation import RevocationRegistry

from tests.factories.records import KeyPairRecordFactory
from tests.helpers.utils import PASSPHRASE, FixedClock

SUBJECT = "alice"
PASSWORD = "wonderland"


# ------------------------------ Collaborators ------------------------------ #
@pytest.fixture()
def clock() -> FixedClock:
    """Deterministic clock shared by every service of a test."""
    return FixedClock()


@pytest.fixture()
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture()
def identities() -> InMemoryIdentityDirectory:
    """Identity directory knowing only ``alice``."""
    return InMemoryIdentityDirectory({SUBJECT: PASSWORD})


@pytest.fixture()
def workers() -> InlineWorkers:
    return InlineWorkers()


@pytest.fixture()
def token_config() -> TokenConfig:
    return TokenConfig(issuer="urn:issuer:test", audience="urn:issuer:test-clients")


# -------------------------------- Services --------------------------------- #
@pytest.fixture()
def key_store(store, workers, clock) -> KeyStore:
    return KeyStore(store=store, passphrase=PASSPHRASE, workers=workers, clock=clock)


@pytest.fixture()
def seeded_key(store, clock):
    """Insert a current key record (created "now") and return it."""
    record = KeyPairRecordFactory(created_at=clock())
    store.insert(KEYS_COLLECTION, key_document_schema.dump(record))
    return record


@pytest.fixture()
def revocations(store, clock) -> RevocationRegistry:
    return RevocationRegistry(store=store, clock=clock)


@pytest.fixture()
def codec(seeded_key, key_store, revocations, identities, token_config, workers, clock) -> TokenCodec:
    return TokenCodec(
        keys=key_store,
        revocations=revocations,
        identities=identities,
        cfg=token_config,
        workers=workers,
        clock=clock,
    )


@pytest.fixture()
def ledger(store, key_store, codec, token_config, workers, clock) -> RefreshTokenLedger:
    return RefreshTokenLedger(
        store=store,
        keys=key_store,
        codec=codec,
        cfg=token_config,
        workers=workers,
        clock=clock,
    )


@pytest.fixture()
def auth_service(identities, key_store, codec, ledger) -> AuthService:
    return AuthService(identities=identities, keys=key_store, codec=codec, ledger=ledger)


# ---------------------------------- Flask ---------------------------------- #
@pytest.fixture()
def app_store() -> InMemoryDocumentStore:
    """Store handed to the Flask app, pre-seeded with a current key."""
    store = InMemoryDocumentStore()
    store.insert(KEYS_COLLECTION, key_document_schema.dump(KeyPairRecordFactory()))
    return store


@pytest.fixture()
def app(app_store, identities):
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application wired to ``app_store`` and ``identities`` with logging
        noise reduced.
    """
    application = create_app(TestingConfig, store=app_store, identities=identities)
    application.logger.setLevel("WARNING")
    yield application
    application.extensions["issuer"].workers.shutdown()


@pytest.fixture()
def client(app):
    """Return a Flask test client."""
    return app.test_client()


@pytest.fixture()
def login(client) -> Callable[..., dict[str, Any]]:
    """Log ``alice`` in through the API and return the token pair."""

    def _login(username: str = SUBJECT, password: str = PASSWORD) -> dict[str, Any]:
        resp = client.post("/api/v1/auth/login", json={"username": username, "password": password})
        assert resp.status_code == 200, resp.get_json()
        return resp.get_json()["message"]

    return _login


@pytest.fixture()
def freeze_time() -> Callable[[str | None], Any]:
    """Factory returning :func:`freezegun.freeze_time`.

    Examples
    --------
    >>> def test_with_frozen_time(freeze_time):
    ...     with freeze_time("2030-01-01"):
    ...         ...
    """

    from freezegun import freeze_time as _freeze_time

    def _factory(target: str | None = None) -> Any:
        return _freeze_time(target or "2030-01-01")

    return _factory
