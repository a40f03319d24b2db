"""Composition root wiring the token core from configuration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from issuer.core.config import parse_duration
from issuer.services._shared.ports.document_store import DocumentStore, InMemoryDocumentStore
from issuer.services._shared.ports.identity import IdentityDirectory, InMemoryIdentityDirectory
from issuer.services._shared.workers import CryptoWorkers
from issuer.services.auth.service import AuthService
from issuer.services.keys.service import KeyStore
from issuer.services.tokens.codec import TokenCodec
from issuer.services.tokens.dto import TokenConfig
from issuer.services.tokens.refresh import RefreshTokenLedger
from issuer.services.tokens.revocation import RevocationRegistry


@dataclass(frozen=True, slots=True)
class Container:
    """
    Concrete instances of the token core.

    :ivar store: Document store shared by the three collections.
    :ivar identities: Identity collaborator.
    :ivar keys: Key lifecycle manager.
    :ivar revocations: Access token denylist.
    :ivar codec: Access token engine.
    :ivar ledger: Refresh token ledger.
    :ivar auth: Session façade used by the HTTP layer.
    :ivar workers: Crypto thread pool.
    """

    store: DocumentStore
    identities: IdentityDirectory
    keys: KeyStore
    revocations: RevocationRegistry
    codec: TokenCodec
    ledger: RefreshTokenLedger
    auth: AuthService
    workers: CryptoWorkers


def token_config_from(config: Mapping[str, Any]) -> TokenConfig:
    """Build :class:`TokenConfig` from a Flask-style config mapping."""
    return TokenConfig(
        issuer=str(config["TOKEN_ISSUER"]),
        audience=str(config["TOKEN_AUDIENCE"]),
        access_max_age=parse_duration(config.get("ACCESS_TOKEN_MAX_AGE", "15m")),
        refresh_max_age=parse_duration(config.get("REFRESH_TOKEN_MAX_AGE", "7d")),
        clock_tolerance=parse_duration(config.get("CLOCK_TOLERANCE", "60s")),
    )


def build_container(
    config: Mapping[str, Any],
    *,
    store: DocumentStore | None = None,
    identities: IdentityDirectory | None = None,
    workers: CryptoWorkers | None = None,
) -> Container:
    """
    Wire KeyStore, RevocationRegistry, TokenCodec, RefreshTokenLedger and
    AuthService explicitly.

    :param config: Mapping with the keys documented on
        :class:`issuer.core.config.BaseConfig`.
    :param store: Document store; in-memory when omitted.
    :param identities: Identity collaborator; empty in-memory directory when
        omitted.
    :param workers: Crypto pool; sized by ``CRYPTO_WORKERS`` when omitted.
    """
    store = store or InMemoryDocumentStore()
    identities = identities or InMemoryIdentityDirectory()
    workers = workers or CryptoWorkers(int(config.get("CRYPTO_WORKERS", 4)))
    cfg = token_config_from(config)

    keys = KeyStore(
        store=store,
        passphrase=config.get("KEY_PASSPHRASE"),
        key_max_age=parse_duration(config.get("KEY_MAX_AGE", "30d")),
        workers=workers,
    )
    revocations = RevocationRegistry(store=store)
    codec = TokenCodec(
        keys=keys,
        revocations=revocations,
        identities=identities,
        cfg=cfg,
        workers=workers,
    )
    ledger = RefreshTokenLedger(store=store, keys=keys, codec=codec, cfg=cfg, workers=workers)
    auth = AuthService(identities=identities, keys=keys, codec=codec, ledger=ledger)
    return Container(
        store=store,
        identities=identities,
        keys=keys,
        revocations=revocations,
        codec=codec,
        ledger=ledger,
        auth=auth,
        workers=workers,
    )
