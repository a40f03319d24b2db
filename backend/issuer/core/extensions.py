"""Collaborator clients and the token core, bound to the Flask app."""

from __future__ import annotations

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app
from redis.exceptions import RedisError  # type: ignore[import-untyped]

from issuer.container import Container, build_container
from issuer.infra.http.identity_client import HttpIdentityDirectory
from issuer.infra.redis.redis_document_store import RedisDocumentStore
from issuer.services._shared.ports.document_store import DocumentStore, InMemoryDocumentStore
from issuer.services._shared.ports.identity import IdentityDirectory, InMemoryIdentityDirectory

EXTENSION_KEY = "issuer"

redis_client: redis.Redis | None = None


def _build_store(app: Flask) -> DocumentStore:
    global redis_client
    redis_url = app.config.get("REDIS_URL")
    if not redis_url:
        redis_client = None
        app.extensions.pop("redis_client", None)
        app.logger.warning("REDIS_URL not set; using in-memory document store")
        return InMemoryDocumentStore()

    redis_client = redis.Redis.from_url(redis_url)
    try:
        redis_client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Failed to connect to Redis at {redis_url!r}") from exc
    app.extensions["redis_client"] = redis_client
    return RedisDocumentStore(r=redis_client)


def _build_identities(app: Flask) -> IdentityDirectory:
    base_url = app.config.get("IDENTITY_SERVICE_URL")
    if not base_url:
        return InMemoryIdentityDirectory()
    return HttpIdentityDirectory(
        base_url=base_url, timeout=float(app.config.get("IDENTITY_TIMEOUT", 2.0))
    )


def init_app(
    app: Flask,
    *,
    store: DocumentStore | None = None,
    identities: IdentityDirectory | None = None,
) -> Container:
    """Build the token core and attach it to ``app.extensions``.

    Parameters
    ----------
    app: flask.Flask
        Application providing configuration.
    store: DocumentStore, optional
        Overrides the store derived from ``REDIS_URL``.
    identities: IdentityDirectory, optional
        Overrides the directory derived from ``IDENTITY_SERVICE_URL``.

    Returns
    -------
    Container
        The wired services.
    """
    container = build_container(
        app.config,
        store=store or _build_store(app),
        identities=identities or _build_identities(app),
    )
    app.extensions[EXTENSION_KEY] = container
    return container


def get_container() -> Container:
    """Return the token core bound to the current application."""
    container = current_app.extensions.get(EXTENSION_KEY)
    if container is None:
        raise RuntimeError("Token core is not initialized. Call init_app() first.")
    return container
