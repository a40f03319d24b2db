"""
issuer.services._shared.ports
=============================

Collection of *ports* (hexagonal interfaces) that define the contracts
for the collaborators the token core depends on.

These ports decouple the key/token services from concrete persistence and
identity implementations.

Modules
-------
- :mod:`document_store`:
    Defines :class:`~.DocumentStore`: abstraction for the document store
    holding keys, revocations and refresh tokens, plus
    :class:`~.InMemoryDocumentStore`.

- :mod:`identity`:
    Defines :class:`~.IdentityDirectory`: existence and credential checks
    against the external identity collaborator, plus
    :class:`~.InMemoryIdentityDirectory`.

Design Notes
------------
All these ports follow *Dependency Inversion Principle (DIP)* to keep
the service layer independent from implementation details.
Concrete adapters (e.g., Redis or HTTP clients) implement these
interfaces under ``issuer.infra``.
"""

from __future__ import annotations

from .document_store import (
    KEYS_COLLECTION,
    REFRESH_TOKENS_COLLECTION,
    REVOCATIONS_COLLECTION,
    Document,
    DocumentStore,
    InMemoryDocumentStore,
)
from .identity import IdentityDirectory, InMemoryIdentityDirectory

__all__ = [
    "Document",
    "DocumentStore",
    "InMemoryDocumentStore",
    "IdentityDirectory",
    "InMemoryIdentityDirectory",
    "KEYS_COLLECTION",
    "REVOCATIONS_COLLECTION",
    "REFRESH_TOKENS_COLLECTION",
]
