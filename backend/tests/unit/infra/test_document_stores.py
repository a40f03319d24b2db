"""
Contract tests shared by the in-memory and Redis document stores.

The Redis flavour runs against fakeredis so it stays fully in-memory.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import fakeredis
import pytest
from issuer.infra.redis.redis_document_store import RedisDocumentStore
from issuer.services._shared.errors import StoreError
from issuer.services._shared.ports.document_store import InMemoryDocumentStore

NOW = datetime(2030, 1, 1, tzinfo=UTC)


def _fresh_redis() -> fakeredis.FakeRedis:
    """FakeRedis bound to a private server so tests never share data."""
    return fakeredis.FakeRedis(server=fakeredis.FakeServer())


def _doc(doc_id: str, expires_at: datetime, **extra) -> dict:
    return {"_id": doc_id, "expires_at": expires_at.isoformat(), **extra}


@pytest.fixture(params=["memory", "redis"])
def doc_store(request):
    """Yield each store implementation in turn."""
    if request.param == "memory":
        return InMemoryDocumentStore()
    return RedisDocumentStore(r=_fresh_redis())


def test_insert_then_get(doc_store) -> None:
    doc_store.insert("keys", _doc("k1", NOW, public_key="pem"))

    doc = doc_store.get("keys", "k1")
    assert doc == {"_id": "k1", "expires_at": NOW.isoformat(), "public_key": "pem"}
    assert doc_store.get("keys", "missing") is None


def test_insert_duplicate_id_raises(doc_store) -> None:
    doc_store.insert("keys", _doc("k1", NOW))
    with pytest.raises(StoreError):
        doc_store.insert("keys", _doc("k1", NOW))


def test_collections_are_isolated(doc_store) -> None:
    doc_store.insert("keys", _doc("same", NOW))
    assert doc_store.get("revocations", "same") is None


def test_returned_documents_are_copies(doc_store) -> None:
    doc_store.insert("keys", _doc("k1", NOW, status="active"))
    doc = doc_store.get("keys", "k1")
    doc["status"] = "mutated"

    assert doc_store.get("keys", "k1")["status"] == "active"


def test_upsert_creates_then_merges(doc_store) -> None:
    doc_store.upsert("revocations", "j1", {"reason": "logout", "expires_at": NOW.isoformat()})
    doc_store.upsert("revocations", "j1", {"reason": "compromised"})

    doc = doc_store.get("revocations", "j1")
    assert doc == {"_id": "j1", "reason": "compromised", "expires_at": NOW.isoformat()}


def test_update_only_touches_existing_documents(doc_store) -> None:
    assert doc_store.update("refresh_tokens", "nope", {"status": "revoked"}) is False
    assert doc_store.get("refresh_tokens", "nope") is None

    doc_store.insert("refresh_tokens", _doc("r1", NOW, status="active", subject="alice"))
    assert doc_store.update("refresh_tokens", "r1", {"status": "revoked"}) is True

    doc = doc_store.get("refresh_tokens", "r1")
    assert doc["status"] == "revoked"
    assert doc["subject"] == "alice"


def test_delete(doc_store) -> None:
    doc_store.insert("keys", _doc("k1", NOW))

    assert doc_store.delete("keys", "k1") is True
    assert doc_store.delete("keys", "k1") is False
    assert list(doc_store.find("keys")) == []


def test_find_filters_strictly_after_cutoff(doc_store) -> None:
    doc_store.insert("keys", _doc("past", NOW - timedelta(seconds=1)))
    doc_store.insert("keys", _doc("edge", NOW))
    doc_store.insert("keys", _doc("future", NOW + timedelta(days=1)))

    live = {d["_id"] for d in doc_store.find("keys", expires_after=NOW)}
    everything = {d["_id"] for d in doc_store.find("keys")}

    assert live == {"future"}
    assert everything == {"past", "edge", "future"}


def test_find_projects_fields_and_keeps_id(doc_store) -> None:
    doc_store.insert("keys", _doc("k1", NOW, public_key="pub", private_key="priv"))

    (doc,) = list(doc_store.find("keys", fields=("public_key",)))
    assert doc == {"_id": "k1", "public_key": "pub"}


def test_ping(doc_store) -> None:
    assert doc_store.ping() is True


# ----------------------------- Redis specifics ----------------------------- #
def test_redis_delete_clears_indexes() -> None:
    r = _fresh_redis()
    store = RedisDocumentStore(r=r)
    store.insert("keys", _doc("k1", NOW))

    store.delete("keys", "k1")

    assert r.sismember(store._kids("keys"), "k1") == 0
    assert r.zscore(store._kexp("keys"), "k1") is None


def test_redis_update_moves_expiry_index() -> None:
    r = _fresh_redis()
    store = RedisDocumentStore(r=r)
    store.insert("revocations", _doc("j1", NOW))

    later = NOW + timedelta(hours=1)
    store.update("revocations", "j1", {"expires_at": later.isoformat()})

    assert r.zscore(store._kexp("revocations"), "j1") == later.timestamp()
    assert [d["_id"] for d in store.find("revocations", expires_after=NOW)] == ["j1"]


def test_redis_find_skips_dangling_index_entries() -> None:
    r = _fresh_redis()
    store = RedisDocumentStore(r=r)
    store.insert("keys", _doc("k1", NOW + timedelta(days=1)))
    store.insert("keys", _doc("k2", NOW + timedelta(days=1)))
    r.delete(store._k("keys", "k2"))

    assert [d["_id"] for d in store.find("keys")] == ["k1"]
    assert [d["_id"] for d in store.find("keys", expires_after=NOW)] == ["k1"]


def test_redis_outage_surfaces_as_store_error() -> None:
    server = fakeredis.FakeServer()
    server.connected = False
    store = RedisDocumentStore(r=fakeredis.FakeRedis(server=server))

    assert store.ping() is False
    with pytest.raises(StoreError):
        store.get("keys", "k1")
    with pytest.raises(StoreError):
        store.insert("keys", _doc("k1", NOW))
    with pytest.raises(StoreError):
        list(store.find("keys"))
