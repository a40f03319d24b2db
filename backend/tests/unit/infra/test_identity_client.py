"""Unit tests for the HTTP identity directory using ``responses``."""

from __future__ import annotations

import json

import pytest
import requests
import responses
from issuer.infra.http.identity_client import HttpIdentityDirectory
from issuer.services._shared.errors import IdentityUnavailable, StoreError

BASE = "https://identity.example.com/api/"


@pytest.fixture
def directory() -> HttpIdentityDirectory:
    return HttpIdentityDirectory(base_url=BASE, timeout=0.5)


@responses.activate
def test_exists_true_on_200(directory) -> None:
    responses.add(responses.GET, f"{BASE}subjects/alice", json={"id": "alice"}, status=200)

    assert directory.exists("alice") is True


@responses.activate
def test_exists_false_on_404(directory) -> None:
    responses.add(responses.GET, f"{BASE}subjects/bob", status=404)

    assert directory.exists("bob") is False


@responses.activate
def test_exists_quotes_subject_in_path(directory) -> None:
    responses.add(responses.GET, f"{BASE}subjects/a%2Fb", status=200)

    assert directory.exists("a/b") is True
    assert responses.calls[0].request.url.endswith("/subjects/a%2Fb")


@responses.activate
def test_exists_server_error_is_unavailable(directory) -> None:
    responses.add(responses.GET, f"{BASE}subjects/alice", status=502)

    with pytest.raises(IdentityUnavailable):
        directory.exists("alice")


@responses.activate
def test_exists_connection_error_is_store_error(directory) -> None:
    responses.add(
        responses.GET,
        f"{BASE}subjects/alice",
        body=requests.ConnectionError("refused"),
    )

    with pytest.raises(StoreError):
        directory.exists("alice")


@responses.activate
def test_verify_credentials_posts_json(directory) -> None:
    responses.add(responses.POST, f"{BASE}credentials/verify", json={"valid": True}, status=200)

    assert directory.verify_credentials("alice", "wonderland") is True
    sent = json.loads(responses.calls[0].request.body)
    assert sent == {"username": "alice", "password": "wonderland"}


@responses.activate
def test_verify_credentials_rejected(directory) -> None:
    responses.add(responses.POST, f"{BASE}credentials/verify", json={"valid": False}, status=200)

    assert directory.verify_credentials("alice", "nope") is False


@responses.activate
def test_verify_credentials_non_json_is_unavailable(directory) -> None:
    responses.add(
        responses.POST,
        f"{BASE}credentials/verify",
        body="<html>oops</html>",
        status=200,
        content_type="text/html",
    )

    with pytest.raises(IdentityUnavailable):
        directory.verify_credentials("alice", "wonderland")


@responses.activate
def test_verify_credentials_http_error_is_unavailable(directory) -> None:
    responses.add(responses.POST, f"{BASE}credentials/verify", status=503)

    with pytest.raises(IdentityUnavailable):
        directory.verify_credentials("alice", "wonderland")
