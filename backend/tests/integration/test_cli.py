"""Integration tests for the ``flask issuer`` command group."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta


def test_keys_list_and_rotate(app, app_store) -> None:
    runner = app.test_cli_runner()

    before = runner.invoke(args=["issuer", "keys", "list"])
    assert before.exit_code == 0
    assert before.output.count("created=") == 1

    rotated = runner.invoke(args=["issuer", "keys", "rotate"])
    assert rotated.exit_code == 0, rotated.output
    assert rotated.output.startswith("Generated key ")

    after = runner.invoke(args=["issuer", "keys", "list"])
    assert after.output.count("created=") == 2


def test_jwks_command_prints_key_set(app) -> None:
    result = app.test_cli_runner().invoke(args=["issuer", "jwks"])

    assert result.exit_code == 0
    assert len(json.loads(result.output)["keys"]) == 1


def test_revocations_purge(app) -> None:
    revocations = app.extensions["issuer"].revocations
    now = datetime.now(UTC)
    revocations.revoke(jti="old", reason="logout", expires_at=now - timedelta(minutes=1))
    revocations.revoke(jti="new", reason="logout", expires_at=now + timedelta(minutes=10))

    result = app.test_cli_runner().invoke(args=["issuer", "revocations", "purge"])

    assert result.exit_code == 0
    assert "Removed 1 expired revocation entries" in result.output
    assert revocations.is_revoked("new") is True
