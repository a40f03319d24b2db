"""Unit tests for the logging utility."""

from __future__ import annotations

import json
import logging

from issuer.core.logger import JSONFormatter, configure_logging


def test_configure_logging_sets_level() -> None:
    """``configure_logging`` should set the root logger level."""

    # Act
    configure_logging("DEBUG")

    # Assert
    assert logging.getLogger().level == logging.DEBUG


def test_json_formatter_includes_token_extras() -> None:
    """Failure kind and key id passed via ``extra`` end up in the payload."""

    # Arrange
    record = logging.LogRecord(
        name="issuer.services.tokens.codec",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="verify_access_token: failed (%s)",
        args=("revoked",),
        exc_info=None,
    )
    record.failure = "revoked"
    record.kid = "kid-1"

    # Act
    payload = json.loads(JSONFormatter().format(record))

    # Assert
    assert payload["message"] == "verify_access_token: failed (revoked)"
    assert payload["level"] == "WARNING"
    assert payload["failure"] == "revoked"
    assert payload["kid"] == "kid-1"
    assert payload["request_id"] is None
    assert "jti" not in payload
