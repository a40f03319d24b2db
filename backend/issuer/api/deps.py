"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, jsonify, request
from marshmallow import Schema

from issuer.container import Container
from issuer.core.extensions import get_container

F = TypeVar("F", bound=Callable[..., Any])


def load_body(schema: Schema) -> dict[str, Any]:
    """Validate the JSON request body with ``schema`` (422 on failure)."""

    return schema.load(request.get_json(silent=True) or {})


def services() -> Container:
    """Return the token core bound to the current application."""

    return get_container()


def success(message: Any, *, status: int = 200) -> Response:
    """Wrap ``message`` in the ``{"status": "success"}`` envelope."""

    return json_response({"status": "success", "message": message}, status=status)


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
