"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app

from issuer.api.deps import json_response, services, timing

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Return application and document store health information."""

    store_status = "ok" if services().store.ping() else "fail"
    if store_status == "fail":
        current_app.logger.error("healthcheck.store_unreachable")
    version = current_app.config.get("APP_VERSION", "dev")
    commit = current_app.config.get("APP_COMMIT", "unknown")
    payload = {
        "status": "ok" if store_status == "ok" else "degraded",
        "store": store_status,
        "version": version,
        "commit": commit,
    }
    return json_response(payload)
