"""Public key publication (JWKS)."""

from __future__ import annotations

from flask import Blueprint

from issuer.api.deps import json_response, services, timing
from issuer.core.errors import NotFound

bp = Blueprint("wellknown", __name__)


@bp.get("/jwks.json")
@timing
def jwks():
    """Return every stored public key as a JSON Web Key Set."""

    key_set = services().auth.jwks()
    if key_set is None:
        raise NotFound("No signing keys have been generated yet")
    response = json_response(key_set)
    response.headers["Cache-Control"] = "public, max-age=300"
    return response
