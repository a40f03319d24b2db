# issuer/infra/jose/compact.py
"""
Compact JWS/JWE building and parsing on top of ``authlib.jose``.

Every function here is pure: it takes key material and returns or parses a
wire string. Library exceptions are translated into the domain errors of
:mod:`issuer.services._shared.errors`.
"""

from __future__ import annotations

import binascii
import json
from datetime import datetime, timedelta
from typing import Any

from authlib.common.encoding import urlsafe_b64decode
from authlib.jose import JsonWebEncryption, JsonWebToken
from authlib.jose.errors import (
    BadSignatureError,
    DecodeError,
    ExpiredTokenError,
    InvalidClaimError,
    InvalidTokenError,
    JoseError,
    MissingClaimError,
)
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from issuer.services._shared.errors import (
    ClaimValidationFailed,
    DecryptionFailed,
    InvalidToken,
    SignatureVerificationFailed,
)

SIGNED_TYPE = "JWT"
ENCRYPTED_TYPE = "JWE"

JWS_SEGMENTS = 3
JWE_SEGMENTS = 5

REQUIRED_CLAIMS = ("jti", "exp", "sub", "iat")


def read_unverified_header(token: str) -> dict[str, Any]:
    """
    Decode the protected header of a compact JWS or JWE without verifying it.

    :raises InvalidToken: If the token is not a 3- or 5-segment compact
        serialization or the header is not a JSON object.
    """
    if not isinstance(token, str) or not token:
        raise InvalidToken("Token must be a non-empty string")
    segments = token.split(".")
    if len(segments) not in (JWS_SEGMENTS, JWE_SEGMENTS):
        raise InvalidToken(f"Unexpected number of token segments: {len(segments)}")
    try:
        header = json.loads(urlsafe_b64decode(segments[0].encode("ascii")))
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise InvalidToken("Token header is not valid base64url JSON") from exc
    if not isinstance(header, dict):
        raise InvalidToken("Token header is not a JSON object")
    return header


def is_encrypted(header: dict[str, Any]) -> bool:
    return header.get("typ") == ENCRYPTED_TYPE


def sign_claims(
    claims: dict[str, Any],
    private_key: RSAPrivateKey,
    *,
    kid: str,
    alg: str = "RS256",
) -> str:
    """Sign ``claims`` as a compact JWS with ``{alg, typ: JWT, kid}``."""
    header = {"alg": alg, "typ": SIGNED_TYPE, "kid": kid}
    # Subjects are opaque ids; skip authlib's sensitive-value heuristics.
    token = JsonWebToken([alg]).encode(header, claims, private_key, check=False)
    return token.decode("ascii")


def encrypt(
    plaintext: str,
    public_key: RSAPublicKey,
    *,
    kid: str,
    content_type: str | None = None,
    alg: str = "RSA-OAEP",
    enc: str = "A256GCM",
) -> str:
    """
    Wrap ``plaintext`` in a compact JWE addressed to ``public_key``.

    The protected header is ``{typ: JWE, alg, enc, kid}`` plus ``cty`` when
    ``content_type`` is given (``"JWT"`` for nested signed tokens).
    """
    header: dict[str, Any] = {"typ": ENCRYPTED_TYPE, "alg": alg, "enc": enc, "kid": kid}
    if content_type:
        header["cty"] = content_type
    jwe = JsonWebEncryption(algorithms=[alg, enc])
    return jwe.serialize_compact(header, plaintext.encode("utf-8"), public_key).decode("ascii")


def decrypt(
    token: str,
    private_key: RSAPrivateKey,
    *,
    alg: str = "RSA-OAEP",
    enc: str = "A256GCM",
) -> str:
    """
    Open a compact JWE and return its plaintext.

    :raises DecryptionFailed: On malformed ciphertext, unexpected algorithms
        or a key mismatch.
    """
    if token.count(".") != JWE_SEGMENTS - 1:
        raise DecryptionFailed("Token is not a compact JWE")
    jwe = JsonWebEncryption(algorithms=[alg, enc])
    try:
        data = jwe.deserialize_compact(token, private_key)
        return data["payload"].decode("utf-8")
    except (JoseError, InvalidTag, ValueError, UnicodeError) as exc:
        raise DecryptionFailed(f"Unable to decrypt token: {exc or type(exc).__name__}") from exc


def verify_signed(
    token: str,
    public_key: RSAPublicKey,
    *,
    issuer: str,
    audience: str,
    now: datetime,
    max_age: timedelta,
    leeway: timedelta,
    alg: str = "RS256",
) -> dict[str, Any]:
    """
    Verify a compact JWS and validate its claims.

    Enforces signature, ``typ``, issuer, audience, required claims
    ``jti``/``exp``/``sub``/``iat``, expiry and maximum age, all with
    ``leeway`` of clock skew.

    :returns: The verified claim set.
    :raises SignatureVerificationFailed: Signature mismatch.
    :raises ClaimValidationFailed: Any claim check failed.
    :raises InvalidToken: Token could not be parsed or is not a compact JWS.
    """
    # authlib's JWT decoder would otherwise try a 5-segment input as a JWE.
    if token.count(".") != JWS_SEGMENTS - 1:
        raise InvalidToken("Token is not a compact JWS")
    claims_options: dict[str, Any] = {name: {"essential": True} for name in REQUIRED_CLAIMS}
    claims_options["iss"] = {"essential": True, "value": issuer}
    claims_options["aud"] = {"essential": True, "value": audience}

    try:
        claims = JsonWebToken([alg]).decode(token, public_key, claims_options=claims_options)
    except BadSignatureError as exc:
        raise SignatureVerificationFailed("Signature verification failed") from exc
    except (DecodeError, JoseError, ValueError) as exc:
        raise InvalidToken(f"Signed token could not be decoded: {exc}") from exc

    if claims.header.get("typ") != SIGNED_TYPE:
        raise ClaimValidationFailed(f"Unexpected token type: {claims.header.get('typ')!r}")

    now_ts = int(now.timestamp())
    leeway_s = int(leeway.total_seconds())
    try:
        claims.validate(now=now_ts, leeway=leeway_s)
    except (ExpiredTokenError, InvalidClaimError, MissingClaimError, InvalidTokenError) as exc:
        raise ClaimValidationFailed(str(exc)) from exc

    issued_at = claims.get("iat")
    if not isinstance(issued_at, int | float):
        raise ClaimValidationFailed("Claim 'iat' is not numeric")
    if now_ts - issued_at > max_age.total_seconds() + leeway_s:
        raise ClaimValidationFailed("Token exceeds maximum age")

    return dict(claims)
