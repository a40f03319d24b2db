"""Shared helpers for token core tests."""

from __future__ import annotations

import functools
import json
from datetime import UTC, datetime, timedelta

from authlib.common.encoding import json_b64encode, urlsafe_b64decode
from issuer.infra.jose.keys import generate_rsa_pem

PASSPHRASE = "testing-passphrase"
EPOCH = datetime(2030, 1, 1, 12, 0, tzinfo=UTC)


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = EPOCH) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> datetime:
        self.now += timedelta(**delta)
        return self.now


@functools.lru_cache(maxsize=4)
def rsa_pem_pair(slot: int = 0, passphrase: str = PASSPHRASE) -> tuple[str, str]:
    """Return a cached ``(public_pem, encrypted_private_pem)`` pair.

    RSA generation is slow; distinct ``slot`` values yield distinct keys.
    """
    return generate_rsa_pem(passphrase)


def flip_char(token: str, segment: int) -> str:
    """Alter one base64url character in the middle of ``segment``."""
    parts = token.split(".")
    target = parts[segment]
    idx = len(target) // 2
    replacement = "A" if target[idx] != "A" else "B"
    parts[segment] = target[:idx] + replacement + target[idx + 1 :]
    return ".".join(parts)


def rewrite_header(token: str, **fields: str | None) -> str:
    """Re-serialize ``token`` with its protected header changed.

    A ``None`` value drops the header parameter. Signatures and ciphertext
    are left as they are.
    """
    parts = token.split(".")
    header = json.loads(urlsafe_b64decode(parts[0].encode("ascii")))
    for name, value in fields.items():
        if value is None:
            header.pop(name, None)
        else:
            header[name] = value
    parts[0] = json_b64encode(header).decode("ascii")
    return ".".join(parts)
