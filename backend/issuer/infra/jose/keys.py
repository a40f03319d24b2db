# issuer/infra/jose/keys.py
"""RSA key material helpers backed by ``cryptography`` and ``authlib``."""

from __future__ import annotations

from typing import Any

from authlib.jose import RSAKey
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from issuer.services._shared.errors import ConfigurationError, KeyGenerationError

RSA_KEY_SIZE = 2048
RSA_PUBLIC_EXPONENT = 65537


def _passphrase_bytes(passphrase: str | None) -> bytes:
    if not passphrase:
        raise ConfigurationError("Key passphrase is not configured")
    return passphrase.encode("utf-8")


def generate_rsa_pem(passphrase: str | None) -> tuple[str, str]:
    """
    Create a fresh RSA key pair and export it as PEM.

    :param passphrase: Secret used to encrypt the private key at rest.
    :returns: ``(public_pem, encrypted_private_pem)``.
    :raises ConfigurationError: If ``passphrase`` is empty.
    :raises KeyGenerationError: On crypto backend failure.
    """
    secret = _passphrase_bytes(passphrase)
    try:
        private_key = rsa.generate_private_key(
            public_exponent=RSA_PUBLIC_EXPONENT, key_size=RSA_KEY_SIZE
        )
        private_pem = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.BestAvailableEncryption(secret),
        )
        public_pem = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise KeyGenerationError(f"RSA key generation failed: {exc}") from exc
    return public_pem.decode("ascii"), private_pem.decode("ascii")


def load_private_key(pem: str, passphrase: str | None) -> rsa.RSAPrivateKey:
    """
    Decrypt a PKCS#8 PEM private key.

    :raises ConfigurationError: If the passphrase is missing or wrong.
    """
    secret = _passphrase_bytes(passphrase)
    try:
        key = serialization.load_pem_private_key(pem.encode("ascii"), password=secret)
    except (ValueError, TypeError) as exc:
        raise ConfigurationError("Unable to decrypt private key with configured passphrase") from exc
    if not isinstance(key, rsa.RSAPrivateKey):
        raise ConfigurationError("Stored private key is not an RSA key")
    return key


def load_public_key(pem: str) -> rsa.RSAPublicKey:
    key = serialization.load_pem_public_key(pem.encode("ascii"))
    if not isinstance(key, rsa.RSAPublicKey):
        raise ValueError("Stored public key is not an RSA key")
    return key


def public_jwk(pem: str, kid: str) -> dict[str, Any]:
    """Convert a public PEM into a JWK dict tagged with ``kid``."""
    jwk = dict(RSAKey.import_key(pem).as_dict(is_private=False))
    # Only public members are ever published.
    for private_member in ("d", "p", "q", "dp", "dq", "qi"):
        jwk.pop(private_member, None)
    jwk["kid"] = kid
    return jwk
