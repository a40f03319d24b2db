# issuer/services/keys/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey


@dataclass(frozen=True, slots=True)
class KeyPairRecord:
    """
    Persisted key-pair record.

    :param id: Record identifier, published as ``kid``.
    :type id: str
    :param public_key_pem: SubjectPublicKeyInfo PEM (unencrypted).
    :type public_key_pem: str
    :param private_key_pem: PKCS#8 PEM encrypted under the server passphrase.
    :type private_key_pem: str
    :param created_at: Creation instant (UTC).
    :type created_at: datetime
    :param expires_at: End of eligibility for new issuance (UTC).
    :type expires_at: datetime
    """

    id: str
    public_key_pem: str
    private_key_pem: str
    created_at: datetime
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class KeyPair:
    """
    Decrypted key material ready for signing and encryption.

    :param kid: Identifier of the originating :class:`KeyPairRecord`.
    :type kid: str
    :param public_key: RSA public key.
    :param private_key: RSA private key.
    """

    kid: str
    public_key: RSAPublicKey
    private_key: RSAPrivateKey
