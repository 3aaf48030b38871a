"""Service account JWT assertion (RFC 7523 JWT-bearer profile).

Zitadel hands out service account keys in PKCS#1 ("BEGIN RSA PRIVATE KEY").
Keys are converted to PKCS#8 before signing so the signer only ever sees one
format.
"""
from __future__ import annotations
import base64
import binascii
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from .exceptions import SigningError

if TYPE_CHECKING:
    from ...config.settings import ZitadelConfig

ASSERTION_LIFETIME = 3600
SIGNING_ALGORITHM = "RS256"

PKCS1_MARKER = "BEGIN RSA PRIVATE KEY"
PEM_MARKER = "-----BEGIN"


@dataclass(frozen=True)
class ServiceIdentity:
    """Service account identity used to sign token-exchange assertions."""
    subject_id: str
    key_id: str
    private_key: str
    issuer: str
    org_id: str

    @classmethod
    def from_config(cls, config: "ZitadelConfig") -> "ServiceIdentity":
        return cls(
            subject_id=config.service_account_user_id,
            key_id=config.service_account_key_id,
            private_key=config.service_account_private_key,
            issuer=config.issuer,
            org_id=config.org_id,
        )

    def __repr__(self) -> str:
        return f"ServiceIdentity(subject_id={self.subject_id!r}, key_id={self.key_id!r}, issuer={self.issuer!r})"


def decode_key_material(material: str) -> str:
    """Unwrap base64-encoded PEM; raw PEM is returned as-is.

    Base64 input may be line-wrapped (``base64 key.pem`` wraps at 76 columns).
    """
    if PEM_MARKER in material:
        return material.replace("\\n", "\n").strip()
    compact = "".join(material.split())
    try:
        decoded = base64.b64decode(compact, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise SigningError(f"Private key is neither base64-encoded PEM nor PEM: {exc}") from exc
    if PEM_MARKER not in decoded:
        raise SigningError("Private key does not contain a PEM block")
    return decoded.strip()


def to_pkcs8_pem(pem: str) -> str:
    """Return the key as PKCS#8 PEM, converting from PKCS#1 when needed.

    Raises:
        SigningError: If the key cannot be parsed in either format
    """
    try:
        key = serialization.load_pem_private_key(pem.encode("utf-8"), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise SigningError(f"Unable to parse service account private key: {exc}") from exc

    if not isinstance(key, rsa.RSAPrivateKey):
        raise SigningError("Service account key must be an RSA private key")

    if PKCS1_MARKER not in pem:
        return pem

    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")


def build_assertion(identity: ServiceIdentity, now: Optional[int] = None) -> str:
    """Build a signed assertion for the JWT-bearer grant.

    Args:
        identity: Service account identity
        now: Issue time in epoch seconds (defaults to current time)

    Returns:
        Compact-serialized RS256 JWT with ``kid`` in the header

    Raises:
        SigningError: If the key material is unusable
    """
    issued_at = int(time.time()) if now is None else int(now)
    pkcs8_pem = to_pkcs8_pem(decode_key_material(identity.private_key))

    claims = {
        "iss": identity.subject_id,
        "sub": identity.subject_id,
        "aud": identity.issuer,
        "iat": issued_at,
        "exp": issued_at + ASSERTION_LIFETIME,
    }
    try:
        return jwt.encode(
            claims,
            pkcs8_pem,
            algorithm=SIGNING_ALGORITHM,
            headers={"kid": identity.key_id},
        )
    except (ValueError, TypeError, jwt.exceptions.PyJWTError) as exc:
        raise SigningError(f"Failed to sign assertion: {exc}") from exc
