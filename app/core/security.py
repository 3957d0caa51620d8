"""Credential hashing and session token generation.

Passwords travel in two stages. The client sends ``transport_digest(password)``
(hex SHA-256) instead of the plaintext; the server bcrypt-hashes that digest
for storage. Verification bcrypt-checks the submitted digest against the
stored hash.

Clients that cannot compute SHA-256 send ``plain:<base64(password)>``
instead. ``normalize_submitted_digest`` decodes that marker and computes the
real digest server-side. This is a compatibility shim: it downgrades
transport protection to whatever TLS provides, so every use is logged as a
warning.
"""

import base64
import binascii
import hashlib
import logging
import re
import secrets

import bcrypt

from app.core.config import settings

logger = logging.getLogger(__name__)

FALLBACK_MARKER = "plain:"

# Min/max lengths for username validation (input validation).
USERNAME_MIN_LEN = 1
USERNAME_MAX_LEN = 255
# A submitted credential is either a 64-char hex digest or a fallback marker.
CREDENTIAL_MAX_LEN = 1024

# Opaque session tokens: 32 random bytes, urlsafe base64 (43 chars).
SESSION_TOKEN_BYTES = 32

_HEX_DIGEST_RE = re.compile(r"^[0-9a-f]{64}$")


class InvalidCredentialFormat(ValueError):
    """Raised when a submitted credential is neither a digest nor a decodable marker."""


def transport_digest(password: str) -> str:
    """First stage: hex SHA-256 of the plaintext, as computed by the client."""
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def normalize_submitted_digest(submitted: str) -> str:
    """
    Return the transport digest for a submitted credential.

    A proper digest is lower-cased and returned as-is. A ``plain:`` marker is
    decoded and digested here, so the marker string itself is never hashed.
    The marker carries browser ``btoa`` output: one Latin-1 byte per character.
    """
    if submitted.startswith(FALLBACK_MARKER):
        encoded = submitted[len(FALLBACK_MARKER):]
        try:
            plain = base64.b64decode(encoded, validate=True).decode("latin-1")
        except binascii.Error as e:
            raise InvalidCredentialFormat("Malformed fallback credential") from e
        logger.warning(
            "Credential received with fallback marker; client could not digest it before transport"
        )
        return transport_digest(plain)
    digest = submitted.strip().lower()
    if not _HEX_DIGEST_RE.match(digest):
        raise InvalidCredentialFormat("Credential must be a SHA-256 hex digest")
    return digest


def hash_credential(digest: str, rounds: int | None = None) -> str:
    """Second stage: bcrypt the transport digest for storage."""
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(digest.encode("utf-8"), salt).decode("utf-8")


def verify_credential(digest: str, hashed: str) -> bool:
    """Verify a transport digest against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(digest.encode("utf-8"), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def hash_password(plain_password: str, rounds: int | None = None) -> str:
    """Run both stages on a plaintext password (CLI and seeding only)."""
    return hash_credential(transport_digest(plain_password), rounds=rounds)


def generate_session_token() -> str:
    """Cryptographically random, unguessable session token."""
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)
