"""
Password hashing.

bcrypt with a configurable cost factor. Plaintext is NFKC-normalized so
the same password typed on different keyboards hashes the same, then
pre-hashed with SHA256 and base64-encoded to sidestep bcrypt's 72-byte
input limit (the encoded digest is 44 ASCII bytes, no NULs).
"""

import base64
import hashlib
import unicodedata

import bcrypt

from homeledger.exceptions import ValidationError


def normalize_password(password: str) -> str:
    if not isinstance(password, str):
        raise ValidationError.for_field("password", "Password must be text")
    normalized = unicodedata.normalize("NFKC", password)
    if not normalized.strip():
        raise ValidationError.for_field("password", "Password cannot be empty", "missing")
    return normalized


def _pre_hash_password(normalized: str) -> bytes:
    digest = hashlib.sha256(normalized.encode("utf-8")).digest()
    return base64.b64encode(digest)


class PasswordHasher:
    """bcrypt hashing and verification."""

    def __init__(self, rounds: int = 10):
        self._rounds = rounds

    @property
    def rounds(self) -> int:
        return self._rounds

    def hash(self, password: str) -> str:
        """
        Hash a password.

        Raises ValidationError if the password is empty after normalization.
        """
        pre_hashed = _pre_hash_password(normalize_password(password))
        hashed = bcrypt.hashpw(pre_hashed, bcrypt.gensalt(rounds=self._rounds))
        return hashed.decode("utf-8")

    def verify(self, password: str, hashed_password: str) -> bool:
        """
        Check a password against a stored hash.

        Fails closed: any malformed input yields False, never an exception.
        """
        if not hashed_password or not isinstance(hashed_password, str):
            return False
        try:
            pre_hashed = _pre_hash_password(normalize_password(password))
            return bcrypt.checkpw(pre_hashed, hashed_password.encode("utf-8"))
        except (ValidationError, ValueError, TypeError):
            return False
