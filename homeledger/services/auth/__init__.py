"""Authentication services package."""

from homeledger.services.auth.passwords import PasswordHasher, normalize_password
from homeledger.services.auth.service import AuthService
from homeledger.services.auth.session import SessionManager

__all__ = [
    "AuthService",
    "PasswordHasher",
    "SessionManager",
    "normalize_password",
]
