"""
Password hashing utilities using PBKDF2-HMAC-SHA256.

Encoded hashes look like ``<base64 salt>.<base64 derived key>``. Algorithm,
iteration count and key length are fixed for the lifetime of the system, so
they are not stored alongside the hash.
"""

import base64
import binascii
import secrets

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

SALT_BYTES = 16
KEY_BYTES = 32
ITERATIONS = 100_000
SEPARATOR = "."


class PasswordHasher:
    """Password hashing service."""

    @staticmethod
    def _kdf(salt: bytes) -> PBKDF2HMAC:
        # PBKDF2HMAC instances are single use
        return PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=KEY_BYTES,
            salt=salt,
            iterations=ITERATIONS,
        )

    @staticmethod
    def hash(password: str) -> str:
        """
        Hash a password with a fresh random salt.

        Args:
            password: Plain text password

        Returns:
            Encoded hash, ``base64(salt) + "." + base64(key)``
        """
        salt = secrets.token_bytes(SALT_BYTES)
        key = PasswordHasher._kdf(salt).derive(password.encode("utf-8"))
        return SEPARATOR.join((
            base64.b64encode(salt).decode("ascii"),
            base64.b64encode(key).decode("ascii"),
        ))

    @staticmethod
    def verify(plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against an encoded hash.

        Malformed hashes verify as False instead of raising.
        """
        parts = (hashed_password or "").split(SEPARATOR)
        if len(parts) != 2:
            return False

        try:
            salt = base64.b64decode(parts[0], validate=True)
            expected = base64.b64decode(parts[1], validate=True)
        except (binascii.Error, ValueError):
            return False

        try:
            PasswordHasher._kdf(salt).verify(plain_password.encode("utf-8"), expected)
        except InvalidKey:
            return False
        return True


# Convenience functions
def hash_password(password: str) -> str:
    """Hash a password."""
    return PasswordHasher.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password."""
    return PasswordHasher.verify(plain_password, hashed_password)
