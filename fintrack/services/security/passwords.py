"""
Password Hashing

Passwords are stored as salted PBKDF2-HMAC-SHA256 hashes, encoded as

    pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>

The iteration count travels with the hash, so raising the configured cost
only affects new hashes; older hashes keep verifying.
"""

import hashlib
import hmac
import secrets
from typing import Optional

from fintrack.config import get_settings


ALGORITHM = "pbkdf2_sha256"
SALT_BYTES = 16


class PasswordHasher:
    """Hashes and verifies passwords. Plaintext is never stored."""

    def __init__(self, iterations: Optional[int] = None):
        if iterations is None:
            iterations = get_settings().security.hash_iterations
        if iterations < 1:
            raise ValueError("iterations must be positive")
        self._iterations = iterations

    @property
    def iterations(self) -> int:
        return self._iterations

    @staticmethod
    def _derive(password: str, salt: bytes, iterations: int) -> bytes:
        return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)

    def hash(self, password: str) -> str:
        """Hash a password with a fresh random salt."""
        salt = secrets.token_bytes(SALT_BYTES)
        digest = self._derive(password, salt, self._iterations)
        return f"{ALGORITHM}${self._iterations}${salt.hex()}${digest.hex()}"

    def verify(self, password: str, stored_hash: str) -> bool:
        """
        Check a password against a stored hash.

        Returns False for a mismatch and for any hash string that cannot
        be parsed; it never raises on bad input.
        """
        try:
            algorithm, iterations_text, salt_hex, digest_hex = stored_hash.split("$")
            if algorithm != ALGORITHM:
                return False
            iterations = int(iterations_text)
            if iterations < 1:
                return False
            salt = bytes.fromhex(salt_hex)
            expected = bytes.fromhex(digest_hex)
        except (AttributeError, ValueError):
            return False

        if not salt or not expected:
            return False

        candidate = self._derive(password, salt, iterations)
        return hmac.compare_digest(candidate, expected)

