# =============================================================================
# Password Hashing
# =============================================================================
#
# PBKDF2-SHA256 with a fresh random salt per hash. The iteration count is
# stored inside the hash so it can be raised later without breaking
# existing accounts.
#
# Encoded form:  salt$iterations$hexdigest
#
# =============================================================================

from __future__ import annotations

import hashlib
import secrets


DEFAULT_ITERATIONS = 100_000


class CredentialService:
    """
    One-way password hashing and verification.

    Construct one at startup and hand it to whatever needs it.
    """

    def __init__(self, iterations: int = DEFAULT_ITERATIONS):
        if iterations < 1:
            raise ValueError("iterations must be positive")
        self.iterations = iterations

    def hash(self, password: str) -> str:
        """Hash a password with a new random salt."""
        salt = secrets.token_hex(16)
        digest = self._derive(password, salt, self.iterations)
        return f"{salt}${self.iterations}${digest}"

    def verify(self, password: str, password_hash: str) -> bool:
        """
        Check a candidate password against a stored hash.

        Returns False for anything that doesn't parse as one of our hashes.
        """
        try:
            salt, iterations, stored = password_hash.split("$")
            rounds = int(iterations)
            if rounds < 1:
                return False
            candidate = self._derive(password, salt, rounds)
            return secrets.compare_digest(candidate, stored)
        except (ValueError, AttributeError, TypeError):
            return False

    @staticmethod
    def _derive(password: str, salt: str, iterations: int) -> str:
        return hashlib.pbkdf2_hmac(
            "sha256",
            password.encode("utf-8"),
            salt.encode("utf-8"),
            iterations=iterations,
        ).hex()
