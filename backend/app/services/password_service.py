"""
Customer Details Backend — Password Hashing Service
=====================================================

What:  bcrypt hashing and verification for login account passwords.
Why:   bcrypt is adaptive (cost factor can grow with hardware) and salts
       every hash, so equal passwords never produce equal hashes.
Who:   LoginService (verify on login) and SeedService (hash on provisioning).

Cost factor:
    Logarithmic: each +1 doubles the work. 12 ≈ 250ms per hash.
    Configured via BCRYPT_ROUNDS; tests lower it to keep the suite fast.
"""

import bcrypt

from app.config import settings
from app.exceptions import ValidationError

MAX_PASSWORD_BYTES = 72


class PasswordService:

    def __init__(self, rounds: int = 12):
        if not 4 <= rounds <= 16:
            raise ValueError("bcrypt rounds must be between 4 and 16")
        self.rounds = rounds

    def hash_password(self, password: str) -> str:
        """
        Hash a plaintext password.

        Returns:
            60-character bcrypt string ($2b$<cost>$<salt><hash>).

        Raises:
            ValidationError: password longer than bcrypt's 72-byte input limit
        """
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                message=f"Password must be at most {MAX_PASSWORD_BYTES} bytes",
                field="password",
            )
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify_password(self, password: str, password_hash: str) -> bool:
        """
        Check a plaintext password against a stored bcrypt hash.

        bcrypt.checkpw compares in constant time. A malformed hash counts
        as a mismatch rather than an error, so a corrupted row can never
        let a login through or crash it.
        """
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except (ValueError, AttributeError):
            return False


password_service = PasswordService(rounds=settings.bcrypt_rounds)
