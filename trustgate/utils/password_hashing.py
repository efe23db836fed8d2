"""
Password hashing utilities using bcrypt
"""

import bcrypt

# bcrypt only accepts passwords up to this many bytes
BCRYPT_MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """bcrypt hashing with a configurable cost factor"""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash_password(self, password: str) -> str:
        """
        Hash a password with a fresh random salt.

        Args:
            password: Plain text password

        Returns:
            Hashed password as string
        """
        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
        return hashed.decode("utf-8")

    @staticmethod
    def verify_password(password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Returns:
            True if password matches, False otherwise (including malformed hashes)
        """
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"), hashed_password.encode("utf-8")
            )
        except ValueError:
            return False
