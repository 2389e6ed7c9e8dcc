"""
Password hashing with bcrypt.
"""

import bcrypt


class PasswordHasher:
    """Hashes and checks passwords; `rounds` is the bcrypt cost factor."""

    def __init__(self, rounds: int = 12):
        self._rounds = rounds

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        if not password_hash:
            return False
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            # Stored value is not a bcrypt hash
            return False
