from typing import Optional, Tuple

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

class Hash:
    @staticmethod
    def check(plain_password: str, hashed_password: str) -> Tuple[bool, Optional[str]]:
        """Verify a password and return a fresh hash when the stored one uses outdated parameters."""
        try:
            return pwd_context.verify_and_update(plain_password, hashed_password)
        except ValueError:
            # stored value is not a recognised hash
            return False, None

    @staticmethod
    def make(password: str) -> str:
        return pwd_context.hash(password)
