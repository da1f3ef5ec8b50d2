"""
Password hashing.

Hashes use werkzeug's "pbkdf2:sha256:<iterations>$<salt>$<hash>" format,
so the iteration count is stored with each hash and can be raised later
without invalidating existing ones.
"""
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from core.config import PASSWORD_ITERATIONS

METHOD = "pbkdf2:sha256"


def hash_password(password: str, iterations: Optional[int] = None) -> str:
    iterations = iterations or PASSWORD_ITERATIONS
    return generate_password_hash(password, method=f"{METHOD}:{iterations}")


def verify_password(password: str, encoded: str) -> bool:
    """Constant-time check of a password against a stored hash."""
    try:
        return check_password_hash(encoded, password)
    except ValueError:
        # Unknown or corrupt method segment
        return False
