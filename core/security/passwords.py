"""
Password Hashing Module.

bcrypt wrappers for admin credentials. Hashes are salted, so hashing the
same password twice yields different strings; compare with verify_password().
"""

import logging

import bcrypt

from core.security.exceptions import HashingFailed

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 12

# bcrypt only reads the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """
    Hash password using bcrypt.

    Args:
        password: Plain text password.
        rounds: bcrypt cost factor (log2 of iterations).

    Returns:
        The encoded bcrypt hash.

    Raises:
        HashingFailed: If the bcrypt backend rejects the input or fails.
    """
    try:
        salt = bcrypt.gensalt(rounds=rounds)
        return bcrypt.hashpw(_encode(password), salt).decode("utf-8")
    except (ValueError, TypeError) as e:
        logger.error(f"Password hashing failed: {type(e).__name__}")
        raise HashingFailed("Failed to hash password") from e


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against bcrypt hash."""
    try:
        return bcrypt.checkpw(_encode(plain_password), hashed_password.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        return False
