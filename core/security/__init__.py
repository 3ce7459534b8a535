"""
Core security utilities for the framework.

Provides the admin credential policy, password hashing and the
credential error taxonomy.
"""

from core.security.exceptions import (
    CredentialError,
    CredentialValidationError,
    HashingFailed,
    InvalidEmailFormat,
    PasswordMismatch,
    PasswordPolicyViolation,
    PasswordTooLong,
    PasswordTooShort,
    StorageUnavailable,
    UsernameTooShort,
    UserNotFound,
)
from core.security.password_policy import (
    check_password,
    password_requirements,
    validate_email,
    validate_password,
    validate_username,
)
from core.security.passwords import hash_password, verify_password

__all__ = [
    # Errors
    "CredentialError",
    "CredentialValidationError",
    "HashingFailed",
    "InvalidEmailFormat",
    "PasswordMismatch",
    "PasswordPolicyViolation",
    "PasswordTooLong",
    "PasswordTooShort",
    "StorageUnavailable",
    "UsernameTooShort",
    "UserNotFound",
    # Policy
    "check_password",
    "password_requirements",
    "validate_email",
    "validate_password",
    "validate_username",
    # Hashing
    "hash_password",
    "verify_password",
]
