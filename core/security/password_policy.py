"""
Credential Policy Module.

Single source of truth for admin credential rules. Used by the HTTP
request layer (setup, profile and password change) and by the offline
maintenance scripts, so both enforcement points stay in sync.

Rules:
    - Username: at least 3 characters.
    - Email: optional; when present must be a syntactically valid address.
    - Password: 12-128 characters with at least one lowercase letter, one
      uppercase letter, one digit and one special character. Only letters,
      digits and the special set are allowed.
"""

import re
from typing import Any

import email_validator
from email_validator import EmailNotValidError, validate_email as _check_email_syntax

from core.security.exceptions import (
    InvalidEmailFormat,
    PasswordPolicyViolation,
    PasswordTooLong,
    PasswordTooShort,
    UsernameTooShort,
)


# --- Constants ---
USERNAME_MIN_LENGTH = 3
PASSWORD_MIN_LENGTH = 12
PASSWORD_MAX_LENGTH = 128
SPECIAL_CHARACTERS = "!@#$%^&*()_+-=[]{};:'\",./<>?\\|~"

_LOWERCASE = re.compile(r"[a-z]")
_UPPERCASE = re.compile(r"[A-Z]")
_DIGIT = re.compile(r"[0-9]")
_SPECIAL = re.compile("[" + re.escape(SPECIAL_CHARACTERS) + "]")
_ALLOWED = re.compile(r"[A-Za-z0-9" + re.escape(SPECIAL_CHARACTERS) + r"]*")

# Requirement messages, in display order
MSG_LOWERCASE = "at least one lowercase letter"
MSG_UPPERCASE = "at least one uppercase letter"
MSG_DIGIT = "at least one number"
MSG_SPECIAL = "at least one special character"
MSG_ALLOWED = "only letters, numbers and special characters (no spaces)"

# Accept .local, .test and .home.arpa hosts; only dotless "localhost" stays
# reserved. email_validator reads this list on every call.
email_validator.SPECIAL_USE_DOMAIN_NAMES[:] = [
    name for name in email_validator.SPECIAL_USE_DOMAIN_NAMES if name == "localhost"
]


def validate_username(username: str) -> str:
    """
    Validate an admin username.

    Args:
        username: Candidate username.

    Returns:
        The username unchanged.

    Raises:
        UsernameTooShort: If shorter than USERNAME_MIN_LENGTH.
    """
    if username is None or len(username) < USERNAME_MIN_LENGTH:
        raise UsernameTooShort(
            f"Username must be at least {USERNAME_MIN_LENGTH} characters long.",
            field="username",
        )
    return username


def validate_email(email: str | None) -> str | None:
    """
    Validate an optional email address.

    None and the empty string mean "not provided" and skip the format check.

    Returns:
        The email, or None when not provided.

    Raises:
        InvalidEmailFormat: If a provided value is not a valid address.
    """
    if email is None or email == "":
        return None

    try:
        _check_email_syntax(email, check_deliverability=False)
    except EmailNotValidError as e:
        raise InvalidEmailFormat(f"Invalid email address: {e}", field="email") from e

    return email


def _missing_requirements(password: str) -> list[str]:
    """Character-class requirements the password does not meet."""
    missing: list[str] = []
    if not _LOWERCASE.search(password):
        missing.append(MSG_LOWERCASE)
    if not _UPPERCASE.search(password):
        missing.append(MSG_UPPERCASE)
    if not _DIGIT.search(password):
        missing.append(MSG_DIGIT)
    if not _SPECIAL.search(password):
        missing.append(MSG_SPECIAL)
    if not _ALLOWED.fullmatch(password):
        missing.append(MSG_ALLOWED)
    return missing


def check_password(password: str) -> list[str]:
    """
    Collect every password requirement that is not met.

    Non-raising counterpart of validate_password() for per-field feedback.

    Returns:
        Human-readable requirement strings; empty list when the password is valid.
    """
    problems: list[str] = []
    if len(password) < PASSWORD_MIN_LENGTH:
        problems.append(f"at least {PASSWORD_MIN_LENGTH} characters")
    elif len(password) > PASSWORD_MAX_LENGTH:
        problems.append(f"at most {PASSWORD_MAX_LENGTH} characters")
    problems.extend(_missing_requirements(password))
    return problems


def validate_password(password: str, field: str = "password") -> str:
    """
    Validate a password against the admin password policy.

    Length is checked first. Every raised error is a PasswordPolicyViolation
    whose violations list holds every unmet requirement, length included.

    Args:
        password: Candidate password.
        field: Request field name reported with the error.

    Returns:
        The password unchanged.

    Raises:
        PasswordTooShort: Fewer than PASSWORD_MIN_LENGTH characters.
        PasswordTooLong: More than PASSWORD_MAX_LENGTH characters.
        PasswordPolicyViolation: One or more character-class requirements unmet.
    """
    if password is None:
        password = ""

    if len(password) < PASSWORD_MIN_LENGTH:
        raise PasswordTooShort(
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters long.",
            violations=check_password(password),
            field=field,
        )
    if len(password) > PASSWORD_MAX_LENGTH:
        raise PasswordTooLong(
            f"Password must be at most {PASSWORD_MAX_LENGTH} characters long.",
            violations=check_password(password),
            field=field,
        )

    missing = _missing_requirements(password)
    if missing:
        raise PasswordPolicyViolation(
            "Password must contain " + ", ".join(missing) + ".",
            violations=missing,
            field=field,
        )

    return password


def password_requirements() -> dict[str, Any]:
    """Describe the password policy for clients (setup page hints)."""
    return {
        "min_length": PASSWORD_MIN_LENGTH,
        "max_length": PASSWORD_MAX_LENGTH,
        "require_lowercase": True,
        "require_uppercase": True,
        "require_digit": True,
        "require_special": True,
        "special_characters": SPECIAL_CHARACTERS,
        "username_min_length": USERNAME_MIN_LENGTH,
    }
