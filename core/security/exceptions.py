"""
Credential exceptions.

Error taxonomy shared by the request layer and the maintenance scripts.
Every exception carries a stable ``kind`` string so callers can map it to
an HTTP status or an exit code without inspecting messages.
"""


class CredentialError(Exception):
    """Base exception for admin credential errors."""

    kind: str = "CredentialError"

    def __init__(self, message: str, field: str | None = None) -> None:
        self.message = message
        self.field = field
        super().__init__(message)

    def to_dict(self) -> dict:
        """Structured payload for API error responses."""
        return {
            "error": self.kind,
            "field": self.field,
            "message": self.message,
        }


# =============================================================================
# Validation Errors (bad input, never retry as-is)
# =============================================================================

class CredentialValidationError(CredentialError):
    """Raised when a credential candidate fails validation."""

    kind = "CredentialValidationError"


class UsernameTooShort(CredentialValidationError):
    """Raised when the username is shorter than the minimum length."""

    kind = "UsernameTooShort"


class InvalidEmailFormat(CredentialValidationError):
    """Raised when a provided email is not a valid address."""

    kind = "InvalidEmailFormat"


class PasswordPolicyViolation(CredentialValidationError):
    """
    Raised when the password misses one or more complexity requirements.

    Attributes:
        violations: Every unmet requirement, in human-readable form.
    """

    kind = "PasswordPolicyViolation"

    def __init__(
        self,
        message: str,
        violations: list[str] | None = None,
        field: str | None = "password",
    ) -> None:
        self.violations = list(violations or [])
        super().__init__(message, field=field)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["violations"] = self.violations
        return data


class PasswordTooShort(PasswordPolicyViolation):
    """Raised when the password is below the minimum length."""

    kind = "PasswordTooShort"


class PasswordTooLong(PasswordPolicyViolation):
    """Raised when the password exceeds the maximum length."""

    kind = "PasswordTooLong"


class PasswordMismatch(CredentialValidationError):
    """Raised when the confirmation does not equal the password."""

    kind = "PasswordMismatch"


# =============================================================================
# Lookup / Infrastructure Errors
# =============================================================================

class UserNotFound(CredentialError):
    """Raised when no admin record matches the given username."""

    kind = "UserNotFound"

    def __init__(self, username: str, rows_affected: int = 0) -> None:
        self.username = username
        self.rows_affected = rows_affected
        super().__init__(f"No user found with username: {username}", field="username")


class HashingFailed(CredentialError):
    """Raised when the password hashing backend fails."""

    kind = "HashingFailed"


class StorageUnavailable(CredentialError):
    """Raised when the admin store cannot be read or written."""

    kind = "StorageUnavailable"
