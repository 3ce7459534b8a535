"""
Admin Authentication Schemas.

Pydantic models for admin auth request/response validation. Field names
follow the console frontend's camelCase JSON. These models only check
shape; credential rules are applied by core.security.password_policy in
the service layer so the HTTP surface and the maintenance scripts enforce
the same policy.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BaseSchema(BaseModel):
    """Base schema accepting both field names and camelCase aliases."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class CreateAdminRequest(BaseSchema):
    """Initial admin account setup payload."""

    username: str = Field(..., description="Admin username (min 3 characters)")
    email: Optional[str] = Field(None, description="Optional email address")
    password: str = Field(..., description="Password meeting the admin policy")
    confirm_password: str = Field(..., alias="confirmPassword")


class LoginRequest(BaseSchema):
    """Login payload. ``username`` may also be the account email."""

    username: str
    password: str


class UpdateProfileRequest(BaseSchema):
    """Profile update payload. Omitted fields are left unchanged."""

    username: Optional[str] = None
    email: Optional[str] = None
    avatar_url: Optional[str] = Field(None, alias="avatarUrl")


class UpdatePasswordRequest(BaseSchema):
    """Password change payload."""

    current_password: str = Field(..., alias="currentPassword")
    new_password: str = Field(..., alias="newPassword")
    confirm_password: str = Field(..., alias="confirmPassword")
    clear_sessions: bool = Field(False, alias="clearSessions")


class ConfirmPasswordRequest(BaseSchema):
    """Re-authentication payload for sensitive operations."""

    password: str = Field(..., min_length=1)


class AdminUserResponse(BaseSchema):
    """Public admin user data."""

    id: str
    username: str
    email: Optional[str] = None
    avatar_url: Optional[str] = Field(None, alias="avatarUrl")


class SessionInfo(BaseSchema):
    """Session metadata returned to the client (the token stays in the cookie)."""

    expires_at: datetime = Field(..., alias="expiresAt")


class AuthResponse(BaseSchema):
    """Response after setup or login."""

    user: AdminUserResponse
    session: SessionInfo


class SetupStatusResponse(BaseSchema):
    """Whether first-run setup is still required."""

    setup_required: bool = Field(..., alias="setupRequired")


class SuccessResponse(BaseModel):
    """Generic success acknowledgement."""

    success: bool = True


class ConfirmPasswordResponse(BaseModel):
    """Result of a password re-check."""

    valid: bool


class ErrorResponse(BaseModel):
    """Body of a rejected credential, as produced by CredentialError.to_dict()."""

    error: str = Field(..., description="Error type identifier")
    field: Optional[str] = Field(None, description="Request field at fault")
    message: str = Field(..., description="Human-readable error message")
    violations: list[str] = Field(default_factory=list, description="Unmet password requirements")


class CredentialErrorResponse(BaseModel):
    """400 response envelope: FastAPI wraps the error under ``detail``."""

    detail: ErrorResponse
