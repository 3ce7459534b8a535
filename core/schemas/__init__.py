"""
Core Schemas Package.

Pydantic models for the admin auth API.
"""

from core.schemas.auth import (
    AdminUserResponse,
    AuthResponse,
    ConfirmPasswordRequest,
    ConfirmPasswordResponse,
    CreateAdminRequest,
    CredentialErrorResponse,
    ErrorResponse,
    LoginRequest,
    SessionInfo,
    SetupStatusResponse,
    SuccessResponse,
    UpdatePasswordRequest,
    UpdateProfileRequest,
)

__all__ = [
    "AdminUserResponse",
    "AuthResponse",
    "ConfirmPasswordRequest",
    "ConfirmPasswordResponse",
    "CreateAdminRequest",
    "CredentialErrorResponse",
    "ErrorResponse",
    "LoginRequest",
    "SessionInfo",
    "SetupStatusResponse",
    "SuccessResponse",
    "UpdatePasswordRequest",
    "UpdateProfileRequest",
]
