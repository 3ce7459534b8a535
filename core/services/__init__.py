"""
Core Services Package.

Admin credential, authentication and config proxy services.
"""

from core.services.credentials import (
    ProvisionedCredential,
    check_confirmation,
    provision_admin_credential,
    reset_admin_password,
)
from core.services.auth import (
    AdminAlreadyExists,
    AdminAuthService,
    AdminNotFound,
    AuthError,
    AuthResult,
    DuplicateCredential,
    InvalidCredentials,
    InvalidCurrentPassword,
    get_admin_auth_service,
)
from core.services.config_proxy import (
    BackendResponseError,
    BackendUnreachableError,
    ConfigProxy,
    ConfigProxyError,
)

__all__ = [
    # Credentials
    "ProvisionedCredential",
    "check_confirmation",
    "provision_admin_credential",
    "reset_admin_password",
    # Auth
    "AdminAlreadyExists",
    "AdminAuthService",
    "AdminNotFound",
    "AuthError",
    "AuthResult",
    "DuplicateCredential",
    "InvalidCredentials",
    "InvalidCurrentPassword",
    "get_admin_auth_service",
    # Config proxy
    "BackendResponseError",
    "BackendUnreachableError",
    "ConfigProxy",
    "ConfigProxyError",
]
