"""
Admin Authentication API.

Session-cookie authentication for the Plex Guard web console: first-run
setup, login/logout, current user, profile and password changes.

Credential failures are returned as 400 responses whose ``detail`` is a
structured object (``error``, ``field``, ``message``, ``violations``) so
the console can render them per field.
"""

import logging
from typing import Annotated, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from core.app_context import ConfigLoader
from core.database import get_db_session
from core.models import AdminSession, AdminUser
from core.schemas.auth import (
    AdminUserResponse,
    AuthResponse,
    ConfirmPasswordRequest,
    ConfirmPasswordResponse,
    CreateAdminRequest,
    CredentialErrorResponse,
    LoginRequest,
    SessionInfo,
    SetupStatusResponse,
    SuccessResponse,
    UpdatePasswordRequest,
    UpdateProfileRequest,
)
from core.security.exceptions import CredentialError, HashingFailed, StorageUnavailable
from core.security.password_policy import password_requirements
from core.services.auth import (
    AdminAuthService,
    AdminNotFound,
    AuthResult,
    InvalidCredentials,
    get_admin_auth_service,
)


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["Admin Authentication"])

SESSION_COOKIE_NAME = "session_token"
CREDENTIAL_ERROR_RESPONSES = {
    400: {"model": CredentialErrorResponse, "description": "Credential rule violated"},
}


# -----------------------------------------------------------------------------
# Config & Helpers
# -----------------------------------------------------------------------------


def _get_cookie_secure() -> bool:
    """Whether the session cookie is marked Secure."""
    loader = ConfigLoader()
    loader.load()
    return loader.get("security.cookie_secure", False)


def _set_session_cookie(response: Response, token: str, max_age: int) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=max_age,
        httponly=True,
        secure=_get_cookie_secure(),
        samesite="lax",
        path="/",
    )


def _raise_http(error: CredentialError) -> NoReturn:
    """Translate a credential/auth error into an HTTPException."""
    if isinstance(error, (InvalidCredentials, AdminNotFound)):
        status_code = status.HTTP_401_UNAUTHORIZED
    elif isinstance(error, (HashingFailed, StorageUnavailable)):
        logger.error(f"Credential infrastructure failure: {error.kind}")
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        status_code = status.HTTP_400_BAD_REQUEST

    raise HTTPException(status_code=status_code, detail=error.to_dict()) from error


def _user_response(admin: AdminUser) -> AdminUserResponse:
    return AdminUserResponse(
        id=admin.id,
        username=admin.username,
        email=admin.email,
        avatar_url=admin.avatar_url,
    )


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        user=_user_response(result.user),
        session=SessionInfo(expires_at=result.session.expires_at),
    )


# -----------------------------------------------------------------------------
# Dependencies
# -----------------------------------------------------------------------------


DbDep = Annotated[AsyncSession, Depends(get_db_session)]
AuthServiceDep = Annotated[AdminAuthService, Depends(get_admin_auth_service)]


async def get_current_session(
    request: Request,
    db: DbDep,
    service: AuthServiceDep,
) -> AdminSession:
    """
    FastAPI dependency: Validate the session cookie and return the session.

    Raises:
        HTTPException 401: If no cookie is present or the session is invalid/expired
    """
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No session token provided",
        )

    session = await service.validate_session(db, token)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session",
        )

    return session


# Type alias for dependency injection
CurrentSession = Annotated[AdminSession, Depends(get_current_session)]


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.get("/check-setup", response_model=SetupStatusResponse)
async def check_setup(db: DbDep, service: AuthServiceDep) -> SetupStatusResponse:
    """Report whether the initial admin account still has to be created."""
    has_admin = await service.has_admin_users(db)
    return SetupStatusResponse(setup_required=not has_admin)


@router.get("/password-policy")
async def get_password_policy() -> dict:
    """Describe the admin password policy for the setup form."""
    return password_requirements()


@router.post("/create-admin", response_model=AuthResponse, responses=CREDENTIAL_ERROR_RESPONSES)
async def create_admin(
    payload: CreateAdminRequest,
    response: Response,
    db: DbDep,
    service: AuthServiceDep,
) -> AuthResponse:
    """
    Create the initial admin account.

    Only accessible while no admin exists. Sets the session cookie.
    """
    try:
        result = await service.create_admin(
            db,
            username=payload.username,
            email=payload.email,
            password=payload.password,
            confirm_password=payload.confirm_password,
        )
    except CredentialError as e:
        _raise_http(e)

    _set_session_cookie(response, result.session.token, int(service.session_ttl.total_seconds()))
    return _auth_response(result)


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    db: DbDep,
    service: AuthServiceDep,
) -> AuthResponse:
    """
    Authenticate with username (or email) and password.

    Raises:
        401: Invalid credentials
    """
    try:
        result = await service.login(db, payload.username, payload.password)
    except CredentialError as e:
        _raise_http(e)

    _set_session_cookie(response, result.session.token, int(service.session_ttl.total_seconds()))
    return _auth_response(result)


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    request: Request,
    response: Response,
    db: DbDep,
    service: AuthServiceDep,
) -> SuccessResponse:
    """Delete the current session and clear the cookie."""
    token = request.cookies.get(SESSION_COOKIE_NAME)
    if token:
        await service.logout(db, token)

    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
    return SuccessResponse()


@router.get("/me", response_model=AdminUserResponse)
async def get_me(current: CurrentSession) -> AdminUserResponse:
    """
    Get current authenticated admin user information.

    Requires: Valid session cookie
    """
    return _user_response(current.user)


@router.patch(
    "/profile", response_model=AdminUserResponse, responses=CREDENTIAL_ERROR_RESPONSES
)
async def update_profile(
    payload: UpdateProfileRequest,
    current: CurrentSession,
    db: DbDep,
    service: AuthServiceDep,
) -> AdminUserResponse:
    """Update username, email or avatar of the current admin."""
    try:
        admin = await service.update_profile(
            db,
            current.user_id,
            username=payload.username,
            email=payload.email,
            avatar_url=payload.avatar_url,
        )
    except CredentialError as e:
        _raise_http(e)

    return _user_response(admin)


@router.patch(
    "/password", response_model=SuccessResponse, responses=CREDENTIAL_ERROR_RESPONSES
)
async def update_password(
    payload: UpdatePasswordRequest,
    current: CurrentSession,
    db: DbDep,
    service: AuthServiceDep,
) -> SuccessResponse:
    """Change the current admin's password, optionally ending other sessions."""
    try:
        await service.update_password(
            db,
            current.user_id,
            current_password=payload.current_password,
            new_password=payload.new_password,
            confirm_password=payload.confirm_password,
            clear_sessions=payload.clear_sessions,
            current_session_id=current.id,
        )
    except CredentialError as e:
        _raise_http(e)

    return SuccessResponse()


@router.post("/confirm-password", response_model=ConfirmPasswordResponse)
async def confirm_password(
    payload: ConfirmPasswordRequest,
    current: CurrentSession,
    db: DbDep,
    service: AuthServiceDep,
) -> ConfirmPasswordResponse:
    """Re-check the current admin's password before a sensitive action."""
    try:
        valid = await service.confirm_password(db, current.user_id, payload.password)
    except CredentialError as e:
        _raise_http(e)

    return ConfirmPasswordResponse(valid=valid)
