from fastapi import APIRouter, Depends
from gosave.core.audit import log_access
from gosave.core.dependencies import get_auth_service, get_current_token, get_current_user
from gosave.modules.auth.schemas import (
    CurrentUser, LoginRequest, LoginResponse, LogoutResponse, RegisterRequest, RegisterResponse
)
from gosave.modules.auth.service import AuthService

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user; no session is issued until the email is verified"""
    return service.register(register_data)


@router.post("/login", response_model=LoginResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get the profile plus session"""
    response = service.login(login_data)
    log_access(response.user["id"], "session", "login")
    return response


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    token: str = Depends(get_current_token),
    current_user: CurrentUser = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and revoke the session"""
    service.logout(token)
    log_access(current_user.id, "session", "logout")
    return LogoutResponse(message="Logout successful")


@router.get("/me", response_model=CurrentUser)
async def me(current_user: CurrentUser = Depends(get_current_user)):
    """Get the authenticated caller with role and membership"""
    return current_user
