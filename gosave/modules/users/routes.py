from fastapi import APIRouter, Depends, Query
from gosave.core.audit import log_access, log_security_event
from gosave.core.dependencies import get_auth_service, get_current_user, require_admin
from gosave.core.roles import Role, UserStatus
from gosave.database.supabase_client import get_supabase
from gosave.modules.auth.registration import RegistrationSaga
from gosave.modules.auth.schemas import CurrentUser
from gosave.modules.auth.service import AuthService
from gosave.modules.users.schemas import (
    PaymentListResponse, ReconcileResponse, UserResponse, UserRoleUpdate, UserStatusUpdate
)
from gosave.modules.users.service import UserService
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(supabase: Client = Depends(get_supabase)) -> UserService:
    return UserService(supabase)


@router.get("/me", response_model=UserResponse)
async def get_my_profile(
    user: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    """Get the caller's own profile and membership"""
    profile = service.get_user(user.id)
    log_access(user.id, "users", "view_profile")
    return profile


@router.get("/me/payments", response_model=PaymentListResponse)
async def get_my_payments(
    user: CurrentUser = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    """Get the caller's own payments"""
    payments = service.get_payments(user.id)
    log_access(user.id, "payments", "view")
    return PaymentListResponse(data=payments, count=len(payments))


@router.get("", response_model=List[UserResponse])
async def list_users(
    role: Optional[Role] = None,
    status: Optional[UserStatus] = None,
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user: CurrentUser = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    """List users (admin only)"""
    return service.list_users(role=role, status=status, limit=limit, offset=offset)


@router.put("/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: str,
    body: UserRoleUpdate,
    user: CurrentUser = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    """Change a user's role (admin only)"""
    updated = service.update_role(user_id, body.role, user.id)
    log_security_event(user.id, "USER_ROLE_CHANGED", f"User ID: {user_id} role={body.role.value}")
    return updated


@router.put("/{user_id}/status", response_model=UserResponse)
async def update_user_status(
    user_id: str,
    body: UserStatusUpdate,
    user: CurrentUser = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    """Activate or suspend a user (admin only)"""
    updated = service.update_status(user_id, body.status, user.id)
    log_security_event(user.id, "USER_STATUS_CHANGED", f"User ID: {user_id} status={body.status.value}")
    return updated


@router.post("/orphaned-identities/reconcile", response_model=ReconcileResponse)
async def reconcile_orphaned_identities(
    user: CurrentUser = Depends(require_admin),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Retry cleanup of auth identities left without a profile (admin only)"""
    counts = RegistrationSaga(auth_service.auth_client, auth_service.supabase).reconcile()
    log_access(user.id, "orphaned_identities", "reconcile")
    return ReconcileResponse(**counts)
