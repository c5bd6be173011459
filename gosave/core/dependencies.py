"""
Core dependencies for caller resolution and route protection
"""

from datetime import datetime, timezone
from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from supabase import Client
from typing import Iterable, Optional, FrozenSet
import logging

from gosave.core.audit import log_security_event
from gosave.core.exceptions import AuthenticationError, AuthorizationError
from gosave.core.roles import Role, Tier
from gosave.database.supabase_client import get_auth_client, get_supabase
from gosave.modules.auth.schemas import CurrentUser
from gosave.modules.auth.service import AuthService

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_auth_service(
    auth_client: Client = Depends(get_auth_client),
    supabase: Client = Depends(get_supabase)
) -> AuthService:
    return AuthService(auth_client, supabase)


def get_current_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Access token required")
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_current_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> CurrentUser:
    """Resolve the caller from the bearer token"""
    return auth_service.resolve_user(token)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[CurrentUser]:
    """Caller when a valid token is sent, otherwise None. Bad tokens fall back to anonymous."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        return auth_service.resolve_user(credentials.credentials)
    except AuthenticationError as e:
        log_security_event(None, "INVALID_TOKEN_ON_PUBLIC_ROUTE", e.detail)
        return None


def check_role(user: Optional[CurrentUser], allowed_roles: Iterable[Role]) -> CurrentUser:
    """Continue (return the caller) if its role is allowed; raise 401/403 otherwise"""
    if user is None or user.role is None:
        raise AuthenticationError("Authentication required")
    if user.role not in frozenset(allowed_roles):
        raise AuthorizationError("Insufficient permissions")
    return user


def check_membership(user: Optional[CurrentUser], allowed_tiers: Iterable[Tier]) -> CurrentUser:
    """Continue if the caller's membership tier is allowed; raise 403 otherwise"""
    allowed = frozenset(allowed_tiers)
    tier = user.tier if user is not None else None
    if tier is None:
        raise AuthorizationError("Membership required")
    if tier not in allowed:
        raise AuthorizationError(_tier_requirement(allowed))
    if _membership_expired(user.membership.valid_until):
        raise AuthorizationError("Membership expired")
    return user


def _membership_expired(valid_until: Optional[str]) -> bool:
    # valid_until is an ISO date or timestamp; compare on the UTC calendar day
    if not valid_until:
        return False
    return str(valid_until)[:10] < datetime.now(timezone.utc).date().isoformat()


def _tier_requirement(allowed: FrozenSet[Tier]) -> str:
    names = " or ".join(sorted(t.value for t in allowed))
    if not names:
        return "Membership required"
    return f"{names.capitalize()} membership required"


def require_role(*allowed_roles: Role):
    """Factory function to create a role check dependency"""
    allowed = frozenset(Role(r) for r in allowed_roles)

    def role_checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        return check_role(user, allowed)
    return role_checker


def require_membership(*allowed_tiers: Tier):
    """Factory function to create a membership tier check dependency"""
    allowed = frozenset(Tier(t) for t in allowed_tiers)

    def membership_checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        return check_membership(user, allowed)
    return membership_checker


require_admin = require_role(Role.ADMIN)
require_member = require_role(Role.ADMIN, Role.MEMBER)
require_premium = require_membership(Tier.PREMIUM)
