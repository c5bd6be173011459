"""
Registration as a two-step saga.

Step 1 creates the auth identity, step 2 inserts the ``users`` profile row.
When step 2 fails the identity is compensated: an ``orphaned_identities``
record is written first so the orphan survives a crash, the identity is
deleted through the admin API, and the record is marked resolved. Deletion
is idempotent; an identity that is already gone counts as cleaned up.
Records left in ``pending_cleanup`` are retried by ``reconcile``.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from supabase import Client

from gosave.core.audit import log_security_event
from gosave.core.exceptions import (
    ConflictError, UpstreamError, ValidationError, is_unique_violation
)
from gosave.core.roles import Role, UserStatus
from gosave.modules.auth.schemas import RegisterRequest, RegisterResponse, UserSummary

logger = logging.getLogger(__name__)

ORPHAN_PENDING = "pending_cleanup"
ORPHAN_RESOLVED = "resolved"

DUPLICATE_EMAIL = "User with this email already exists"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class RegistrationSaga:
    def __init__(self, auth_client: Client, supabase: Client):
        self.auth_client = auth_client
        self.supabase = supabase

    def run(self, register_data: RegisterRequest) -> RegisterResponse:
        email = register_data.email.lower()
        self._ensure_email_available(email)
        identity = self._create_identity(email, register_data)

        try:
            profile = self._create_profile(identity.id, email, register_data)
        except Exception as e:
            logger.error(f"Profile insert failed for {email} (auth user {identity.id}): {e}")
            self.compensate(identity.id, email, reason=str(e))
            if is_unique_violation(e):
                raise ConflictError(DUPLICATE_EMAIL)
            raise UpstreamError("Failed to create user profile")

        logger.info(f"Registered user {profile['id']} ({email})")
        return RegisterResponse(
            message="Registration successful! Please check your email to verify your account.",
            user=UserSummary(
                id=str(profile["id"]),
                email=profile["email"],
                full_name=profile.get("full_name"),
                role=profile.get("role"),
                email_verified=False,
            ),
        )

    def _ensure_email_available(self, email: str) -> None:
        try:
            existing = self.supabase.table("users")\
                .select("id")\
                .eq("email", email)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise UpstreamError("Registration failed", cause=e)
        if existing.data:
            raise ConflictError(DUPLICATE_EMAIL)

    def _create_identity(self, email: str, register_data: RegisterRequest):
        try:
            auth_response = self.auth_client.auth.sign_up({
                "email": email,
                "password": register_data.password,
                "options": {
                    "data": {
                        "full_name": register_data.full_name,
                        "phone": register_data.phone,
                    }
                }
            })
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise ConflictError(DUPLICATE_EMAIL)
            status_code = getattr(e, "status", None)
            if isinstance(status_code, int) and 400 <= status_code < 500:
                raise ValidationError(error_message)
            raise UpstreamError("Registration failed", cause=e)

        user = auth_response.user
        if not user:
            raise ValidationError("Failed to create user account")
        # An existing, unconfirmed address comes back as a user without identities.
        if getattr(user, "identities", None) == []:
            raise ConflictError(DUPLICATE_EMAIL)
        return user

    def _create_profile(self, auth_user_id: str, email: str, register_data: RegisterRequest) -> Dict[str, Any]:
        result = self.supabase.table("users").insert({
            "auth_user_id": auth_user_id,
            "email": email,
            "full_name": register_data.full_name,
            "phone": register_data.phone,
            "role": Role.VIEWER.value,
            "status": UserStatus.ACTIVE.value,
            "membership_id": None,
            "membership_valid_until": None,
        }).execute()
        if not result.data:
            raise RuntimeError("Profile insert returned no row")
        return result.data[0]

    def compensate(self, auth_user_id: str, email: str, reason: str) -> bool:
        """Delete an identity that has no profile. Returns True once it is gone."""
        record_id = self._record_orphan(auth_user_id, email, reason)
        if not self.delete_identity(auth_user_id):
            log_security_event(auth_user_id, "ORPHANED_IDENTITY", f"email={email} reason={reason}")
            return False
        self._resolve_orphan(record_id)
        return True

    def delete_identity(self, auth_user_id: str) -> bool:
        try:
            self.supabase.auth.admin.delete_user(auth_user_id)
            return True
        except Exception as e:
            if "not found" in str(e).lower():
                return True
            logger.error(f"Failed to delete auth user {auth_user_id}: {e}")
            return False

    def reconcile(self) -> Dict[str, int]:
        """Retry cleanup for every orphan still pending."""
        try:
            result = self.supabase.table("orphaned_identities")\
                .select("*")\
                .eq("status", ORPHAN_PENDING)\
                .order("created_at")\
                .execute()
        except Exception as e:
            raise UpstreamError("Failed to load orphaned identities", cause=e)

        resolved = 0
        pending = 0
        for record in result.data or []:
            if self.delete_identity(record["auth_user_id"]):
                self._resolve_orphan(record["id"])
                resolved += 1
            else:
                pending += 1
        logger.info(f"Orphan reconciliation: {resolved} resolved, {pending} still pending")
        return {"resolved": resolved, "pending": pending}

    def _record_orphan(self, auth_user_id: str, email: str, reason: str) -> Optional[str]:
        try:
            result = self.supabase.table("orphaned_identities").insert({
                "auth_user_id": auth_user_id,
                "email": email,
                "reason": reason[:500],
                "status": ORPHAN_PENDING,
            }).execute()
            return result.data[0]["id"] if result.data else None
        except Exception as e:
            logger.error(f"Could not record orphaned identity {auth_user_id} ({email}): {e}")
            return None

    def _resolve_orphan(self, record_id: Optional[str]) -> None:
        if record_id is None:
            return
        try:
            self.supabase.table("orphaned_identities")\
                .update({"status": ORPHAN_RESOLVED, "resolved_at": _now()})\
                .eq("id", record_id)\
                .execute()
        except Exception as e:
            logger.error(f"Could not mark orphaned identity record {record_id} resolved: {e}")
