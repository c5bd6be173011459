from datetime import datetime, timezone
from supabase import Client
from typing import Any, Dict, List, Optional
from gosave.core.exceptions import NotFoundError, UpstreamError, ValidationError
from gosave.core.roles import Role, UserStatus
from gosave.core.secure_queries import USER_COLUMNS, SecureQueries
from gosave.modules.users.schemas import PaymentResponse, UserResponse


class UserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.queries = SecureQueries(supabase)

    def get_user(self, user_id: str) -> UserResponse:
        """Get a user profile with its membership tier and price"""
        data, error = self.queries.get_user_data(user_id)
        if error:
            raise UpstreamError("Failed to fetch user data")
        if data is None:
            raise NotFoundError("User not found")
        return UserResponse(**data)

    def get_payments(self, user_id: str) -> List[PaymentResponse]:
        """Payments owned by user_id, newest first"""
        data, error = self.queries.get_user_payments(user_id)
        if error:
            raise UpstreamError("Failed to fetch payments")
        return [PaymentResponse(**payment) for payment in data]

    def list_users(
        self,
        role: Optional[Role] = None,
        status: Optional[UserStatus] = None,
        limit: int = 10,
        offset: int = 0
    ) -> List[UserResponse]:
        try:
            query = self.supabase.table("users").select(USER_COLUMNS)
            if role is not None:
                query = query.eq("role", role.value)
            if status is not None:
                query = query.eq("status", status.value)
            result = query.order("created_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
        except Exception as e:
            raise UpstreamError("Failed to fetch users", cause=e)
        return [UserResponse(**user) for user in result.data or []]

    def update_role(self, user_id: str, role: Role, acting_admin_id: str) -> UserResponse:
        """Change a user's role; demoting to viewer drops the membership"""
        if user_id == acting_admin_id:
            raise ValidationError("Admins cannot change their own role")
        update_data: Dict[str, Any] = {"role": role.value}
        if role == Role.VIEWER:
            update_data["membership_id"] = None
            update_data["membership_valid_until"] = None
        return self._update(user_id, update_data)

    def update_status(self, user_id: str, status: UserStatus, acting_admin_id: str) -> UserResponse:
        if user_id == acting_admin_id:
            raise ValidationError("Admins cannot change their own status")
        return self._update(user_id, {"status": status.value})

    def _update(self, user_id: str, update_data: Dict[str, Any]) -> UserResponse:
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
        try:
            result = self.supabase.table("users")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()
        except Exception as e:
            raise UpstreamError("Failed to update user", cause=e)
        if not result.data:
            raise NotFoundError("User not found")
        return self.get_user(user_id)
