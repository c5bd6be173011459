import logging
from supabase import Client
from gosave.core.exceptions import (
    AuthenticationError, AuthorizationError, NotFoundError, UpstreamError
)
from gosave.core.roles import UserStatus
from gosave.core.secure_queries import USER_COLUMNS
from gosave.modules.auth.registration import RegistrationSaga
from gosave.modules.auth.schemas import (
    CurrentUser, LoginRequest, LoginResponse, RegisterRequest, RegisterResponse, SessionInfo
)

logger = logging.getLogger(__name__)

EMAIL_NOT_VERIFIED = "Please verify your email before logging in"


class AuthService:
    def __init__(self, auth_client: Client, supabase: Client):
        self.auth_client = auth_client
        self.supabase = supabase

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Create the auth identity and its profile row"""
        return RegistrationSaga(self.auth_client, self.supabase).run(register_data)

    def login(self, login_data: LoginRequest) -> LoginResponse:
        """Authenticate with Supabase Auth and return the profile plus session"""
        email = login_data.email.lower()
        try:
            auth_response = self.auth_client.auth.sign_in_with_password({
                "email": email,
                "password": login_data.password
            })
        except Exception as e:
            error_message = str(e).lower()
            if "not confirmed" in error_message:
                raise AuthorizationError(EMAIL_NOT_VERIFIED)
            if "invalid" in error_message or "credentials" in error_message:
                raise AuthenticationError("Invalid email or password")
            raise UpstreamError("Login failed", cause=e)

        user = auth_response.user
        if not user or not auth_response.session:
            raise AuthenticationError("Authentication failed")

        profile = self._profile_by_email((user.email or email).lower())
        if profile is None:
            raise NotFoundError("User profile not found")

        if not getattr(user, "email_confirmed_at", None):
            raise AuthorizationError(EMAIL_NOT_VERIFIED)

        if profile.get("status") != UserStatus.ACTIVE.value:
            raise AuthenticationError("Account suspended")

        session = auth_response.session
        current = CurrentUser.from_row(profile)
        return LoginResponse(
            message="Login successful",
            user={
                **current.model_dump(mode="json"),
                "auth_user_id": user.id,
                "phone": profile.get("phone"),
                "email_verified": True,
            },
            session=SessionInfo(
                access_token=session.access_token,
                refresh_token=getattr(session, "refresh_token", None),
                token_type=getattr(session, "token_type", None) or "bearer",
                expires_in=getattr(session, "expires_in", None),
                expires_at=getattr(session, "expires_at", None),
            ),
        )

    def resolve_user(self, token: str) -> CurrentUser:
        """Verify a bearer token and load the caller's profile and membership"""
        try:
            user_response = self.auth_client.auth.get_user(jwt=token)
        except Exception as e:
            logger.info(f"Token verification failed: {e}")
            raise AuthenticationError("Invalid token")
        if not user_response or not user_response.user:
            raise AuthenticationError("Invalid token")

        email = user_response.user.email
        if not email:
            raise AuthenticationError("Invalid token - no email")

        profile = self._profile_by_email(email.lower())
        if profile is None:
            raise AuthenticationError("User not found")
        if profile.get("status") != UserStatus.ACTIVE.value:
            raise AuthenticationError("Account suspended")
        return CurrentUser.from_row(profile)

    def logout(self, token: str) -> None:
        """Revoke the session behind a token"""
        try:
            self.supabase.auth.admin.sign_out(token)
        except Exception as e:
            raise UpstreamError("Failed to logout", cause=e)

    def _profile_by_email(self, email: str):
        try:
            result = self.supabase.table("users")\
                .select(f"{USER_COLUMNS}, auth_user_id, phone")\
                .eq("email", email)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise UpstreamError("Failed to fetch user profile", cause=e)
        return result.data[0] if result.data else None
