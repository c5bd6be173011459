import re
from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional, Dict, Any
from gosave.core.roles import Role, Tier, parse_role, parse_tier

# At least 8 characters, 1 uppercase, 1 lowercase, 1 number
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)[a-zA-Z\d@$!%*?&]{8,}$")
PASSWORD_RULE = "Password must be at least 8 characters with uppercase, lowercase, and number"


class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def password_present(cls, value: str) -> str:
        if not value:
            raise ValueError("Email and password are required")
        return value


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    full_name: str
    phone: Optional[str] = None

    @field_validator("password")
    @classmethod
    def password_complexity(cls, value: str) -> str:
        if not PASSWORD_PATTERN.match(value):
            raise ValueError(PASSWORD_RULE)
        return value

    @field_validator("full_name")
    @classmethod
    def full_name_present(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Full name is required")
        return value


class UserSummary(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    role: Optional[str] = None
    email_verified: bool = False


class RegisterResponse(BaseModel):
    message: str
    user: UserSummary


class SessionInfo(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    expires_at: Optional[int] = None


class MembershipInfo(BaseModel):
    id: Optional[str] = None
    name: Tier
    price: Optional[float] = None
    valid_until: Optional[str] = None


class CurrentUser(BaseModel):
    """Caller resolved from a bearer token and its users row."""
    id: str
    email: str
    full_name: Optional[str] = None
    role: Optional[Role] = None
    status: Optional[str] = None
    membership: Optional[MembershipInfo] = None

    @property
    def tier(self) -> Optional[Tier]:
        return self.membership.name if self.membership else None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "CurrentUser":
        membership = None
        joined = row.get("memberships") or {}
        tier = parse_tier(joined.get("name"))
        if tier is not None:
            membership = MembershipInfo(
                id=_as_str(row.get("membership_id")),
                name=tier,
                price=joined.get("price"),
                valid_until=row.get("membership_valid_until"),
            )
        return cls(
            id=str(row["id"]),
            email=row["email"],
            full_name=row.get("full_name"),
            role=parse_role(row.get("role")),
            status=row.get("status"),
            membership=membership,
        )


class LoginResponse(BaseModel):
    message: str
    user: Dict[str, Any]
    session: SessionInfo


class LogoutResponse(BaseModel):
    message: str


def _as_str(value) -> Optional[str]:
    return None if value is None else str(value)
