import enum


class Role(str, enum.Enum):
    ADMIN = "admin"
    MEMBER = "member"
    PARTNER = "partner"
    VIEWER = "viewer"  # registered, no membership


class Tier(str, enum.Enum):
    BASIC = "basic"
    PREMIUM = "premium"


class PartnerStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class UserStatus(str, enum.Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


def parse_role(value) -> "Role | None":
    """Map a stored role string to Role; unknown or empty values give None."""
    if isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        return None


def parse_tier(value) -> "Tier | None":
    if isinstance(value, Tier):
        return value
    try:
        return Tier(value)
    except ValueError:
        return None
