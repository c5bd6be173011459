from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from gosave.core.roles import Role, UserStatus


class MembershipSummary(BaseModel):
    name: str
    price: Optional[float] = None


class UserResponse(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    membership_id: Optional[str] = None
    membership_valid_until: Optional[str] = None
    memberships: Optional[MembershipSummary] = None

    class Config:
        from_attributes = True


class UserRoleUpdate(BaseModel):
    role: Role


class UserStatusUpdate(BaseModel):
    status: UserStatus


class PaymentResponse(BaseModel):
    id: str
    user_id: str
    amount: float
    status: str
    payment_method: Optional[str] = None
    created_at: Optional[datetime] = None
    memberships: Optional[MembershipSummary] = None

    class Config:
        from_attributes = True


class PaymentListResponse(BaseModel):
    data: List[PaymentResponse]
    count: int


class ReconcileResponse(BaseModel):
    resolved: int
    pending: int
