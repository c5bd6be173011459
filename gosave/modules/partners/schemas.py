from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime


class PartnerApply(BaseModel):
    brand_name: str
    owner_name: str
    email: EmailStr
    phone: str
    business_type: str
    address: str
    city: str
    website: Optional[str] = None
    min_discount: Optional[float] = Field(default=None, ge=0, le=100)
    max_discount: Optional[float] = Field(default=None, ge=0, le=100)
    contract_duration_months: int = Field(default=12, ge=1)
    description: Optional[str] = None

    @field_validator("brand_name", "owner_name", "phone", "business_type", "address", "city")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Please fill all required fields")
        return value


class PartnerReview(BaseModel):
    notes: Optional[str] = None


class PartnerReject(BaseModel):
    reason: str
    notes: Optional[str] = None

    @field_validator("reason")
    @classmethod
    def reason_length(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 5:
            raise ValueError("Rejection reason must be at least 5 characters long")
        return value


class PartnerResponse(BaseModel):
    id: str
    brand_name: str
    owner_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    logo_url: Optional[str] = None
    business_type: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    min_discount: Optional[float] = None
    max_discount: Optional[float] = None
    contract_duration_months: Optional[int] = None
    status: str
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    admin_notes: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PartnerListResponse(BaseModel):
    data: List[PartnerResponse]
    count: int


class ApplicationResponse(BaseModel):
    application_id: str
    email: str
    brand_name: str
    status: str
    message: str


class ApplicationStatusResponse(BaseModel):
    application_id: str
    brand_name: str
    status: str
    message: str
    submitted_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
