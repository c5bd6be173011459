from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime


class DealCreate(BaseModel):
    title: str
    description: str
    partner_id: str
    basic_discount: Optional[float] = Field(default=None, ge=0, le=100)
    premium_discount: Optional[float] = Field(default=None, ge=0, le=100)
    category: Optional[str] = None
    image_url: Optional[str] = None

    @field_validator("title", "description", "partner_id")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Missing required fields: title, description, partner_id")
        return value


class DealResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    category: Optional[str] = None
    partner_id: Optional[str] = None
    basic_discount: Optional[float] = None
    premium_discount: Optional[float] = None
    discount_text: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    partners: Optional[dict] = None

    class Config:
        from_attributes = True


class DealListResponse(BaseModel):
    data: List[DealResponse]
    count: int
    membership: str
