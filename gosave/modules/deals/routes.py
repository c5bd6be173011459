from fastapi import APIRouter, Depends
from gosave.config.settings import Settings, get_app_settings
from gosave.core.audit import log_access, log_security_event
from gosave.core.dependencies import (
    get_optional_user, require_admin, require_member, require_premium
)
from gosave.core.roles import Role
from gosave.database.supabase_client import get_supabase
from gosave.modules.auth.schemas import CurrentUser
from gosave.modules.deals.schemas import DealCreate, DealListResponse, DealResponse
from gosave.modules.deals.service import DealService
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/deals", tags=["deals"])


def get_deal_service(supabase: Client = Depends(get_supabase)) -> DealService:
    return DealService(supabase)


def _membership_label(user: Optional[CurrentUser]) -> str:
    return user.tier.value if user is not None and user.tier is not None else "none"


@router.get("", response_model=DealListResponse)
async def list_deals(
    user: Optional[CurrentUser] = Depends(get_optional_user),
    service: DealService = Depends(get_deal_service)
):
    """Active deals; premium-only discounts are hidden unless the caller is premium"""
    tier = user.tier if user else None
    role = user.role if user and user.role else Role.VIEWER
    deals = service.list_deals(tier, role)
    if user:
        log_access(user.id, "deals", "view_all")
    return DealListResponse(data=deals, count=len(deals), membership=_membership_label(user))


@router.get("/my-deals", response_model=DealListResponse)
async def my_deals(
    user: CurrentUser = Depends(require_member),
    service: DealService = Depends(get_deal_service)
):
    """Deals for an authenticated member or admin"""
    deals = service.list_deals(user.tier, user.role)
    log_access(user.id, "deals", "view_my_deals")
    return DealListResponse(data=deals, count=len(deals), membership=_membership_label(user))


@router.get("/premium", response_model=DealListResponse)
async def premium_deals(
    user: CurrentUser = Depends(require_premium),
    service: DealService = Depends(get_deal_service)
):
    """Premium-only deals (premium members only)"""
    deals = service.list_premium_deals()
    log_access(user.id, "premium_deals", "view")
    return DealListResponse(data=deals, count=len(deals), membership=_membership_label(user))


@router.post("", response_model=DealResponse, status_code=201)
async def create_deal(
    deal_data: DealCreate,
    user: CurrentUser = Depends(require_admin),
    service: DealService = Depends(get_deal_service),
    settings: Settings = Depends(get_app_settings)
):
    """Create a new deal (admin only)"""
    try:
        deal = service.create_deal(deal_data, user.id, settings.deal_duration_days)
    except Exception:
        log_access(user.id, "deals", "create", False)
        raise
    log_access(user.id, "deals", "create", True)
    log_security_event(user.id, "DEAL_CREATED", f"Deal ID: {deal.id}")
    return deal


@router.get("/{deal_id}", response_model=DealResponse)
async def get_deal(
    deal_id: str,
    user: Optional[CurrentUser] = Depends(get_optional_user),
    service: DealService = Depends(get_deal_service)
):
    """Get a single deal, filtered for the caller's tier"""
    return service.get_deal(deal_id, user.tier if user else None)
