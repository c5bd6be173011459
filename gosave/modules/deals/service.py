import logging
from datetime import datetime, timedelta, timezone
from supabase import Client
from typing import List, Optional
from gosave.core.exceptions import NotFoundError, UpstreamError, ValidationError
from gosave.core.filters import filter_deals
from gosave.core.roles import Role, Tier
from gosave.core.secure_queries import DEAL_COLUMNS, SecureQueries
from gosave.modules.deals.schemas import DealCreate, DealResponse

logger = logging.getLogger(__name__)


class DealService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.queries = SecureQueries(supabase)

    def list_deals(self, tier: Optional[Tier], role: Optional[Role]) -> List[DealResponse]:
        """Active deals with premium-only discounts hidden below premium tier"""
        deals, error = self.queries.get_deals_for_user(tier, role)
        if error:
            raise UpstreamError("Failed to fetch deals")
        return [DealResponse(**deal) for deal in deals]

    def list_premium_deals(self) -> List[DealResponse]:
        deals, error = self.queries.get_premium_deals()
        if error:
            raise UpstreamError("Failed to fetch premium deals")
        return [DealResponse(**deal) for deal in deals]

    def get_deal(self, deal_id: str, tier: Optional[Tier]) -> DealResponse:
        """Get one deal, filtered for the caller's tier"""
        try:
            result = self.supabase.table("deals")\
                .select(DEAL_COLUMNS)\
                .eq("id", deal_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise UpstreamError("Failed to fetch deal", cause=e)
        if not result.data:
            raise NotFoundError("Deal not found")
        return DealResponse(**filter_deals(result.data, tier)[0])

    def create_deal(self, deal_data: DealCreate, created_by: str, duration_days: int) -> DealResponse:
        """Create a deal running from now for duration_days"""
        if deal_data.basic_discount is None and deal_data.premium_discount is None:
            raise ValidationError("A deal needs a basic_discount or a premium_discount")
        self._ensure_partner_exists(deal_data.partner_id)

        start = datetime.now(timezone.utc)
        end = start + timedelta(days=duration_days)
        try:
            result = self.supabase.table("deals").insert({
                "title": deal_data.title,
                "description": deal_data.description,
                "basic_discount": deal_data.basic_discount,
                "premium_discount": deal_data.premium_discount,
                "partner_id": deal_data.partner_id,
                "category": deal_data.category,
                "image_url": deal_data.image_url,
                "start_date": start.isoformat(),
                "end_date": end.isoformat(),
                "created_by": created_by,
            }).execute()
        except Exception as e:
            raise UpstreamError("Failed to create deal", cause=e)

        if not result.data:
            raise UpstreamError("Failed to create deal")
        return DealResponse(**result.data[0])

    def _ensure_partner_exists(self, partner_id: str) -> None:
        try:
            result = self.supabase.table("partners")\
                .select("id")\
                .eq("id", partner_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise UpstreamError("Failed to create deal", cause=e)
        if not result.data:
            raise ValidationError(f"Partner {partner_id} does not exist")
