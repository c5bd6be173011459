"""
Storage fetches paired with the access filter each one requires.

Every helper returns ``(data, error)``. ``error`` is only set when the
storage call itself failed; an empty or fully filtered result is not an
error.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Tuple

from supabase import Client

from gosave.core.filters import (
    filter_deals, filter_partners, filter_payments, visible_partner_statuses
)
from gosave.core.roles import Role, Tier

logger = logging.getLogger(__name__)

QueryResult = Tuple[Optional[Any], Optional[Exception]]

USER_COLUMNS = (
    "id, email, full_name, role, status, membership_id, membership_valid_until, "
    "memberships(name, price)"
)
DEAL_COLUMNS = (
    "id, title, description, image_url, basic_discount, premium_discount, "
    "start_date, end_date, category, partner_id, partners(brand_name, logo_url)"
)
PARTNER_COLUMNS = (
    "id, brand_name, owner_name, business_type, city, website, logo_url, "
    "min_discount, max_discount, status, created_at"
)
PAYMENT_COLUMNS = "id, user_id, amount, status, payment_method, created_at, memberships(name, price)"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SecureQueries:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_user_data(self, user_id: str) -> QueryResult:
        """Fetch one user joined with its membership tier and price."""
        try:
            result = self.supabase.table("users")\
                .select(USER_COLUMNS)\
                .eq("id", user_id)\
                .limit(1)\
                .execute()
            return (result.data[0] if result.data else None), None
        except Exception as e:
            logger.error(f"Error fetching user {user_id}: {e}")
            return None, e

    def get_deals_for_user(self, tier: Optional[Tier], role: Optional[Role]) -> QueryResult:
        try:
            now = utc_now_iso()
            result = self.supabase.table("deals")\
                .select(DEAL_COLUMNS)\
                .lte("start_date", now)\
                .gte("end_date", now)\
                .order("start_date", desc=True)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching deals (tier={tier}, role={role}): {e}")
            return None, e
        return filter_deals(result.data or [], tier), None

    def get_premium_deals(self) -> QueryResult:
        """Active deals that carry a premium discount."""
        try:
            now = utc_now_iso()
            result = self.supabase.table("deals")\
                .select(DEAL_COLUMNS)\
                .not_.is_("premium_discount", "null")\
                .lte("start_date", now)\
                .gte("end_date", now)\
                .order("start_date", desc=True)\
                .execute()
            return result.data or [], None
        except Exception as e:
            logger.error(f"Error fetching premium deals: {e}")
            return None, e

    def get_partners_for_user(self, role: Optional[Role]) -> QueryResult:
        statuses = visible_partner_statuses(role)
        try:
            query = self.supabase.table("partners").select(PARTNER_COLUMNS)
            if statuses is not None:
                query = query.in_("status", sorted(statuses))
            result = query.order("created_at", desc=True).execute()
        except Exception as e:
            logger.error(f"Error fetching partners (role={role}): {e}")
            return None, e
        return filter_partners(result.data or [], role), None

    def get_user_payments(self, user_id: str) -> QueryResult:
        try:
            result = self.supabase.table("payments")\
                .select(PAYMENT_COLUMNS)\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching payments for user {user_id}: {e}")
            return None, e
        return filter_payments(result.data or [], user_id), None
