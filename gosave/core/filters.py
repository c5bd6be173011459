"""
Membership and role based filters over rows that were already fetched.

These functions do no I/O and never raise. List filters return non-list
input unchanged so a bad payload degrades to "no filtering applied" rather
than a failed request.
"""

from typing import Any, Dict, FrozenSet, List, Optional, Union

from gosave.core.roles import PartnerStatus, Role, Tier

Row = Dict[str, Any]

PREMIUM_FALLBACK_TEXT = "Member discount available"


def visible_partner_statuses(role: Optional[Union[Role, str]]) -> Optional[FrozenSet[str]]:
    """Partner statuses a role may observe. None means every status."""
    if role == Role.ADMIN:
        return None
    return frozenset({PartnerStatus.APPROVED.value})


def filter_user_data(data: Union[List[Row], Row, None], caller_id: Optional[str]):
    """Keep only rows owned by the caller (matching user_id or id)."""
    if isinstance(data, list):
        return [row for row in data if _owned_by(row, caller_id)]
    if isinstance(data, dict):
        return data if _owned_by(data, caller_id) else None
    return None


def filter_deals(deals: List[Row], caller_tier: Optional[Union[Tier, str]]) -> List[Row]:
    """Hide premium-only discounts from callers without a premium membership."""
    if not isinstance(deals, list):
        return deals
    if caller_tier == Tier.PREMIUM:
        return deals
    return [_redact_premium(deal) if isinstance(deal, dict) else deal for deal in deals]


def filter_partners(partners: List[Row], caller_role: Optional[Union[Role, str]]) -> List[Row]:
    if not isinstance(partners, list):
        return partners
    statuses = visible_partner_statuses(caller_role)
    if statuses is None:
        return partners
    return [p for p in partners if isinstance(p, dict) and p.get("status") in statuses]


def filter_payments(payments: List[Row], caller_id: Optional[str]) -> List[Row]:
    """Payments are identity scoped for every role, admins included."""
    if not isinstance(payments, list):
        return payments
    return [p for p in payments if isinstance(p, dict) and caller_id is not None and p.get("user_id") == caller_id]


def _owned_by(row: Any, caller_id: Optional[str]) -> bool:
    if not isinstance(row, dict) or caller_id is None:
        return False
    return row.get("user_id") == caller_id or row.get("id") == caller_id


def _redact_premium(deal: Row) -> Row:
    if not deal.get("premium_discount") or deal.get("basic_discount"):
        return deal
    redacted = dict(deal)
    redacted["premium_discount"] = None
    redacted["discount_text"] = PREMIUM_FALLBACK_TEXT
    return redacted
