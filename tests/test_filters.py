"""
Tests for membership and role based row filters.
"""

import pytest

from gosave.core.filters import (
    PREMIUM_FALLBACK_TEXT,
    filter_deals,
    filter_partners,
    filter_payments,
    filter_user_data,
    visible_partner_statuses,
)
from gosave.core.roles import Role, Tier


PREMIUM_ONLY = {"id": "d1", "title": "Spa day", "basic_discount": None, "premium_discount": 30}
BOTH_TIERS = {"id": "d2", "title": "Burgers", "basic_discount": 10, "premium_discount": 20}
BASIC_ONLY = {"id": "d3", "title": "Coffee", "basic_discount": 15, "premium_discount": None}

PARTNERS = [
    {"id": "p1", "status": "approved"},
    {"id": "p2", "status": "pending"},
    {"id": "p3", "status": "rejected"},
    {"id": "p4", "status": "approved"},
]


class TestFilterDeals:
    @pytest.mark.parametrize("tier", [Tier.BASIC, None, "basic"])
    def test_premium_only_discount_hidden_below_premium(self, tier):
        result = filter_deals([PREMIUM_ONLY], tier)

        assert result[0]["premium_discount"] is None
        assert result[0]["discount_text"] == PREMIUM_FALLBACK_TEXT
        assert result[0]["title"] == "Spa day"

    def test_input_rows_are_not_mutated(self):
        deal = dict(PREMIUM_ONLY)
        filter_deals([deal], Tier.BASIC)
        assert deal["premium_discount"] == 30

    def test_premium_caller_sees_deals_unchanged(self):
        deals = [PREMIUM_ONLY, BOTH_TIERS, BASIC_ONLY]
        assert filter_deals(deals, Tier.PREMIUM) == deals
        assert filter_deals(deals, "premium") == deals

    def test_deals_with_a_basic_discount_pass_through(self):
        result = filter_deals([BOTH_TIERS, BASIC_ONLY], Tier.BASIC)
        assert result == [BOTH_TIERS, BASIC_ONLY]

    def test_order_is_preserved(self):
        deals = [BASIC_ONLY, PREMIUM_ONLY, BOTH_TIERS]
        result = filter_deals(deals, None)
        assert [d["id"] for d in result] == ["d3", "d1", "d2"]

    def test_non_list_input_is_returned_unchanged(self):
        assert filter_deals(None, Tier.BASIC) is None
        assert filter_deals(PREMIUM_ONLY, Tier.BASIC) is PREMIUM_ONLY

    def test_non_dict_rows_are_left_alone(self):
        assert filter_deals(["not-a-row"], Tier.BASIC) == ["not-a-row"]


class TestFilterPartners:
    @pytest.mark.parametrize("role", [Role.MEMBER, Role.PARTNER, Role.VIEWER, None])
    def test_non_admins_only_see_approved(self, role):
        result = filter_partners(PARTNERS, role)

        assert [p["id"] for p in result] == ["p1", "p4"]
        assert all(p["status"] == "approved" for p in result)
        assert len(result) <= len(PARTNERS)

    def test_admin_sees_everything(self):
        assert filter_partners(PARTNERS, Role.ADMIN) == PARTNERS
        assert filter_partners(PARTNERS, "admin") == PARTNERS

    def test_visibility_boundary(self):
        assert visible_partner_statuses(Role.ADMIN) is None
        assert visible_partner_statuses(Role.MEMBER) == frozenset({"approved"})
        assert visible_partner_statuses(None) == frozenset({"approved"})


class TestFilterPayments:
    PAYMENTS = [
        {"id": "pay1", "user_id": "u1", "amount": 999},
        {"id": "pay2", "user_id": "u2", "amount": 2999},
        {"id": "pay3", "user_id": "u1", "amount": 2999},
    ]

    def test_only_callers_payments_are_kept(self):
        result = filter_payments(self.PAYMENTS, "u1")
        assert [p["id"] for p in result] == ["pay1", "pay3"]
        assert all(p["user_id"] == "u1" for p in result)

    def test_unknown_caller_sees_nothing(self):
        assert filter_payments(self.PAYMENTS, "u9") == []
        assert filter_payments(self.PAYMENTS, None) == []

    def test_non_list_input_is_returned_unchanged(self):
        assert filter_payments(None, "u1") is None


class TestFilterUserData:
    def test_list_matches_on_user_id_or_id(self):
        rows = [{"id": "u1"}, {"id": "x", "user_id": "u1"}, {"id": "u2"}]
        assert filter_user_data(rows, "u1") == [{"id": "u1"}, {"id": "x", "user_id": "u1"}]

    def test_single_record(self):
        assert filter_user_data({"id": "u1", "email": "a@b.com"}, "u1") == {"id": "u1", "email": "a@b.com"}
        assert filter_user_data({"id": "u2"}, "u1") is None

    def test_garbage_input_is_absent(self):
        assert filter_user_data("nope", "u1") is None
        assert filter_user_data(None, "u1") is None
