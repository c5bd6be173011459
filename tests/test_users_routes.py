"""
Tests for profile, payments and admin user management.
"""

from supabase_fake import bearer, iso

USERS = "/api/v1/users"


def seed_payment(supabase, user_id, amount=999.0, days_ago=0):
    row = {
        "id": f"pay-{len(supabase.rows('payments')) + 1}",
        "user_id": user_id,
        "amount": amount,
        "status": "completed",
        "payment_method": "card",
        "created_at": iso(-days_ago),
        "memberships": {"name": "basic", "price": 999.0},
    }
    supabase.rows("payments").append(row)
    return row


class TestMe:
    def test_profile(self, client, premium_member):
        row, token = premium_member

        response = client.get(f"{USERS}/me", headers=bearer(token))

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == row["id"]
        assert body["memberships"]["name"] == "premium"

    def test_requires_token(self, client):
        assert client.get(f"{USERS}/me").status_code == 401

    def test_payments_are_scoped_to_caller(self, client, supabase, basic_member, premium_member):
        basic_row, token = basic_member
        premium_row, _ = premium_member
        seed_payment(supabase, basic_row["id"], days_ago=30)
        seed_payment(supabase, basic_row["id"], days_ago=1)
        seed_payment(supabase, premium_row["id"], amount=2999.0)

        response = client.get(f"{USERS}/me/payments", headers=bearer(token))

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 2
        assert all(p["user_id"] == basic_row["id"] for p in body["data"])
        assert [p["id"] for p in body["data"]] == ["pay-2", "pay-1"]

    def test_admin_payments_are_scoped_too(self, client, supabase, admin, basic_member):
        basic_row, _ = basic_member
        _, token = admin
        seed_payment(supabase, basic_row["id"])

        body = client.get(f"{USERS}/me/payments", headers=bearer(token)).json()

        assert body["count"] == 0


class TestAdminUsers:
    def test_list_users(self, client, admin, basic_member, premium_member, viewer):
        _, token = admin

        response = client.get(USERS, headers=bearer(token))

        assert response.status_code == 200
        assert len(response.json()) == 4

    def test_list_filters_and_paging(self, client, admin, basic_member, premium_member, viewer):
        _, token = admin

        members = client.get(USERS, params={"role": "member"}, headers=bearer(token)).json()
        page = client.get(USERS, params={"limit": 2, "offset": 1}, headers=bearer(token)).json()

        assert {u["email"] for u in members} == {"basic@gosave.pk", "premium@gosave.pk"}
        assert len(page) == 2

    def test_list_requires_admin(self, client, basic_member):
        _, token = basic_member
        assert client.get(USERS, headers=bearer(token)).status_code == 403

    def test_promote_viewer(self, client, supabase, admin, viewer):
        _, token = admin
        viewer_row, _ = viewer

        response = client.put(f"{USERS}/{viewer_row['id']}/role", json={"role": "member"}, headers=bearer(token))

        assert response.status_code == 200
        assert response.json()["role"] == "member"

    def test_demote_to_viewer_clears_membership(self, client, supabase, admin, premium_member):
        _, token = admin
        member_row, _ = premium_member

        response = client.put(f"{USERS}/{member_row['id']}/role", json={"role": "viewer"}, headers=bearer(token))

        assert response.status_code == 200
        stored = next(u for u in supabase.rows("users") if u["id"] == member_row["id"])
        assert stored["role"] == "viewer"
        assert stored["membership_id"] is None
        assert stored["membership_valid_until"] is None

    def test_unknown_role_value(self, client, admin, viewer):
        _, token = admin
        viewer_row, _ = viewer

        response = client.put(f"{USERS}/{viewer_row['id']}/role", json={"role": "superuser"}, headers=bearer(token))

        assert response.status_code == 400

    def test_admin_cannot_change_own_role(self, client, admin):
        row, token = admin

        response = client.put(f"{USERS}/{row['id']}/role", json={"role": "viewer"}, headers=bearer(token))

        assert response.status_code == 400

    def test_unknown_user(self, client, admin):
        _, token = admin
        response = client.put(f"{USERS}/missing/role", json={"role": "member"}, headers=bearer(token))
        assert response.status_code == 404

    def test_suspend_user_locks_them_out(self, client, admin, basic_member):
        _, admin_token = admin
        member_row, member_token = basic_member

        response = client.put(
            f"{USERS}/{member_row['id']}/status",
            json={"status": "suspended"},
            headers=bearer(admin_token),
        )

        assert response.status_code == 200
        assert response.json()["status"] == "suspended"
        assert client.get(f"{USERS}/me", headers=bearer(member_token)).status_code == 401
