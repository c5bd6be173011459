"""
Tests for registration compensation and orphan reconciliation.
"""

import pytest

from gosave.core.exceptions import ConflictError, UpstreamError
from gosave.modules.auth.registration import ORPHAN_PENDING, ORPHAN_RESOLVED, RegistrationSaga
from gosave.modules.auth.schemas import RegisterRequest
from supabase_fake import FakeAuthApiError, FakeStorageError, bearer


@pytest.fixture
def saga(supabase):
    return RegistrationSaga(supabase, supabase)


def request_for(email="new@gosave.pk"):
    return RegisterRequest(email=email, password="Passw0rd", full_name="New Member")


class TestCompensation:
    def test_profile_failure_deletes_identity(self, saga, supabase):
        supabase.fail("users", "insert")

        with pytest.raises(UpstreamError) as exc:
            saga.run(request_for())

        assert exc.value.status_code == 500
        assert exc.value.detail == "Failed to create user profile"
        assert "new@gosave.pk" not in supabase.auth.users
        assert len(supabase.auth.admin.deleted) == 1

        [orphan] = supabase.rows("orphaned_identities")
        assert orphan["status"] == ORPHAN_RESOLVED
        assert orphan["email"] == "new@gosave.pk"
        assert orphan["resolved_at"]

    def test_unique_violation_on_profile_is_a_conflict(self, saga, supabase):
        supabase.fail("users", "insert", FakeStorageError("duplicate key value", code="23505"))

        with pytest.raises(ConflictError):
            saga.run(request_for())

        assert "new@gosave.pk" not in supabase.auth.users

    def test_failed_cleanup_stays_pending(self, saga, supabase, caplog):
        supabase.fail("users", "insert")
        supabase.auth.admin.fail_delete = FakeAuthApiError("service unavailable", 503)

        with caplog.at_level("WARNING", logger="gosave.audit"):
            with pytest.raises(UpstreamError):
                saga.run(request_for())

        [orphan] = supabase.rows("orphaned_identities")
        assert orphan["status"] == ORPHAN_PENDING
        assert "new@gosave.pk" in supabase.auth.users
        assert "ORPHANED_IDENTITY" in caplog.text

    def test_delete_is_idempotent(self, saga, supabase):
        record = supabase.auth.create_identity("once@gosave.pk")

        assert saga.delete_identity(record["id"]) is True
        assert saga.delete_identity(record["id"]) is True
        assert supabase.auth.admin.deleted == [record["id"]]

    def test_no_profile_row_survives_a_failed_registration(self, client, supabase):
        supabase.fail("users", "insert")

        response = client.post(
            "/api/v1/register",
            json={"email": "new@gosave.pk", "password": "Passw0rd", "full_name": "New"},
        )

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to create user profile"
        assert supabase.auth.users == {}


class TestReconcile:
    def test_retries_pending_orphans(self, saga, supabase):
        supabase.fail("users", "insert")
        supabase.auth.admin.fail_delete = FakeAuthApiError("service unavailable", 503)
        with pytest.raises(UpstreamError):
            saga.run(request_for("one@gosave.pk"))
        with pytest.raises(UpstreamError):
            saga.run(request_for("two@gosave.pk"))

        supabase.auth.admin.fail_delete = None
        result = saga.reconcile()

        assert result == {"resolved": 2, "pending": 0}
        assert supabase.auth.users == {}
        assert all(o["status"] == ORPHAN_RESOLVED for o in supabase.rows("orphaned_identities"))

    def test_identity_already_gone_counts_as_resolved(self, saga, supabase):
        supabase.rows("orphaned_identities").append({
            "id": "orphan-1",
            "auth_user_id": "missing-auth-user",
            "email": "gone@gosave.pk",
            "status": ORPHAN_PENDING,
            "created_at": "2024-01-01T00:00:00+00:00",
        })

        assert saga.reconcile() == {"resolved": 1, "pending": 0}
        assert supabase.rows("orphaned_identities")[0]["status"] == ORPHAN_RESOLVED

    def test_still_failing_stays_pending(self, saga, supabase):
        record = supabase.auth.create_identity("stuck@gosave.pk")
        supabase.rows("orphaned_identities").append({
            "id": "orphan-2",
            "auth_user_id": record["id"],
            "email": "stuck@gosave.pk",
            "status": ORPHAN_PENDING,
            "created_at": "2024-01-01T00:00:00+00:00",
        })
        supabase.auth.admin.fail_delete = FakeAuthApiError("service unavailable", 503)

        assert saga.reconcile() == {"resolved": 0, "pending": 1}

    def test_admin_endpoint(self, client, supabase, admin):
        _, token = admin
        supabase.rows("orphaned_identities").append({
            "id": "orphan-3",
            "auth_user_id": "missing-auth-user",
            "email": "gone@gosave.pk",
            "status": ORPHAN_PENDING,
            "created_at": "2024-01-01T00:00:00+00:00",
        })

        response = client.post("/api/v1/users/orphaned-identities/reconcile", headers=bearer(token))

        assert response.status_code == 200
        assert response.json()["resolved"] == 1
        assert response.json()["pending"] == 0

    def test_admin_endpoint_requires_admin(self, client, basic_member):
        _, token = basic_member
        response = client.post("/api/v1/users/orphaned-identities/reconcile", headers=bearer(token))
        assert response.status_code == 403
