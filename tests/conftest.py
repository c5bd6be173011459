"""
Shared fixtures: an in-memory Supabase double injected into a fresh app.
"""

import pytest
from fastapi.testclient import TestClient

from gosave.config.settings import Settings
from gosave.database.supabase_client import SupabaseClient
from gosave.main import create_app
from supabase_fake import FakeSupabase


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        supabase_url="https://gosave-test.supabase.co",
        supabase_anon_key="anon-key",
        supabase_service_role_key="service-role-key",
        environment="test",
        rate_limit="1000/minute",
        cors_origins="https://gosave-gamma.vercel.app",
    )


@pytest.fixture
def supabase():
    return FakeSupabase()


@pytest.fixture
def app(settings, supabase):
    return create_app(settings, SupabaseClient(client=supabase, service_client=supabase))


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin(supabase):
    return supabase.add_user("admin@gosave.pk", role="admin")


@pytest.fixture
def basic_member(supabase):
    return supabase.add_user("basic@gosave.pk", role="member", tier="basic")


@pytest.fixture
def premium_member(supabase):
    return supabase.add_user("premium@gosave.pk", role="member", tier="premium")


@pytest.fixture
def viewer(supabase):
    return supabase.add_user("viewer@gosave.pk", role="viewer")
