from fastapi import Request
from supabase import create_client, Client
from gosave.config.settings import Settings
from gosave.core.exceptions import ConfigurationError


class SupabaseClient:
    """Clients for one application instance, built by the app factory.

    ``client`` uses the anon key and is used for the auth flows (sign up,
    sign in). ``service_client`` uses the service_role key; it bypasses RLS
    and runs every table query plus the auth admin API.
    """

    def __init__(self, client: Client, service_client: Client):
        self.client = client
        self.service_client = service_client

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseClient":
        missing = [
            name for name, value in (
                ("SUPABASE_URL", settings.supabase_url),
                ("SUPABASE_ANON_KEY", settings.supabase_anon_key),
                ("SUPABASE_SERVICE_ROLE_KEY", settings.supabase_service_role_key),
            ) if not value
        ]
        if missing:
            raise ConfigurationError(f"Missing Supabase configuration: {', '.join(missing)}")
        return cls(
            client=create_client(settings.supabase_url, settings.supabase_anon_key),
            service_client=create_client(settings.supabase_url, settings.supabase_service_role_key),
        )


def get_clients(request: Request) -> SupabaseClient:
    return request.app.state.supabase


def get_supabase(request: Request) -> Client:
    return get_clients(request).service_client


def get_auth_client(request: Request) -> Client:
    return get_clients(request).client
