from fastapi import Request
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required: profile writes and identity cleanup

    # App
    app_name: str = "gosave-backend"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    api_prefix: str = "/api/v1"
    cors_origins: str = "https://gosave-gamma.vercel.app,http://localhost:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    # Deals
    deal_duration_days: int = 30

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",
        extra="ignore"
    )


settings = Settings()


def get_app_settings(request: Request) -> Settings:
    """Settings the running app was built with"""
    return getattr(request.app.state, "settings", settings)
