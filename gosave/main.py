import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from gosave.config import Settings, settings as default_settings
from gosave.database.supabase_client import SupabaseClient
from gosave.modules.auth import routes as auth_routes
from gosave.modules.deals import routes as deals_routes
from gosave.modules.partners import routes as partners_routes
from gosave.modules.users import routes as users_routes

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"X-XSS-Protection", b"1; mode=block"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


class OptionsMiddleware:
    """Answer every OPTIONS request with 200 and headers only.

    Wraps CORSMiddleware. The inner response keeps its CORS headers, which
    are only present for allowed origins; its status and body are replaced.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http" or scope["method"] != "OPTIONS":
            await self.app(scope, receive, send)
            return

        async def send_headers_only(message):
            if message["type"] == "http.response.start":
                headers = [
                    (name, value) for name, value in message.get("headers", [])
                    if name.lower() not in (b"content-length", b"content-type")
                ]
                headers.append((b"content-length", b"0"))
                await send({**message, "status": 200, "headers": headers})
            elif message["type"] == "http.response.body":
                if not message.get("more_body", False):
                    await send({"type": "http.response.body", "body": b""})
            else:
                await send(message)

        await self.app(scope, receive, send_headers_only)


def configure_logging(app_settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, app_settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )


def _describe_validation_error(error: dict) -> str:
    field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    if error.get("type") == "missing":
        return f"{field} is required" if field else "Request body is required"
    cause = (error.get("ctx") or {}).get("error")
    message = str(cause) if cause is not None else error.get("msg", "Invalid value")
    return f"{field}: {message}" if field else message


def create_app(app_settings: Optional[Settings] = None, supabase: Optional[SupabaseClient] = None) -> FastAPI:
    """Build the application. Missing Supabase configuration is fatal here."""
    app_settings = app_settings or default_settings
    configure_logging(app_settings)
    if supabase is None:
        supabase = SupabaseClient.from_settings(app_settings)

    app = FastAPI(
        title=app_settings.app_name,
        version=app_settings.app_version,
        debug=app_settings.debug,
        redirect_slashes=False,
    )
    app.state.settings = app_settings
    app.state.supabase = supabase

    limiter = Limiter(key_func=get_remote_address, default_limits=[app_settings.rate_limit])
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        messages = [_describe_validation_error(err) for err in exc.errors()]
        return JSONResponse(
            status_code=400,
            content={"detail": messages[0] if messages else "Invalid request", "errors": messages},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception: %s", exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.get_cors_origins_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # Outermost, so preflights CORSMiddleware refuses still end as 200
    app.add_middleware(OptionsMiddleware)

    # Include module routes
    app.include_router(auth_routes.router, prefix=app_settings.api_prefix)
    app.include_router(deals_routes.router, prefix=app_settings.api_prefix)
    app.include_router(partners_routes.router, prefix=app_settings.api_prefix)
    app.include_router(users_routes.router, prefix=app_settings.api_prefix)

    @app.on_event("startup")
    async def startup_event():
        logger.info(f"{app_settings.app_name} {app_settings.app_version} starting ({app_settings.environment})")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Application shutdown")

    @app.get("/health")
    @limiter.exempt
    async def health():
        return {
            "message": "GoSave API Health Check - OK!",
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": app_settings.environment,
            "version": app_settings.app_version,
        }

    return app
