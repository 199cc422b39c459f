import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from app.config import settings
from app.database.supabase_client import SupabaseClient
from app.modules.user_admin import routes as user_admin_routes
from app.modules.user_admin.schemas import ActionResult

API_PREFIX = "/api/v1"

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Admin callers always get an ActionResult body, even for faults outside an action."""
    logger.exception("Unhandled exception on %s %s: %s", request.method, request.url.path, exc)
    error = "Internal server error" if settings.is_production else str(exc)
    if request.url.path.startswith(f"{API_PREFIX}/admin/"):
        body = ActionResult.failed("An unexpected error occurred", error)
        return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))
    return JSONResponse(status_code=500, content={"detail": error})


SECURITY_HEADERS = [
    (b"X-Content-Type-Options", b"nosniff"),
    (b"X-Frame-Options", b"DENY"),
    (b"Referrer-Policy", b"no-referrer"),
    (b"Cache-Control", b"no-store"),  # admin responses carry user emails
]


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
                message["headers"].extend(SECURITY_HEADERS)
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include module routes
app.include_router(user_admin_routes.router, prefix=API_PREFIX)


@app.on_event("startup")
async def startup_event():
    logger.info(f"{settings.app_name} starting ({settings.environment}); auth redirects target {settings.site_url}")
    if not settings.supabase_service_role_key:
        logger.warning("SUPABASE_SERVICE_ROLE_KEY is not set; admin actions will return 500")


@app.on_event("shutdown")
async def shutdown_event():
    SupabaseClient.reset_client()
    logger.info(f"{settings.app_name} stopped; Supabase clients released")


@app.get("/")
async def root():
    return {
        "service": settings.app_name,
        "admin_api": f"{API_PREFIX}{user_admin_routes.router.prefix}",
        "status": "healthy",
    }


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness probe: admin actions need the service-role key."""
    if not settings.supabase_service_role_key:
        return JSONResponse(status_code=503, content={"status": "not ready"})
    return {"status": "ready"}
