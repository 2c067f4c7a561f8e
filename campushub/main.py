from fastapi import FastAPI, Request, APIRouter
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from campushub.api.v1.routes import (
    auth as auth_router,
    events as events_router,
    rsvps as rsvps_router,
    health as health_router,
)
from campushub.db.session import engine, Base
from campushub.cache.redis_client import cache
from campushub.core.config import settings
from campushub.core.exceptions import CampusHubError, ConflictRetryable
from campushub.core.logging import logger
from campushub.middleware.security_headers import SecurityHeadersMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

app = FastAPI(title="CampusHub")

# Rate limiter shared with the RSVP routes
app.state.limiter = rsvps_router.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(SecurityHeadersMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CampusHubError)
async def campushub_error_handler(request: Request, exc: CampusHubError):
    """Map domain errors onto HTTP responses."""
    headers = None
    if isinstance(exc, ConflictRetryable):
        headers = {"Retry-After": "1"}
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.detail}")
    else:
        logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "retryable": exc.retryable},
        headers=headers,
    )


api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth_router.router)
api_router.include_router(events_router.router)
api_router.include_router(rsvps_router.router)
api_router.include_router(health_router.router)

app.include_router(api_router)


@app.on_event("startup")
async def on_startup():
    # Alembic owns the schema outside development
    if settings.ENVIRONMENT == "development":
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    logger.info(f"CampusHub started ({settings.ENVIRONMENT})")


@app.on_event("shutdown")
async def on_shutdown():
    await cache.close()
    await engine.dispose()
