"""
Main FastAPI application for the Court Vision API.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from court_vision.core.config import settings
from court_vision.core.database import SessionLocal, init_db
from court_vision.core.logging import configure_logging, get_logger
from court_vision.core.middleware import CorrelationIdMiddleware
from court_vision.core import metrics
from court_vision.api.routes import analytics, games, players, plays, sync, tags, teams

# Load environment variables from .env file
from dotenv import load_dotenv
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

configure_logging(level=settings.LOG_LEVEL, json_output=settings.LOG_JSON)
logger = get_logger(__name__)


def get_rate_limit_key(request: Request) -> str:
    """
    Get the rate limit key for a request.

    Uses IP address, with fallback to X-Forwarded-For for proxied requests.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


limiter = Limiter(
    key_func=get_rate_limit_key,
    default_limits=["60/minute"],
    storage_uri=settings.REDIS_URL if settings.RATE_LIMIT_STORAGE == "redis" else "memory://",
    enabled=settings.RATE_LIMIT_ENABLED
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan events."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    init_db()

    if settings.SCHEDULER_ENABLED:
        from court_vision.core.scheduler import start_scheduler
        await start_scheduler()
        logger.info("Sync scheduler started")
    metrics.update_scheduler_metrics()

    logger.info("Application started")

    yield

    if settings.SCHEDULER_ENABLED:
        from court_vision.core.scheduler import stop_scheduler
        await stop_scheduler()
        logger.info("Sync scheduler stopped")
    logger.info("Shutting down application")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Basketball play tagging, pattern analytics and game analysis backed by ESPN data",
    lifespan=lifespan
)
app.state.limiter = limiter


# ============================================================================
# ERROR ENVELOPE
# ============================================================================
# Every error leaves the API as {"success": false, "error": "<message>"}.

def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{location}: {first.get('msg')}" if location else str(first.get("msg", "Invalid request"))
    return error_response(400, message)


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return error_response(500, "Internal server error")


@app.exception_handler(RateLimitExceeded)
async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded):
    return error_response(429, f"Rate limit exceeded: {exc.detail}")


app.add_middleware(CorrelationIdMiddleware)

# Prometheus metrics must be registered before the routers
instrumentator = Instrumentator()
instrumentator.instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)
logger.info("Prometheus metrics initialized at /metrics")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers carry their own /api/... prefixes
app.include_router(games.router)
app.include_router(players.router)
app.include_router(teams.router)
app.include_router(tags.router)
app.include_router(plays.router)
app.include_router(analytics.router)
app.include_router(sync.router)


@app.get("/")
@limiter.limit("60/minute")
async def root(request: Request):
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "endpoints": {
            "games": "/api/games",
            "players": "/api/players",
            "teams": "/api/teams",
            "tags": "/api/tags",
            "quick_actions": "/api/tags/quick-actions",
            "plays": "/api/plays",
            "analytics": "/api/analytics",
            "sync": "/api/sync/status",
            "docs": "/docs",
            "health": "/health",
            "metrics": "/metrics"
        }
    }


@app.get("/health")
@limiter.limit("120/minute")  # Higher limit for health checks
async def health_check(request: Request):
    """Health check with database connectivity and scheduler state."""
    components = {}
    healthy = True

    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        components["database"] = {"status": "connected"}
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        components["database"] = {"status": "unhealthy", "error": str(e)}
        healthy = False
    finally:
        db.close()

    from court_vision.core.scheduler import get_scheduler
    scheduler = get_scheduler()
    components["scheduler"] = {
        "status": "running" if scheduler and scheduler.running else "stopped",
        "enabled": settings.SCHEDULER_ENABLED,
    }
    metrics.update_scheduler_metrics()

    components["openai"] = {"status": "configured" if settings.openai_enabled else "fallback"}

    body = {
        "status": "healthy" if healthy else "unhealthy",
        "version": settings.APP_VERSION,
        "components": components
    }
    return JSONResponse(status_code=200 if healthy else 503, content=body)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "court_vision.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development()
    )
