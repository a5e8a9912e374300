import logging
import os
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from voyage.config import settings

# ─── Logging setup (file + console) ───
_LOG_DIR = Path(__file__).resolve().parent.parent / "logs"
_LOG_DIR.mkdir(exist_ok=True)

_log_level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)

logging.basicConfig(
    level=_log_level,
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[
        logging.StreamHandler(),
        RotatingFileHandler(
            _LOG_DIR / "voyage.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        ),
    ],
)

# Quiet noisy libraries
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

from voyage.database import init_models
from voyage.rate_limit import limiter
from voyage.routers import (
    agent,
    ai,
    air,
    airports,
    auth,
    destinations,
    flights,
    geo,
    hotels,
    reference,
    trips,
)
from voyage.services.amadeus_client import AmadeusError, amadeus_client
from voyage.services.cache_service import cache_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    await cache_service.init()

    if settings.auto_create_tables:
        try:
            await init_models()
        except Exception as e:
            logger.warning(f"Table creation skipped: {e}")

    scheduler = None
    if settings.scheduler_enabled:
        scheduler = AsyncIOScheduler()

        async def _sweep_cache():
            removed = cache_service.purge_expired()
            if removed:
                logger.debug(f"Cache sweep: {removed} expired entries removed")

        scheduler.add_job(
            _sweep_cache,
            IntervalTrigger(seconds=settings.cache_sweep_interval_seconds),
            id="cache_sweep",
        )
        scheduler.start()
        logger.info("Background scheduler started")

    logger.info(f"Voyage API ready (Amadeus: {settings.amadeus_base_url}, cache: {cache_service.backend})")

    yield

    # Shutdown
    if scheduler:
        scheduler.shutdown(wait=False)
        logger.info("Background scheduler stopped")
    await amadeus_client.close()
    await cache_service.close()


app = FastAPI(
    title="Voyage",
    description="Travel planning API — flights, hotels, destinations and an AI concierge",
    version="0.1.0",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AmadeusError)
async def amadeus_error_handler(request: Request, exc: AmadeusError):
    logger.error(f"{request.method} {request.url.path} failed upstream: {exc}")
    return JSONResponse(status_code=500, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def not_found_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        return JSONResponse(
            status_code=404,
            content={"error": "Not Found", "path": request.url.path, "method": request.method},
        )
    return await http_exception_handler(request, exc)


app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(trips.router, prefix="/api/trips", tags=["trips"])
app.include_router(hotels.router, prefix="/api/hotels", tags=["hotels"])
app.include_router(flights.router, prefix="/api/flights", tags=["flights"])
app.include_router(airports.router, prefix="/api/airports", tags=["airports"])
app.include_router(air.router, prefix="/api/air", tags=["air"])
app.include_router(geo.router, prefix="/api/geo", tags=["geo"])
app.include_router(reference.router, prefix="/api", tags=["reference"])
app.include_router(destinations.router, prefix="/api/destinations", tags=["destinations"])
app.include_router(ai.router, prefix="/api/ai", tags=["ai"])
app.include_router(agent.router, prefix="/api/agent", tags=["agent"])


@app.get("/api/health")
async def health_check():
    return {"ok": True, "service": "voyage", "amadeusBase": settings.amadeus_base_url}
