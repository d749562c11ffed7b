import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shiptrack.config import settings
from shiptrack.database import engine
from shiptrack.middleware.exceptions import register_exception_handlers
from shiptrack.middleware.security import PublicCORSMiddleware, SecurityHeadersMiddleware
from shiptrack.routers import health, quotes, shipments, status_updates, tracking
from shiptrack.utils.redis_client import close_redis

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("shiptrack")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("ShipTrack starting (environment=%s)", settings.environment)
    yield
    await close_redis()
    await engine.dispose()
    logger.info("ShipTrack stopped")


app = FastAPI(
    title="ShipTrack",
    description="Shipment tracking, status updates and quote requests",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware (last added runs first) ───────────────────────
app.add_middleware(SecurityHeadersMiddleware)

# CORS for the admin dashboard
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Any-origin CORS for the embeddable tracking lookup
app.add_middleware(PublicCORSMiddleware, paths=["/api/track"])

# ── Routers ──────────────────────────────────────────────────
# Public
app.include_router(health.router)
app.include_router(tracking.router, prefix="/api/track", tags=["tracking"])
app.include_router(quotes.router, prefix="/api/quotes", tags=["quotes"])

# Admin
app.include_router(status_updates.router, prefix="/api/status-updates", tags=["status-updates"])
app.include_router(shipments.router, prefix="/api/shipments", tags=["shipments"])
