"""
FastAPI app entrypoint.

Swipe -> match -> conversation. Side effects (notifications, realtime, push) run on a
small worker pool so a slow APNs call never holds a request.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from apscheduler.schedulers.background import BackgroundScheduler
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load .env from backend/ before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from swapshop.api.routes import conversations, garments, matches, notifications, push, realtime, swipes, users
from swapshop.config import settings
from swapshop.core.constants import (
    MATCH_EXPIRY_INTERVAL_MINUTES,
    MATCH_EXPIRY_JOB_ID,
    NOTIFICATION_RETENTION_JOB_ID,
)
from swapshop.core.errors import register_error_handlers
from swapshop.core.marketplace_config import SIDE_EFFECT_WORKERS, get_marketplace_config
from swapshop.db.session import SessionLocal
from swapshop.scheduler.match_expiry_job import run_match_expiry_job
from swapshop.scheduler.notification_retention_job import run_notification_retention_job
from swapshop.services.dispatcher import SideEffectDispatcher
from swapshop.services.notification_service import NotificationSink
from swapshop.services.realtime import RealtimeHub

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

_scheduler = BackgroundScheduler()


@asynccontextmanager
async def lifespan(app: FastAPI):
    dispatcher = SideEffectDispatcher(max_workers=SIDE_EFFECT_WORKERS)
    hub = RealtimeHub()
    hub.bind_loop(asyncio.get_running_loop())
    app.state.dispatcher = dispatcher
    app.state.hub = hub
    app.state.session_factory = SessionLocal
    app.state.notifier = NotificationSink(SessionLocal, dispatcher, hub=hub)

    _scheduler.add_job(
        run_match_expiry_job,
        "interval",
        minutes=MATCH_EXPIRY_INTERVAL_MINUTES,
        id=MATCH_EXPIRY_JOB_ID,
    )
    _scheduler.add_job(
        run_notification_retention_job,
        "cron",
        hour=4,
        minute=15,
        id=NOTIFICATION_RETENTION_JOB_ID,
    )
    _scheduler.start()
    app.state.scheduler = _scheduler
    logger.info("Backend ready (side-effect workers=%s)", SIDE_EFFECT_WORKERS)
    yield
    _scheduler.shutdown(wait=False)
    dispatcher.shutdown(wait=True)
    await hub.close()


app = FastAPI(title="SwapShop", version="0.1.0", lifespan=lifespan)

# CORS: dev origins + optional CORS_ORIGINS env (comma-separated) for the production frontend
_cors_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:8081",
]
_cors_origins.extend(settings.extra_cors_origins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(users.router, prefix="/users", tags=["users"])
app.include_router(garments.router, prefix="/garments", tags=["garments"])
app.include_router(swipes.router, prefix="/swipes", tags=["swipes"])
app.include_router(matches.router, prefix="/matches", tags=["matches"])
app.include_router(conversations.router, prefix="/conversations", tags=["conversations"])
app.include_router(notifications.router, tags=["notifications"])
app.include_router(push.router, tags=["push"])
app.include_router(realtime.router, tags=["realtime"])


@app.get("/", include_in_schema=False)
def root():
    """Root: point to API docs and health."""
    return {"message": "SwapShop API", "docs": "/docs", "health": "/health"}


@app.get("/health")
def health() -> dict:
    cfg = get_marketplace_config()
    return {
        "status": "ok",
        "undo_window_seconds": cfg.undo_window_seconds,
        "daily_super_like_limit": cfg.daily_super_like_limit,
    }
