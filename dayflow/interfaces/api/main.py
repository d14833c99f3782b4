"""
FastAPI application for the Dayflow UI.

Exposes the gamification mutation API (tracking, XP, weekly pass)
to the task/habit/Pomodoro screens.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from tortoise import Tortoise

from dayflow.config import config
from dayflow.core.domain.achievements import CATALOG
from dayflow.core.errors import PersistenceError
from dayflow.database.config import TORTOISE_ORM
from dayflow.interfaces.api.messages import PERSISTENCE_FAILED
from dayflow.interfaces.api.routers import progression, session, weekly_pass
from dayflow.services import sessions

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await Tortoise.init(config=TORTOISE_ORM)
    await Tortoise.generate_schemas()
    logger.info("Database initialized")
    yield
    sessions.reset()
    await Tortoise.close_connections()
    logger.info("Database connections closed")


app = FastAPI(
    title="Dayflow API",
    description="Gamification API for the Dayflow tracker",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# CORS configuration
# AICODE-NOTE: localhost for dev, CORS_ORIGINS for deployed frontends
cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    *config.CORS_ORIGINS,
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(progression.router)
app.include_router(weekly_pass.router)
app.include_router(session.router)


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    """Nothing was committed, so the client can simply retry."""
    logger.error(f"Persistence failure on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": {"reason": "persistence_failed", "message": PERSISTENCE_FAILED}},
    )


@app.get("/api/health")
async def api_health():
    """API health check endpoint."""
    return {
        "status": "ok",
        "service": "dayflow-api",
        "sessions": sessions.active_sessions(),
    }


@app.get("/api/achievements")
async def list_achievements():
    """Static achievement catalog."""
    return [
        {
            "id": a.id,
            "name": a.name,
            "description": a.description,
            "icon": a.icon,
            "xp": a.xp,
        }
        for a in CATALOG
    ]
