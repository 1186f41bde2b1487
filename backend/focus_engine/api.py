"""
Focus Scheduling Engine - FastAPI wrapper
Thin HTTP surface over SchedulingEngine for the UI layer
"""

from contextlib import asynccontextmanager
from datetime import date
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware

from .ai_client import ReasonPhraser
from .config import get_config_summary, get_database_config
from .database import Database
from .engine import SchedulingEngine
from .errors import NoSlotAvailable
from .history import InMemoryHistorySource, PostgresHistorySource
from .logger import logger, setup_logger
from .models import (
    BatchScheduleRequest, BatchScheduleResult, Category, DayOptimization, DayTemplate, HealthStatus,
    ProductivityProfile, ScheduleRequest, ScheduleSuggestion,
)

VERSION = "1.0.0"

setup_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    database = None
    if get_database_config().url:
        database = Database()
        await database.connect()
        history = PostgresHistorySource(database)
        app.state.history_source = "postgres"
    else:
        # Guest mode: nothing persisted, every user starts with an empty history
        history = InMemoryHistorySource()
        app.state.history_source = "memory"

    app.state.engine = SchedulingEngine(history, phraser=ReasonPhraser.from_config())
    logger.info("Scheduling engine started (%s history)", app.state.history_source)
    yield
    if database is not None:
        await database.disconnect()
    logger.info("Scheduling engine shutting down")


app = FastAPI(
    title="Focus Scheduling Engine",
    description="Adaptive time-slot recommendations, auto-placement and day templates",
    version=VERSION,
    lifespan=lifespan
)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_engine(request: Request) -> SchedulingEngine:
    return request.app.state.engine


# ============================================
# HEALTH & STATUS
# ============================================

@app.get("/health", response_model=HealthStatus)
@app.get("/api/health", response_model=HealthStatus)
async def health_check(request: Request, engine: SchedulingEngine = Depends(get_engine)):
    """Check API and collaborator status."""
    return HealthStatus(
        status="healthy",
        version=VERSION,
        history_source=getattr(request.app.state, "history_source", "custom"),
        phrasing="enabled" if engine.phraser is not None else "disabled",
    )


@app.get("/api/config")
async def get_config():
    """Non-secret configuration summary."""
    return get_config_summary()


# ============================================
# PROFILE
# ============================================

@app.get("/api/profile/{user_id}", response_model=ProductivityProfile)
async def get_profile(
    user_id: str,
    window_days: Optional[int] = Query(default=None, ge=1, le=365),
    engine: SchedulingEngine = Depends(get_engine),
):
    return await engine.get_profile(user_id, window_days)


# ============================================
# SCHEDULING
# ============================================

@app.post("/api/schedule/{user_id}", response_model=ScheduleSuggestion)
async def schedule_task(user_id: str, request: ScheduleRequest, engine: SchedulingEngine = Depends(get_engine)):
    """Best slot for one task; 409 when the day has no room for it."""
    try:
        return await engine.schedule_one(user_id, request.task, request.date)
    except NoSlotAvailable as e:
        raise HTTPException(status_code=409, detail=str(e))


@app.post("/api/schedule/{user_id}/batch", response_model=BatchScheduleResult)
async def schedule_tasks(user_id: str, request: BatchScheduleRequest, engine: SchedulingEngine = Depends(get_engine)):
    """Greedy batch placement; tasks that do not fit come back in ``unplaced``."""
    return await engine.schedule_many(user_id, request.tasks, request.date)


@app.get("/api/suggest/{user_id}", response_model=ScheduleSuggestion)
async def suggest_for_category(
    user_id: str,
    category: Category = Query(default=Category.WORK),
    target_date: Optional[date] = Query(default=None, alias="date"),
    engine: SchedulingEngine = Depends(get_engine),
):
    try:
        return await engine.suggest_for_category(user_id, category, target_date)
    except NoSlotAvailable as e:
        raise HTTPException(status_code=409, detail=str(e))


# ============================================
# TEMPLATES
# ============================================

@app.get("/api/template/{user_id}", response_model=DayTemplate)
async def get_day_template(
    user_id: str,
    target_date: Optional[date] = Query(default=None, alias="date"),
    engine: SchedulingEngine = Depends(get_engine),
):
    return await engine.generate_template(user_id, target_date)


# ============================================
# ADVICE
# ============================================

@app.get("/api/optimize/{user_id}", response_model=DayOptimization)
async def optimize_day(
    user_id: str,
    target_date: Optional[date] = Query(default=None, alias="date"),
    engine: SchedulingEngine = Depends(get_engine),
):
    """Advisories for an already planned day."""
    return await engine.optimize_day(user_id, target_date)
