import os
import sys
from datetime import datetime

import pytest_asyncio
from tortoise import Tortoise

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Monday 2025-03-10, 10:00 local time
MONDAY = datetime(2025, 3, 10, 10, 0)


@pytest_asyncio.fixture(scope="function")
async def db() -> None:
    """Lightweight in-memory DB per test."""
    await Tortoise.init(
        db_url="sqlite://:memory:", modules={"models": ["dayflow.database.models"]}
    )
    await Tortoise.generate_schemas()
    yield
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def service(db):
    """Fresh gamification service for a new user."""
    from dayflow.core.use_cases.gamification import GamificationService

    return await GamificationService.load("user-1", clock=lambda: MONDAY)
