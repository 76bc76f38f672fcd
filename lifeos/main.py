"""
FastAPI application: routers, middleware and database pool lifecycle.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from lifeos.config import settings
from lifeos.db.pool import db_pool
from lifeos.features.habits.api.router import router as habits_router
from lifeos.features.player.api.router import router as player_router
from lifeos.features.projects.api.router import router as projects_router
from lifeos.features.thoughts.api.router import router as thoughts_router
from lifeos.infrastructure.observability.logging import get_logger, setup_logging
from lifeos.middleware import RequestContextMiddleware
from lifeos.routes import health

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL, json_output=not settings.debug)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database pool on startup and close it on shutdown."""
    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    await db_pool.initialize()
    logger.info("All services initialized successfully", services=["database_pool"])

    yield

    logger.info("Application shutting down")
    try:
        await db_pool.close()
    except Exception as e:
        logger.error("Error closing database pool", error=str(e))
    else:
        logger.info("All services closed successfully")


app = FastAPI(
    title="Life OS",
    description="Personal life OS: thoughts, habit streaks and relationship tiers",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(RequestContextMiddleware)

# Include routers
app.include_router(health.router)
app.include_router(player_router)
app.include_router(habits_router)
app.include_router(thoughts_router)
app.include_router(projects_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
