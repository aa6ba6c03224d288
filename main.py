"""GutTrack API application entry point."""

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()  # load .env before anything reads os.getenv()

from fastapi import FastAPI

from app.api.routes import analytics_router, health_router, observations_router, trends_router
from app.services.database import DATABASE_URL, create_tables

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the observation tables at startup."""
    await create_tables()
    logger.info("SQLite database ready at %s", DATABASE_URL)

    yield

    logger.info("GutTrack API stopped")


app = FastAPI(
    title="GutTrack API",
    description=(
        "Gut-health tracker API: stores stool observations and serves "
        "daily / weekly trends with a composite health score."
    ),
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(observations_router)
app.include_router(trends_router)
app.include_router(analytics_router)
