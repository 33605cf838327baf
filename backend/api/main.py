"""FastAPI application for the transit corridor simulator."""

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import corridors, sessions
from pipeline.city_data import DATA_DIR

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: report data location on startup, drop sessions on shutdown."""
    logger.info("City data directory: %s", DATA_DIR)

    yield

    sessions.sessions.clear()


app = FastAPI(
    title="Transit Corridor Simulator",
    description=(
        "API for simulating a day of travel in a city region. Agents follow "
        "age-banded daily schedules over a stop network; recorded stop-to-stop "
        "flow is chained into proposed transit corridors."
    ),
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware - allow localhost origins for development
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:8080",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:8080",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include REST API routers
app.include_router(sessions.router, prefix="/api")
app.include_router(corridors.router, prefix="/api")


@app.get("/api/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {
        "status": "ok",
        "sessions": len(sessions.sessions),
        "data_dir": str(DATA_DIR),
    }
