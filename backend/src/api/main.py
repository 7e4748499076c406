"""FastAPI application main entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from .middleware import register_error_handlers  # noqa: E402
from .routes import concept_map, notes  # noqa: E402
from ..services.config import get_config  # noqa: E402
from ..services.seed import init_and_seed  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler to run startup tasks."""
    logger.info("Running startup: seeding demo vault...")
    try:
        init_and_seed()
        logger.info("Startup complete")
    except OSError as exc:
        logger.exception("Startup failed: %s", exc)
        logger.error("App starting without demo data due to initialization error")
    yield


app = FastAPI(
    title="Concept Map API",
    description="Clustered concept maps over a personal note vault",
    version="0.1.0",
    lifespan=lifespan,
)

config = get_config()

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://localhost:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(notes.router, tags=["notes"])
app.include_router(concept_map.router, tags=["concept-map"])


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "canvas": [config.canvas_width, config.canvas_height]}


__all__ = ["app"]
