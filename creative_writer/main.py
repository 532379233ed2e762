"""FastAPI application for the Creative Writer AI backend."""
from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import get_settings
from .database import init_db
from .generation.router import router as generation_router
from .generation.service import get_generation_service
from .utils.logging import configure_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = configure_logging(get_settings().log_level)
    init_db()
    yield
    aborted = get_generation_service().abort_all()
    if aborted:
        logger.info("Aborted %s in-flight generation request(s) on shutdown", aborted)


app = FastAPI(title="Creative Writer AI", version=__version__, lifespan=lifespan)

app.include_router(generation_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
