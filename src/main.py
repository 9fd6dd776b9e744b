"""FastAPI application for the chip ledger settlement and scoreboard service."""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from src.api.v1.router import api_router
from src.core.config import ADMIN_USER_IDS, CORS_ORIGINS, GEMINI_API_KEY
from src.core.db import create_db_and_tables
from src.core.error_handlers import register_exception_handlers
from src.core.logging_config import configure_logging


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncGenerator[None, None]:
    """Configure logging and make sure the tables exist before serving."""
    configure_logging()
    logger.info("Starting chip ledger application...")
    create_db_and_tables()
    if not ADMIN_USER_IDS:
        logger.warning("ADMIN_USER_IDS is empty: the public board is read-only")
    if not GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY is not set: commentary generation is disabled")
    await asyncio.sleep(0)  # Satisfy RUF029 (async function must await)
    logger.success("Application startup complete")
    yield
    logger.info("Shutting down chip ledger application...")


app = FastAPI(
    title="Chip Ledger",
    description="Settle home poker sessions and track players on shared scoreboards.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)
app.include_router(api_router)


@app.get("/")
def read_root() -> dict[str, str]:
    logger.debug("Root endpoint accessed")
    return {"message": "Welcome to the chip ledger API"}
