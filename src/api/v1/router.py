from fastapi import APIRouter
from loguru import logger

from src.api.v1.endpoints import scoreboard, sessions, settlement

logger.info("Initializing API v1 router")
api_router = APIRouter(prefix="/api/v1")

logger.debug("Registering settlement endpoint")
api_router.include_router(settlement.router, prefix="/settlement", tags=["settlement"])
logger.debug("Registering sessions endpoint")
api_router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
logger.debug("Registering scoreboard endpoint")
api_router.include_router(scoreboard.router, prefix="/scoreboard", tags=["scoreboard"])
logger.success("API v1 router initialized successfully")
