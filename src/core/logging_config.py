"""Logging configuration for the chip ledger service."""

from pathlib import Path
import sys

from loguru import logger

from src.core.config import LOG_DIR, LOG_LEVEL


def configure_logging() -> None:
    """Configure loguru logger with console and rotating file output."""
    logs_dir = Path(LOG_DIR)
    logs_dir.mkdir(exist_ok=True)

    # Remove default handler (console only)
    logger.remove()

    logger.add(
        sink=sys.stdout,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=LOG_LEVEL,
        colorize=True,
    )

    logger.add(
        sink=logs_dir / "chip_ledger_{time:YYYY-MM-DD}.log",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        level=LOG_LEVEL,
        rotation="00:00",  # Rotate at midnight
        retention="30 days",
        compression="zip",
        enqueue=True,  # Thread-safe logging
    )

    # Settlement and storage failures are kept longer
    logger.add(
        sink=logs_dir / "chip_ledger_errors_{time:YYYY-MM-DD}.log",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        level="ERROR",
        rotation="00:00",
        retention="90 days",
        compression="zip",
        enqueue=True,
    )

    logger.info(f"Logging configured: console + file output in {logs_dir}/")
