"""Startup checks for the follow-up scheduler."""

from __future__ import annotations

import logging
from zoneinfo import ZoneInfoNotFoundError

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_config
from app.core.exceptions import ConfigurationError
from app.core.logging_config import configure_logging
from app.database.db import get_engine, verify_database_connection
from app.models import Base
from app.scheduling.business_hours import BusinessHoursWindow, default_window

logger = logging.getLogger(__name__)


def load_business_window() -> BusinessHoursWindow:
    """Build the send window once so a bad BUSINESS_TIMEZONE stops the process."""
    try:
        window = default_window()
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Cannot load business window: {exc}") from exc
    if window.start_time >= window.end_time or not window.days:
        raise ConfigurationError("Business window must open before it closes on at least one day.")
    return window


def missing_tables() -> list[str]:
    """Mapped tables that the connected database does not have yet."""
    try:
        existing = set(inspect(get_engine()).get_table_names())
    except SQLAlchemyError as exc:
        logger.warning("startup.schema.inspect_failed: %s", exc, extra={"event": "startup.schema.inspect_failed"})
        return []
    return sorted(name for name in Base.metadata.tables if name not in existing)


def validate_startup_config() -> BusinessHoursWindow:
    config = get_config()
    window = load_business_window()

    if not verify_database_connection():
        if config.DB_CONNECTIVITY_REQUIRED:
            raise RuntimeError("Database connectivity check failed.")
        logger.warning(
            "startup.database.connectivity_optional_failed",
            extra={"event": "startup.database.connectivity_optional_failed"},
        )
    else:
        missing = missing_tables()
        if missing:
            # Not fatal: init_db runs this before migrating.
            logger.warning(
                "startup.schema.missing_tables",
                extra={"event": "startup.schema.missing_tables", "tables": missing},
            )

    logger.info(
        "startup.config.validated",
        extra={
            "event": "startup.config.validated",
            "env": config.ENV,
            "business_timezone": config.BUSINESS_TIMEZONE,
            "dispatch_interval_seconds": config.DISPATCH_INTERVAL_SECONDS,
        },
    )
    return window


def bootstrap() -> None:
    """Initialize logging and validate runtime configuration."""
    configure_logging()
    validate_startup_config()
