# src/currencies/app.py
"""
Application Entry Point - Composition Root

This module wires the persistence layer for the application: it configures
logging from the settings, opens the Database below the configured data
directory and hands it to callers. Running it as a script logs the cached
state (rate date, last pair, starred currencies, preferences).

Files that USE this module:
- currencies console script (main)

Files that this module USES:
- currencies.shared.logging_conf (setup_logging for logging configuration)
- currencies.config (settings for configuration management)
- currencies.application.database (Database facade)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations for forward references

import logging  # Standard library for logging messages and errors
from typing import Optional  # Type hints for optional values

from currencies.application.database import Database  # Facade over all persistent namespaces
from currencies.config import Settings  # Pydantic settings model
from currencies.shared.logging_conf import setup_logging  # Configure logging with file rotation

logger = logging.getLogger(__name__)


def configure_logging(config: Settings) -> None:
    """Apply the logging part of the settings."""
    setup_logging(
        level=config.log_level_value,
        log_file=config.log_file,
        log_dir=config.log_dir,
        log_to_stdout=config.log_stdout,
        max_bytes=config.log_max_bytes,
        backup_count=config.log_backup_count,
    )


def create_database(config: Optional[Settings] = None) -> Database:
    """
    Open the application database.

    Args:
        config: Settings to use (default: the global settings instance)

    Returns:
        Database with all four namespaces below config.data_dir
    """
    if config is None:
        from currencies.config import settings
        config = settings
    return Database.open(config.data_dir)


def main() -> None:
    """Configure logging, open the database and log what is cached."""
    from currencies.config import settings

    configure_logging(settings)
    database = create_database(settings)

    snapshot = database.get_exchange_rates().value
    if snapshot is None:
        logger.info("No exchange rates cached yet")
    else:
        logger.info("Cached rates: %d entries from %s (base %s)",
                    len(snapshot.rates), snapshot.date, snapshot.base)

    pair = database.get_last_pair()
    logger.info("Last pair: %s -> %s", pair.from_code, pair.to_code)

    starred = database.get_starred_state()
    logger.info("Starred: %s (filter %s)",
                ", ".join(sorted(starred.codes)) or "none",
                "on" if starred.filter_active else "off")

    logger.info("Preferences: %s", database.get_preferences())


if __name__ == "__main__":
    main()
