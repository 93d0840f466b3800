"""Process-wide logging setup."""

import logging

from services.shared.config import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: Settings) -> None:
    """Configure the root logger from settings.

    Safe to call more than once; later calls only adjust the level.

    Args:
        settings: Application settings providing log_level
    """
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    logging.getLogger().setLevel(settings.log_level)
