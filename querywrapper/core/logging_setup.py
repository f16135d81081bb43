"""
Logging Configuration

The library only creates module loggers; applications that want the
standard format call configure_logging() once at startup.
"""

import logging
from typing import Optional, Union

from querywrapper.core.config import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: Optional[Union[str, int]] = None) -> None:
    """
    Install the root handler and format.

    Args:
        level: Log level name or number. Defaults to the log_level setting.
    """
    if level is None:
        level = get_settings().log_level
    if isinstance(level, str):
        level = level.upper()

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=DATE_FORMAT)
    logging.getLogger("querywrapper").setLevel(level)
