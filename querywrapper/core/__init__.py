"""
Core

Settings and logging setup.
"""

from querywrapper.core.config import Settings, get_settings, reset_settings
from querywrapper.core.logging_setup import configure_logging

__all__ = ["Settings", "get_settings", "reset_settings", "configure_logging"]
