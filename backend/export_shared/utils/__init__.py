"""
Utility functions for the survey export services
"""

from .app_logger import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
