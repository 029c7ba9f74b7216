"""Logging utilities for the voicenotes package."""

from .logging_decorator import setup_logging, log_function
from .session_log import SessionLog, LOGGING_LEVELS

__all__ = ["setup_logging", "log_function", "SessionLog", "LOGGING_LEVELS"]
