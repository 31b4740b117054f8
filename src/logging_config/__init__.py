"""Structured Logging.

Structured JSON logging, session context binding, and timing of
backend round-trips for the TripManager notification client.
"""

from src.logging_config.config import LogFormat, LoggingConfig, LogLevel
from src.logging_config.context import SessionContext, generate_session_id
from src.logging_config.performance import PerformanceTimer, log_performance
from src.logging_config.setup import configure_logging, get_logger

__all__ = [
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "PerformanceTimer",
    "SessionContext",
    "configure_logging",
    "generate_session_id",
    "get_logger",
    "log_performance",
]
