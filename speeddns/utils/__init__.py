"""
Utilities package for speeddns.

Exports shared helpers for logging, the log sink and profiling.
Keep this package lightweight and free of domain-specific logic.
"""

from speeddns.utils.log_sink import LogSink, get_log_sink
from speeddns.utils.logging import configure_logging, get_logger
from speeddns.utils.profiler import ProfileStats, profile_block

__all__ = [
    "LogSink",
    "configure_logging",
    "get_log_sink",
    "get_logger",
    "ProfileStats",
    "profile_block",
]
