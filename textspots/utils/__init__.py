"""
Utility modules.

- logger: standard logging configuration
- rich_logger: rich console output and spot tables
"""

from .logger import configure_logging, get_logger, set_log_level

__all__ = ["get_logger", "configure_logging", "set_log_level"]
