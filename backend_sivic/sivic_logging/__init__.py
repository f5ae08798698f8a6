"""
Structured logging for Backend Sivic.

JSON logs with timestamp, address, event_type and step context.
Use get_logger() in all modules for aggregation-friendly output.
"""

from backend_sivic.sivic_logging.logger import bind_address, get_logger, short_address

__all__ = ["bind_address", "get_logger", "short_address"]
