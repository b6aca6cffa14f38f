"""
Structured logging for Sepolia Faucet.

JSON logs with timestamp, level, event_type and request context.
Use get_logger() in all modules for aggregation-friendly output.
"""

from sepolia_faucet.faucet_logging.logger import bind_request, get_logger

__all__ = ["bind_request", "get_logger"]
