"""
Core module - Configuration and cross-cutting concerns.

This module provides:
- config.py         : Environment-based configuration management
- logging_config.py : Centralized logging setup
- exceptions.py     : Error hierarchy rendered by the API layer
- rate_limiter.py   : Sliding window limiter keyed by client address
- validators.py     : Question normalization and input checks
"""
from simsimi.core.config import get_settings, Settings
from simsimi.core.logging_config import setup_logging, get_logger, LoggerMixin

__all__ = [
    "get_settings",
    "Settings",
    "setup_logging",
    "get_logger",
    "LoggerMixin",
]
