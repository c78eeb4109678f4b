"""
API module - FastAPI routes and HTTP handling.

This module handles:
- Request parsing and rate limiting
- Response formatting
- Error handling
- Route definitions
"""
from simsimi.api.main import create_app

__all__ = ["create_app"]
