"""
SimSimi API - a chatbot that learns answers from the people talking to it.

This package is organized by responsibility:
- api/       : FastAPI routes and HTTP handling
- core/      : Configuration, logging, rate limiting and cross-cutting utilities
- services/  : Ask/teach orchestration
- database/  : Response store, interaction log and statistics
- models/    : Pydantic models for request/response schemas
"""
