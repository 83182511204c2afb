"""
API Module for the Capital Code assistant.

FastAPI application with routes for:
- Chat interactions
- Customer registration and conversation history
"""

from .main import create_app, app

__all__ = ["create_app", "app"]
