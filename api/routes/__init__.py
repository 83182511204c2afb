"""
API Routes for the Capital Code assistant.
"""

from . import chat, customers, system

__all__ = ["chat", "customers", "system"]
