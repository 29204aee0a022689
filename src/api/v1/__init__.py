"""
API v1 package.

Contains versioned API routes for registration and login.
"""

from src.api.v1.routes import router

__all__ = ["router"]
