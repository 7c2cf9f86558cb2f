"""
API package - HTTP routers
"""

from .endpoints import router

__all__ = ["router"]
