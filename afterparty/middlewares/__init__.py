"""Middlewares package."""

from afterparty.middlewares.database import DatabaseMiddleware
from afterparty.middlewares.auth import AuthMiddleware

__all__ = ["DatabaseMiddleware", "AuthMiddleware"]
