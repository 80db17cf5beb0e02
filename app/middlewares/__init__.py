"""Starlette middlewares for the campaign kit service."""
from __future__ import annotations

from app.middlewares.body_guard import BodyGuardMiddleware

__all__ = ["BodyGuardMiddleware"]
