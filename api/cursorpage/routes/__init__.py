"""API routers."""

from .records import records_router

__all__ = ["records_router"]
