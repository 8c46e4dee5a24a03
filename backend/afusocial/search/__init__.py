"""Search service interfaces."""

from .service import SearchService

__all__ = ["SearchService"]
