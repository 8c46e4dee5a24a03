"""Application service helpers."""

from .ai_gateway import AIGateway, AIGatewayError
from .storage import DatabaseStorage, InvalidOperationError, NotFoundError, StorageError

__all__ = [
    "AIGateway",
    "AIGatewayError",
    "DatabaseStorage",
    "StorageError",
    "NotFoundError",
    "InvalidOperationError",
]
