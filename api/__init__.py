"""
Site Monitor - HTTP API package.
"""

from api.server import ApiServer
from api.middleware import create_cors_middleware, error_middleware

__all__ = [
    "ApiServer",
    "create_cors_middleware",
    "error_middleware",
]
