"""
============================================================================
SITE MONITOR - API MIDDLEWARE
============================================================================
cors_middleware   — CORS headers on every response, OPTIONS short-circuit
error_middleware  — unhandled handler exceptions become a plain 500
============================================================================
"""

from typing import Awaitable, Callable, Dict

from aiohttp import web

from config.constants import Defaults
from config.settings import ServerSettings
from utils.logger import get_logger


logger = get_logger("ApiServer")

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def cors_headers(settings: ServerSettings) -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": settings.cors_allow_origin,
        "Access-Control-Allow-Methods": settings.cors_allow_methods,
        "Access-Control-Allow-Headers": settings.cors_allow_headers,
    }


def create_cors_middleware(settings: ServerSettings):
    """Build the CORS middleware for the configured origins/methods/headers."""
    headers = cors_headers(settings)

    @web.middleware
    async def cors_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
        # Preflight requests are answered before routing
        if request.method == "OPTIONS":
            return web.Response(status=200, headers=headers)

        try:
            response = await handler(request)
        except web.HTTPException as exc:
            exc.headers.update(headers)
            raise

        response.headers.update(headers)
        return response

    return cors_middleware


@web.middleware
async def error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Turn any unexpected exception from a handler into a 500 response."""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception as e:
        logger.opt(exception=e).error(
            f"⚠️ Unhandled error in {request.method} {request.path}: {e}"
        )
        return web.Response(status=500, text=Defaults.INTERNAL_ERROR_TEXT)
