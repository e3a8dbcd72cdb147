"""
Middlewares de la API: CORS, timeout por request y manejo global de errores.
"""

import asyncio

import structlog
from aiohttp import web

from estospaces.config import Settings

logger = structlog.get_logger()

ALLOWED_METHODS = "GET,HEAD,PUT,PATCH,POST,DELETE"


def cors_middleware(origin: str):
    """CORS con un único origen permitido y credenciales."""

    def apply_headers(response: web.StreamResponse) -> None:
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"
        response.headers["Vary"] = "Origin"

    @web.middleware
    async def middleware(request: web.Request, handler):
        # Preflight
        if (
            request.method == "OPTIONS"
            and "Access-Control-Request-Method" in request.headers
        ):
            response = web.Response(status=204)
            apply_headers(response)
            response.headers["Access-Control-Allow-Methods"] = ALLOWED_METHODS
            requested = request.headers.get("Access-Control-Request-Headers")
            if requested:
                response.headers["Access-Control-Allow-Headers"] = requested
            return response

        try:
            response = await handler(request)
        except web.HTTPException as exc:
            apply_headers(exc)
            raise

        apply_headers(response)
        return response

    return middleware


def timeout_middleware(timeout: float):
    """Corta requests que superan `timeout` segundos con un 504."""

    @web.middleware
    async def middleware(request: web.Request, handler):
        try:
            async with asyncio.timeout(timeout):
                return await handler(request)
        except TimeoutError:
            logger.warning(
                "Request timeout",
                method=request.method,
                path=request.path,
                timeout=timeout,
            )
            return web.json_response(
                {"error": {"message": "Request timeout", "code": "TIMEOUT"}},
                status=504,
            )

    return middleware


def error_middleware(settings: Settings):
    """Convierte excepciones no manejadas en un 500 con forma fija."""

    @web.middleware
    async def middleware(request: web.Request, handler):
        try:
            return await handler(request)
        except web.HTTPException:
            raise
        except Exception as e:
            logger.error(
                "Error no manejado",
                method=request.method,
                path=request.path,
                error=str(e),
                exc_info=True,
            )
            error = {"message": "Internal server error", "code": "INTERNAL_ERROR"}
            if settings.is_development:
                error["details"] = str(e)
            return web.json_response({"error": error}, status=500)

    return middleware
