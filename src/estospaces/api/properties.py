"""
Endpoints de properties y health check.
"""

import asyncio
import time
from datetime import datetime, timezone

import structlog
from aiohttp import web

from estospaces.api.keys import (
    GLOBAL_SEARCH_KEY,
    SEARCH_KEY,
    SECTIONS_KEY,
    STARTED_AT_KEY,
    SUPABASE_KEY,
)
from estospaces.config import DEFAULT_SECTION_SIZE, MAX_SECTION_SIZE
from estospaces.listings import (
    Err,
    ErrorKind,
    build_property_query,
    normalize_section,
    page_payload,
    section_payload,
)
from estospaces.listings.search import clamp_limit
from estospaces.models import ListingType

logger = structlog.get_logger()

routes = web.RouteTableDef()


@routes.get("/api/health")
async def health(request: web.Request) -> web.Response:
    client = request.app[SUPABASE_KEY]
    check = {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - request.app[STARTED_AT_KEY], 3),
        "backend": "unknown",
    }

    if client is not None:
        try:
            await asyncio.to_thread(client.ping)
            check["backend"] = "connected"
        except Exception as e:
            check["backend"] = "error"
            check["backendError"] = str(e)

    status = 200 if check["backend"] == "connected" else 503
    return web.json_response(check, status=status)


@routes.get("/api/properties")
async def list_properties(request: web.Request) -> web.Response:
    """
    Listado paginado.

    Query params: page, limit, country, city, postcode, type,
    min_price, max_price. Siempre responde {data, error, pagination}.
    """
    try:
        query = build_property_query(request.query)
        logger.info(
            "Request de properties",
            **query.model_dump(exclude_none=True, mode="json"),
        )
        result = await request.app[SEARCH_KEY].search(query)
    except Exception as e:
        logger.error("Error en /api/properties", error=str(e))
        result = Err(ErrorKind.INTERNAL_ERROR, "Internal server error")

    status, body = page_payload(result)
    return web.json_response(body, status=status)


@routes.get("/api/properties/sections")
async def property_section(request: web.Request) -> web.Response:
    """Una sección del dashboard: section, limit, type."""
    section = normalize_section(request.query.get("section"))
    limit = clamp_limit(request.query.get("limit"), DEFAULT_SECTION_SIZE, MAX_SECTION_SIZE)
    listing_type = ListingType.from_param(request.query.get("type"))

    result = await request.app[SECTIONS_KEY].get_section(section, listing_type, limit)
    status, body = section_payload(section, result)
    return web.json_response(body, status=status)


@routes.get("/api/properties/all-sections")
async def all_sections(request: web.Request) -> web.Response:
    """Todas las secciones del dashboard en una sola respuesta."""
    limit = clamp_limit(request.query.get("limit"), DEFAULT_SECTION_SIZE, MAX_SECTION_SIZE)
    listing_type = ListingType.from_param(request.query.get("type"))

    body = await request.app[SECTIONS_KEY].get_all_sections(listing_type, limit)
    return web.json_response(body)


@routes.get("/api/properties/global")
async def global_properties(request: web.Request) -> web.Response:
    """Búsqueda global: Zoopla con fallback a Supabase."""
    result = await request.app[GLOBAL_SEARCH_KEY].search(request.query)
    return web.json_response(result.to_payload(), status=result.status)
