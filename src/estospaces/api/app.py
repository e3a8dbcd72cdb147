"""
Factory de la aplicación aiohttp.

El cliente de Supabase y el de Zoopla se construyen fuera (una vez por
proceso) y se inyectan acá junto con los servicios que los usan.
"""

import time
from typing import Optional

import structlog
from aiohttp import web

from estospaces.api import properties, users
from estospaces.api.keys import (
    GLOBAL_SEARCH_KEY,
    SEARCH_KEY,
    SECTIONS_KEY,
    SETTINGS_KEY,
    STARTED_AT_KEY,
    SUPABASE_KEY,
)
from estospaces.api.middleware import (
    cors_middleware,
    error_middleware,
    timeout_middleware,
)
from estospaces.config import Settings
from estospaces.database import SupabaseClient
from estospaces.listings import GlobalPropertySearch, PropertySearch, SectionAggregator
from estospaces.providers import ZooplaClient

logger = structlog.get_logger()


def create_app(
    settings: Settings,
    client: Optional[SupabaseClient],
    zoopla: Optional[ZooplaClient] = None,
) -> web.Application:
    """
    Crea la aplicación HTTP.

    Args:
        settings: Configuración del proceso
        client: Cliente de Supabase (None = backend no configurado)
        zoopla: Cliente de Zoopla para la búsqueda global (opcional)
    """
    app = web.Application(
        middlewares=[
            cors_middleware(settings.cors_origin),
            timeout_middleware(settings.request_timeout),
            error_middleware(settings),
        ]
    )

    app[SETTINGS_KEY] = settings
    app[SUPABASE_KEY] = client
    app[SEARCH_KEY] = PropertySearch(client)
    app[SECTIONS_KEY] = SectionAggregator(client)
    app[GLOBAL_SEARCH_KEY] = GlobalPropertySearch(client, zoopla)
    app[STARTED_AT_KEY] = time.monotonic()

    app.add_routes(properties.routes)
    app.add_routes(users.routes)

    if client is None:
        logger.warning("API iniciada sin Supabase: los endpoints responden 'not configured'")

    return app
