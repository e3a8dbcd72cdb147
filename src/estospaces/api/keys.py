"""
Claves tipadas del estado de la aplicación aiohttp.

Todo lo que los handlers necesitan se construye una vez en create_app y
se guarda acá; no hay clientes globales.
"""

from typing import Optional

from aiohttp import web

from estospaces.config import Settings
from estospaces.database import SupabaseClient
from estospaces.listings import GlobalPropertySearch, PropertySearch, SectionAggregator

SETTINGS_KEY = web.AppKey("settings", Settings)
SUPABASE_KEY = web.AppKey("supabase", Optional[SupabaseClient])
SEARCH_KEY = web.AppKey("property_search", PropertySearch)
SECTIONS_KEY = web.AppKey("sections", SectionAggregator)
GLOBAL_SEARCH_KEY = web.AppKey("global_search", GlobalPropertySearch)
STARTED_AT_KEY = web.AppKey("started_at", float)
