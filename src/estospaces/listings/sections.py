"""
Agregador de secciones del dashboard.

Cada sección es una consulta predefinida sobre properties (más vistas,
tendencia, recientes, alta demanda, destacadas, discovery). El dashboard
completo las ejecuta en paralelo: si una falla, esa sección queda vacía y
las demás se devuelven igual.
"""

import asyncio
from datetime import datetime, timezone
from typing import Callable, Optional

import structlog

from estospaces.config import (
    DEFAULT_SECTION,
    DEFAULT_SECTION_SIZE,
    MAX_SECTION_SIZE,
    SECTIONS,
)
from estospaces.database import PropertyRepository, SupabaseClient
from estospaces.exceptions import ConfigurationError
from estospaces.listings.results import Ok, Result, error_from_exception
from estospaces.models import ListingType

logger = structlog.get_logger()

# Sección -> clave en la respuesta de all-sections
SECTION_KEYS = {
    "most_viewed": "mostViewed",
    "trending": "trending",
    "recently_added": "recentlyAdded",
    "high_demand": "highDemand",
    "featured": "featured",
}

DISCOVERY_KEY = "discovery"


def normalize_section(value: Optional[str]) -> str:
    """Secciones desconocidas o vacías caen en discovery."""
    value = (value or "").strip().lower()
    return value if value in SECTIONS else DEFAULT_SECTION


def empty_sections() -> dict:
    """Respuesta de all-sections con todas las listas vacías."""
    return {key: [] for key in [*SECTION_KEYS.values(), DISCOVERY_KEY]}


class SectionAggregator:
    """Consultas de secciones sobre properties."""

    def __init__(self, client: Optional[SupabaseClient]):
        self.repo = PropertyRepository(client) if client else None

    async def get_section(
        self,
        section: str,
        listing_type: Optional[ListingType] = None,
        limit: int = DEFAULT_SECTION_SIZE,
    ) -> Result:
        """Una sección individual."""
        if self.repo is None:
            return error_from_exception(ConfigurationError())

        limit = min(limit, MAX_SECTION_SIZE)
        try:
            rows = await asyncio.to_thread(
                self.repo.get_section, section, listing_type, limit
            )
        except Exception as e:
            logger.error(
                "Error obteniendo sección",
                section=section,
                error=str(e),
            )
            return error_from_exception(e, query_failed_message=str(e))

        return Ok(data=rows)

    async def get_all_sections(
        self,
        listing_type: Optional[ListingType] = None,
        limit: int = DEFAULT_SECTION_SIZE,
    ) -> dict:
        """
        Todas las secciones en paralelo más el feed de discovery.

        Returns:
            Dict con mostViewed, trending, recentlyAdded, highDemand,
            featured y discovery. Sin backend configurado todas vacías
            y una clave `error`.
        """
        if self.repo is None:
            err = error_from_exception(ConfigurationError())
            return {**empty_sections(), "error": err.to_error_dict()}

        limit = min(limit, MAX_SECTION_SIZE)
        now = datetime.now(timezone.utc)

        async with asyncio.TaskGroup() as tg:
            tasks = {
                key: tg.create_task(
                    self._fetch_or_empty(
                        key, self.repo.get_section, section, listing_type, limit, now
                    )
                )
                for section, key in SECTION_KEYS.items()
            }
            tasks[DISCOVERY_KEY] = tg.create_task(
                self._fetch_or_empty(
                    DISCOVERY_KEY, self.repo.get_discovery_feed, listing_type
                )
            )

        sections = {key: task.result() for key, task in tasks.items()}
        logger.debug(
            "Secciones obtenidas",
            **{key: len(rows) for key, rows in sections.items()},
        )
        return sections

    async def _fetch_or_empty(self, key: str, fetch: Callable, *args) -> list[dict]:
        """Ejecuta una consulta; si falla, la sección queda vacía."""
        try:
            return await asyncio.to_thread(fetch, *args)
        except Exception as e:
            logger.warning(
                "Sección vacía por error",
                section=key,
                error=str(e),
            )
            return []


def section_payload(section: str, result: Result) -> tuple[int, dict]:
    """
    Serializa el resultado de una sección.

    Los errores también responden 200 con la lista vacía para que el
    dashboard nunca quede bloqueado.
    """
    if isinstance(result, Ok):
        return 200, {"data": result.data, "section": section, "count": len(result.data)}

    return 200, {
        "data": [],
        "section": section,
        "error": {"message": result.message},
    }
