"""
Búsqueda global de properties.

Intenta primero Zoopla (si hay API key y ubicación) y, si no hay
resultados o el proveedor falla, cae a la tabla properties de Supabase
restringida a UK.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Mapping, Optional

import structlog

from estospaces.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from estospaces.database import PropertyRepository, SupabaseClient
from estospaces.exceptions import QueryError
from estospaces.listings.search import (
    clamp_limit,
    parse_float,
    parse_optional_int,
    parse_positive_int,
)
from estospaces.models import ListingType, Pagination, PropertyQuery
from estospaces.providers import ZooplaClient, ZooplaSearch

logger = structlog.get_logger()

FALLBACK_COUNTRY = "UK"


@dataclass
class GlobalSearchResult:
    """Respuesta de la búsqueda global."""

    source: str
    page: int
    properties: list[dict] = field(default_factory=list)
    total_results: int = 0
    total_pages: int = 0
    fallback_used: bool = True
    error: Optional[dict] = None
    status: int = 200

    def to_payload(self) -> dict:
        return {
            "source": self.source,
            "properties": self.properties,
            "totalResults": self.total_results,
            "page": self.page,
            "totalPages": self.total_pages,
            "fallbackUsed": self.fallback_used,
            "error": self.error,
        }


class GlobalPropertySearch:
    """Zoopla con fallback a Supabase."""

    def __init__(
        self,
        client: Optional[SupabaseClient],
        zoopla: Optional[ZooplaClient] = None,
    ):
        self.repo = PropertyRepository(client) if client else None
        self.zoopla = zoopla

    async def search(self, params: Mapping[str, str]) -> GlobalSearchResult:
        page = parse_positive_int(params.get("page"), 1)
        limit = clamp_limit(params.get("limit"), DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE)
        listing_type = ListingType.from_param(params.get("type"))

        try:
            if self.zoopla:
                result = await self._search_zoopla(params, listing_type, page, limit)
                if result is not None:
                    return result
            else:
                logger.debug("Sin API key de Zoopla, usando fallback de Supabase")

            return await self._search_supabase(params, listing_type, page, limit)
        except Exception as e:
            logger.error("Error en búsqueda global", error=str(e))
            return GlobalSearchResult(
                source="error",
                page=1,
                error={"message": "Internal server error", "code": "INTERNAL_ERROR"},
                status=500,
            )

    async def _search_zoopla(
        self,
        params: Mapping[str, str],
        listing_type: Optional[ListingType],
        page: int,
        limit: int,
    ) -> Optional[GlobalSearchResult]:
        """Resultado de Zoopla, o None si hay que usar el fallback."""
        search = ZooplaSearch(
            postcode=(params.get("postcode") or "").strip() or None,
            latitude=parse_float(params.get("lat")),
            longitude=parse_float(params.get("lng")),
            radius=parse_float(params.get("radius")) or 5.0,
            listing_status=listing_type.value if listing_type else "both",
            min_price=parse_float(params.get("min_price")),
            max_price=parse_float(params.get("max_price")),
            min_bedrooms=parse_optional_int(params.get("bedrooms")),
            page=page,
            page_size=limit,
        )

        try:
            results = await self.zoopla.search(search)
        except Exception as e:
            logger.warning("Zoopla falló, usando fallback de Supabase", error=str(e))
            return None

        properties = [p for p in results.properties if p.is_visible]
        if not properties:
            return None

        return GlobalSearchResult(
            source="zoopla",
            page=results.page,
            properties=[p.to_response_dict() for p in properties],
            total_results=results.total_results,
            total_pages=results.total_pages,
            fallback_used=False,
        )

    async def _search_supabase(
        self,
        params: Mapping[str, str],
        listing_type: Optional[ListingType],
        page: int,
        limit: int,
    ) -> GlobalSearchResult:
        if self.repo is None:
            return GlobalSearchResult(
                source="supabase",
                page=page,
                error={"message": "Supabase not configured", "code": "NOT_CONFIGURED"},
                status=500,
            )

        query = PropertyQuery(
            page=page,
            limit=limit,
            country=FALLBACK_COUNTRY,
            city=(params.get("city") or "").strip() or None,
            postcode=(params.get("postcode") or "").strip() or None,
            listing_type=listing_type,
            min_price=parse_float(params.get("min_price")),
            max_price=parse_float(params.get("max_price")),
            bedrooms=parse_optional_int(params.get("bedrooms")),
        )

        try:
            rows, total = await asyncio.to_thread(self.repo.search, query)
        except QueryError as e:
            logger.error("Error en fallback de Supabase", error=e.message)
            return GlobalSearchResult(
                source="supabase",
                page=page,
                error={
                    "message": "Failed to fetch properties from Supabase",
                    "code": "SUPABASE_ERROR",
                    "details": e.message,
                },
                status=500,
            )

        pagination = Pagination.build(page, limit, total)
        return GlobalSearchResult(
            source="supabase",
            page=page,
            properties=rows,
            total_results=total,
            total_pages=pagination.total_pages,
        )
