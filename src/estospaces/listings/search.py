"""
Adaptador de búsqueda de properties.

Traduce los parámetros HTTP (strings opcionales) a un PropertyQuery,
ejecuta la consulta contra Supabase y devuelve un resultado tipado con
la página y sus metadatos de paginación.
"""

import asyncio
import math
from typing import Mapping, Optional

import structlog

from estospaces.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from estospaces.database import PropertyRepository, SupabaseClient
from estospaces.exceptions import ConfigurationError
from estospaces.listings.results import Ok, Result, error_from_exception
from estospaces.models import ListingType, Pagination, PropertyQuery

logger = structlog.get_logger()


def parse_positive_int(value: Optional[str], default: int) -> int:
    """Entero positivo o el default si falta, no parsea o es < 1."""
    if value is None or value == "":
        return default
    try:
        parsed = int(str(value).strip())
    except ValueError:
        return default
    return parsed if parsed >= 1 else default


def parse_optional_int(value: Optional[str]) -> Optional[int]:
    """Entero no negativo o None."""
    if value is None or value == "":
        return None
    try:
        parsed = int(str(value).strip())
    except ValueError:
        return None
    return parsed if parsed >= 0 else None


def parse_float(value: Optional[str]) -> Optional[float]:
    """Float finito o None."""
    if value is None or value == "":
        return None
    try:
        parsed = float(str(value).strip())
    except ValueError:
        return None
    return parsed if math.isfinite(parsed) else None


def clamp_limit(value: Optional[str], default: int, maximum: int) -> int:
    return min(parse_positive_int(value, default), maximum)


def build_property_query(params: Mapping[str, str]) -> PropertyQuery:
    """
    Construye el PropertyQuery a partir del query string.

    Reglas:
    - page: default 1
    - limit: default 20, máximo 100
    - country: "all" equivale a sin filtro
    - type: buy/sale -> sale, rent -> rent, otro -> sin filtro
    - min_price/max_price: se ignoran si no son numéricos
    """
    country = (params.get("country") or "").strip()

    return PropertyQuery(
        page=parse_positive_int(params.get("page"), 1),
        limit=clamp_limit(params.get("limit"), DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE),
        country=country if country and country.lower() != "all" else None,
        city=(params.get("city") or "").strip() or None,
        postcode=(params.get("postcode") or "").strip() or None,
        listing_type=ListingType.from_param(params.get("type")),
        min_price=parse_float(params.get("min_price")),
        max_price=parse_float(params.get("max_price")),
        bedrooms=parse_optional_int(params.get("bedrooms")),
    )


class PropertySearch:
    """
    Búsqueda paginada sobre properties.

    Todos los filtros, incluido listing_type, van en la consulta remota:
    `total` es el conteo del conjunto filtrado.
    """

    def __init__(self, client: Optional[SupabaseClient]):
        self.repo = PropertyRepository(client) if client else None

    async def search(self, query: PropertyQuery) -> Result:
        if self.repo is None:
            return error_from_exception(ConfigurationError())

        try:
            rows, total = await asyncio.to_thread(self.repo.search, query)
        except Exception as e:
            logger.error(
                "Error consultando properties",
                error=str(e),
                error_type=type(e).__name__,
                page=query.page,
                limit=query.limit,
            )
            return error_from_exception(e)

        pagination = Pagination.build(query.page, query.limit, total)
        logger.debug(
            "Properties consultadas",
            count=len(rows),
            total=total,
            page=query.page,
            total_pages=pagination.total_pages,
        )
        return Ok(data=rows, pagination=pagination)
