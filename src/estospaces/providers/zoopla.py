"""
Cliente de la API de Zoopla.

Solo se llama desde el servidor (la API key nunca llega al browser).
Normaliza los listings de Zoopla al modelo Property.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

import aiohttp
import structlog
from tenacity import retry, stop_after_attempt, wait_exponential

from estospaces.config import Settings
from estospaces.exceptions import ProviderError
from estospaces.models import ListingType, Property

logger = structlog.get_logger()


@dataclass
class ZooplaSearch:
    """Parámetros de búsqueda en Zoopla."""

    postcode: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    radius: float = 5.0
    listing_status: str = "both"  # sale, rent o both
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    min_bedrooms: Optional[int] = None
    page: int = 1
    page_size: int = 20

    @property
    def statuses(self) -> list[str]:
        if self.listing_status in ("sale", "rent"):
            return [self.listing_status]
        return ["sale", "rent"]

    @property
    def has_location(self) -> bool:
        return bool(self.postcode) or (
            self.latitude is not None and self.longitude is not None
        )


@dataclass
class ZooplaResults:
    """Resultado agregado de una búsqueda en Zoopla."""

    properties: list[Property] = field(default_factory=list)
    total_results: int = 0
    page: int = 1
    total_pages: int = 1


class ZooplaClient:
    """Cliente async de la API de listings de Zoopla."""

    def __init__(self, api_key: str, base_url: str, timeout: float = 10.0):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def search(self, search: ZooplaSearch) -> ZooplaResults:
        """
        Busca listings en Zoopla para cada estado pedido (sale/rent).

        Un estado que falla se loguea y se omite; el resto se devuelve.

        Raises:
            ProviderError: Si no hay postcode ni lat/lng
        """
        if not search.has_location:
            raise ProviderError("Either postcode or lat/lng required")

        results = ZooplaResults(page=search.page)

        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            for status in search.statuses:
                try:
                    payload = await self._fetch_listings(session, status, search)
                except Exception as e:
                    logger.warning(
                        "Error consultando Zoopla",
                        listing_status=status,
                        error=str(e),
                    )
                    continue

                listings = payload.get("listing") or []
                for raw in listings:
                    prop = transform_listing(raw)
                    if prop is not None:
                        results.properties.append(prop)
                results.total_results += int(payload.get("result_count") or 0)

        if search.page_size and results.total_results:
            results.total_pages = math.ceil(results.total_results / search.page_size)

        logger.info(
            "Búsqueda en Zoopla completada",
            properties=len(results.properties),
            total_results=results.total_results,
        )
        return results

    @retry(
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=1, min=1, max=4),
        reraise=True,
    )
    async def _fetch_listings(
        self, session: aiohttp.ClientSession, status: str, search: ZooplaSearch
    ) -> dict:
        params = {
            "api_key": self.api_key,
            "listing_status": status,
            "page_size": str(search.page_size),
            "page": str(search.page),
        }

        if search.postcode:
            params["postcode"] = search.postcode
        else:
            params["latitude"] = str(search.latitude)
            params["longitude"] = str(search.longitude)
            params["radius"] = str(search.radius)

        if search.min_price:
            params["minimum_price"] = str(search.min_price)
        if search.max_price:
            params["maximum_price"] = str(search.max_price)
        if search.min_bedrooms:
            params["minimum_beds"] = str(search.min_bedrooms)

        url = f"{self.base_url}/property_listings.json"
        async with session.get(url, params=params) as response:
            if response.status != 200:
                raise ProviderError(
                    f"Zoopla API error: {response.status} {response.reason}"
                )
            return await response.json(content_type=None)


def _to_float(value) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_int(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def transform_listing(raw: Optional[dict]) -> Optional[Property]:
    """Convierte un listing de Zoopla al formato de properties."""
    if not raw:
        return None

    listing_id = raw.get("listing_id") or raw.get("id")
    floor_area = raw.get("floor_area")
    image_url = raw.get("image_url")

    return Property(
        id=f"zoopla_{listing_id}",
        title=raw.get("displayable_address") or raw.get("short_description") or "Property",
        description=raw.get("description") or raw.get("detailed_description") or "",
        price=_to_float(raw.get("price")) or 0,
        listing_type=(
            ListingType.RENT if raw.get("listing_status") == "rent" else ListingType.SALE
        ),
        status="online",
        bedrooms=_to_int(raw.get("num_bedrooms")) or 0,
        bathrooms=_to_int(raw.get("num_bathrooms")) or 0,
        city=raw.get("post_town") or raw.get("town") or raw.get("county") or "",
        postcode=raw.get("outcode") or raw.get("postcode") or "",
        country="UK",
        address_line_1=raw.get("displayable_address") or raw.get("street_name") or "",
        latitude=_to_float(raw.get("latitude")),
        longitude=_to_float(raw.get("longitude")),
        image_urls=[image_url] if image_url else [],
        property_size_sqm=(
            _to_float(floor_area.get("value")) if isinstance(floor_area, dict) else None
        ),
        year_built=_to_int(raw.get("year_built")),
        featured=bool(raw.get("featured")),
        created_at=(
            raw.get("first_published_date") or datetime.now(timezone.utc).isoformat()
        ),
        # Campos propios del proveedor (extra="allow")
        agent_name=raw.get("agent_name") or "",
        agent_phone=raw.get("agent_phone") or "",
        viewing_available=True,
        zoopla_listing_id=listing_id,
        zoopla_url=raw.get("details_url") or raw.get("url"),
    )


def build_zoopla_client(settings: Settings) -> Optional[ZooplaClient]:
    """Cliente de Zoopla, o None si no hay API key configurada."""
    if not settings.zoopla_api_key:
        logger.info("ZOOPLA_API_KEY no configurada, búsqueda global solo con Supabase")
        return None
    return ZooplaClient(
        api_key=settings.zoopla_api_key,
        base_url=settings.zoopla_base_url,
        timeout=settings.zoopla_timeout,
    )
