"""
Modelos de consulta y paginación.

PropertyQuery es la forma validada de los parámetros HTTP; el repositorio
la traduce a llamadas del query builder de Supabase.
"""

import math
from typing import Optional

from pydantic import BaseModel, Field

from estospaces.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from estospaces.models.property import ListingType


class PropertyQuery(BaseModel):
    """Filtros, orden y ventana de paginación sobre properties."""

    page: int = Field(default=1, ge=1, description="Página, indexada desde 1")
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)

    country: Optional[str] = Field(None, description="Igualdad exacta")
    city: Optional[str] = Field(None, description="Substring, case-insensitive")
    postcode: Optional[str] = Field(None, description="Substring, case-insensitive")
    listing_type: Optional[ListingType] = None
    min_price: Optional[float] = Field(None, description="Cota inferior inclusiva")
    max_price: Optional[float] = Field(None, description="Cota superior inclusiva")
    bedrooms: Optional[int] = Field(None, ge=0)

    @property
    def offset(self) -> int:
        """Primera fila de la ventana (indexada desde 0)."""
        return (self.page - 1) * self.limit

    @property
    def row_range(self) -> tuple[int, int]:
        """Ventana inclusiva [start, end] para .range() de PostgREST."""
        start = self.offset
        return start, start + self.limit - 1


class Pagination(BaseModel):
    """Metadatos de paginación tal como los consume el frontend."""

    page: int
    limit: int
    total: int
    total_pages: int = Field(serialization_alias="totalPages")
    has_next_page: bool = Field(serialization_alias="hasNextPage")
    has_previous_page: bool = Field(serialization_alias="hasPreviousPage")

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = math.ceil(total / limit) if limit else 0
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next_page=page < total_pages,
            has_previous_page=page > 1,
        )

    def to_response_dict(self) -> dict:
        return self.model_dump(by_alias=True)
