"""
Modelo de Property.

Representa una fila de la tabla properties. Las filas de Supabase se
devuelven tal cual al cliente; el modelo se usa para normalizar listings
de proveedores externos y para documentar las columnas que usa la API.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from estospaces.config import VISIBLE_STATUSES


class ListingType(str, Enum):
    """Categoría del anuncio."""

    SALE = "sale"
    RENT = "rent"

    @classmethod
    def from_param(cls, value: Optional[str]) -> Optional["ListingType"]:
        """
        Normaliza el parámetro `type` del query string.

        "buy" y "sale" -> SALE, "rent" -> RENT, cualquier otro valor
        (incluido "all") -> None, es decir sin filtro.
        """
        if not value:
            return None
        value = value.strip().lower()
        if value in ("buy", "sale"):
            return cls.SALE
        if value == "rent":
            return cls.RENT
        return None


class Property(BaseModel):
    """Fila de la tabla properties."""

    model_config = ConfigDict(extra="allow", use_enum_values=True)

    # Identificación
    id: str = Field(..., description="UUID o ID externo con prefijo del proveedor")
    title: str = Field(default="Property", description="Título del anuncio")
    description: str = Field(default="", description="Descripción completa")

    # Precio y categoría
    price: float = Field(default=0, description="Precio en la moneda local")
    listing_type: ListingType = Field(..., description="sale o rent")
    status: str = Field(default="online", description="online, active, draft, ...")

    # Ubicación
    country: str = Field(default="UK", description="País")
    city: str = Field(default="", description="Ciudad")
    postcode: str = Field(default="", description="Código postal")
    address_line_1: str = Field(default="", description="Dirección")
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    # Características
    bedrooms: int = Field(default=0, ge=0)
    bathrooms: int = Field(default=0, ge=0)
    property_size_sqm: Optional[float] = None
    year_built: Optional[int] = None
    image_urls: list[str] = Field(default_factory=list)

    # Popularidad
    views: int = Field(default=0, ge=0)
    inquiries: int = Field(default=0, ge=0)
    favorites: int = Field(default=0, ge=0)
    featured: bool = False

    # Metadatos
    created_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="Timestamp de alta ISO",
    )

    @property
    def is_visible(self) -> bool:
        """Solo los estados visibles llegan a los clientes."""
        return self.status in VISIBLE_STATUSES

    def to_response_dict(self) -> dict:
        """Convierte a diccionario JSON-serializable para la respuesta."""
        return self.model_dump(mode="json")
