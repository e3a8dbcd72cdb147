"""
Modelos de datos del sistema.

- Property / ListingType: filas de la tabla properties
- PropertyQuery / Pagination: consulta validada y metadatos de página
- UserPreferences / AppointmentRequest: datos del usuario
"""

from estospaces.models.property import ListingType, Property
from estospaces.models.query import Pagination, PropertyQuery
from estospaces.models.user import AppointmentRequest, UserPreferences

__all__ = [
    # Listings
    "ListingType",
    "Property",
    # Consulta
    "PropertyQuery",
    "Pagination",
    # Usuario
    "UserPreferences",
    "AppointmentRequest",
]
