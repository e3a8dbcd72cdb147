"""
Consultas de listings.

Provee la búsqueda paginada, las secciones del dashboard y la búsqueda
global con proveedores externos.
"""

from estospaces.listings.results import Err, ErrorKind, Ok, Result, page_payload
from estospaces.listings.search import PropertySearch, build_property_query
from estospaces.listings.sections import (
    SectionAggregator,
    normalize_section,
    section_payload,
)
from estospaces.listings.global_search import GlobalPropertySearch, GlobalSearchResult

__all__ = [
    # Resultados
    "Ok",
    "Err",
    "ErrorKind",
    "Result",
    "page_payload",
    # Búsqueda
    "PropertySearch",
    "build_property_query",
    # Secciones
    "SectionAggregator",
    "normalize_section",
    "section_payload",
    # Global
    "GlobalPropertySearch",
    "GlobalSearchResult",
]
