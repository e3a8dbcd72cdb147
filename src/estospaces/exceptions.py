"""
Excepciones del sistema.

Los repositorios traducen los errores del proveedor (PostgREST) a estas
clases; los servicios las convierten en resultados tipados.
"""

from typing import Optional


class EstospacesError(Exception):
    """Error base de la API."""


class ConfigurationError(EstospacesError):
    """Faltan credenciales o configuración del backend."""

    def __init__(self, message: str = "Supabase not configured"):
        super().__init__(message)
        self.message = message


class QueryError(EstospacesError):
    """La consulta remota falló."""

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code


class TableNotFoundError(QueryError):
    """La tabla consultada no existe en el esquema."""


class AccessDeniedError(QueryError):
    """Una política RLS bloqueó la consulta."""


class ProviderError(EstospacesError):
    """Un proveedor externo de listings (Zoopla) falló."""
