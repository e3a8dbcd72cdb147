"""
Resultados tipados de las consultas de listings.

Los servicios nunca devuelven formas distintas según el camino: devuelven
Ok o Err, y los handlers HTTP los serializan siempre igual.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from estospaces.exceptions import (
    AccessDeniedError,
    ConfigurationError,
    QueryError,
    TableNotFoundError,
)
from estospaces.models import Pagination


class ErrorKind(str, Enum):
    """Tipo de error expuesto como `code` en la respuesta."""

    NOT_CONFIGURED = "NOT_CONFIGURED"
    TABLE_NOT_FOUND = "TABLE_NOT_FOUND"
    RLS_ERROR = "RLS_ERROR"
    QUERY_ERROR = "QUERY_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    @property
    def http_status(self) -> int:
        if self is ErrorKind.RLS_ERROR:
            return 403
        return 500


@dataclass
class Ok:
    """Consulta exitosa."""

    data: list[dict] = field(default_factory=list)
    pagination: Optional[Pagination] = None


@dataclass
class Err:
    """Consulta fallida."""

    kind: ErrorKind
    message: str
    details: Optional[str] = None

    @property
    def status(self) -> int:
        return self.kind.http_status

    def to_error_dict(self) -> dict:
        error = {"message": self.message, "code": self.kind.value}
        if self.details:
            error["details"] = self.details
        return error


Result = Union[Ok, Err]


def error_from_exception(
    error: Exception, query_failed_message: str = "Failed to fetch properties"
) -> Err:
    """Mapea la taxonomía de excepciones a un Err."""
    if isinstance(error, ConfigurationError):
        return Err(ErrorKind.NOT_CONFIGURED, error.message)
    if isinstance(error, TableNotFoundError):
        return Err(
            ErrorKind.TABLE_NOT_FOUND,
            "Properties table not found. Please run the SQL schema in Supabase Dashboard.",
            details=error.message,
        )
    if isinstance(error, AccessDeniedError):
        return Err(
            ErrorKind.RLS_ERROR,
            "Access denied. RLS policy may be blocking access. Check Supabase RLS policies.",
            details=error.message,
        )
    if isinstance(error, QueryError):
        return Err(ErrorKind.QUERY_ERROR, query_failed_message, details=error.message)
    return Err(ErrorKind.INTERNAL_ERROR, "Internal server error")


def page_payload(result: Result) -> tuple[int, dict]:
    """
    Serializa un resultado paginado.

    Returns:
        (status HTTP, cuerpo {data, error, pagination})
    """
    if isinstance(result, Ok):
        return 200, {
            "data": result.data,
            "error": None,
            "pagination": (
                result.pagination.to_response_dict() if result.pagination else None
            ),
        }
    return result.status, {
        "data": None,
        "error": result.to_error_dict(),
        "pagination": None,
    }
