"""
Módulo de base de datos.

Provee acceso a Supabase y operaciones sobre sus tablas.
"""

from estospaces.database.supabase_client import (
    SupabaseClient,
    build_supabase_client,
    to_query_error,
)
from estospaces.database.repositories import (
    AppointmentRepository,
    PropertyRepository,
    UserPreferencesRepository,
)

__all__ = [
    "SupabaseClient",
    "build_supabase_client",
    "to_query_error",
    "PropertyRepository",
    "UserPreferencesRepository",
    "AppointmentRepository",
]
