"""
Repositorios sobre el query builder de Supabase.

Cada repositorio maneja una tabla/entidad específica. Los métodos son
síncronos (como el cliente de Supabase); la capa de servicios los ejecuta
en un thread.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from postgrest.exceptions import APIError
from postgrest.types import CountMethod

from estospaces.config import (
    DISCOVERY_FEED_SIZE,
    PROPERTIES_TABLE,
    TRENDING_WINDOW_DAYS,
    VISIBLE_STATUSES,
)
from estospaces.database.supabase_client import SupabaseClient, to_query_error
from estospaces.exceptions import QueryError
from estospaces.models import AppointmentRequest, ListingType, PropertyQuery, UserPreferences

logger = structlog.get_logger()

# PostgREST responde 416 cuando el offset supera el total
RANGE_NOT_SATISFIABLE = "PGRST103"


class BaseRepository:
    """Clase base para repositorios."""

    def __init__(self, client: SupabaseClient):
        self._client = client

    @property
    def client(self) -> SupabaseClient:
        return self._client

    def _execute(self, query):
        """Ejecuta la consulta traduciendo errores de PostgREST."""
        try:
            return query.execute()
        except APIError as e:
            raise to_query_error(e) from e


class PropertyRepository(BaseRepository):
    """Repositorio de solo lectura para properties."""

    TABLE = PROPERTIES_TABLE

    def _visible(self):
        """SELECT * restringido a estados visibles."""
        return (
            self.client.table(self.TABLE)
            .select("*")
            .in_("status", list(VISIBLE_STATUSES))
        )

    def _filtered(self, query: PropertyQuery, columns: str = "*"):
        """Estados visibles más los filtros del query, con conteo exacto."""
        builder = (
            self.client.table(self.TABLE)
            .select(columns, count=CountMethod.exact)
            .in_("status", list(VISIBLE_STATUSES))
        )

        if query.country:
            builder = builder.eq("country", query.country)
        if query.city:
            builder = builder.ilike("city", f"%{query.city}%")
        if query.postcode:
            builder = builder.ilike("postcode", f"%{query.postcode}%")
        if query.listing_type is not None:
            builder = builder.eq("listing_type", query.listing_type.value)
        if query.min_price is not None:
            builder = builder.gte("price", query.min_price)
        if query.max_price is not None:
            builder = builder.lte("price", query.max_price)
        if query.bedrooms is not None:
            builder = builder.eq("bedrooms", query.bedrooms)
        return builder

    def count(self, query: PropertyQuery) -> int:
        """Total de filas que cumplen los filtros, sin traer la página."""
        response = self._execute(self._filtered(query, "id").limit(1))
        return response.count or 0

    def search(self, query: PropertyQuery) -> tuple[list[dict], int]:
        """
        Búsqueda paginada con filtros.

        Una página posterior a la última devuelve filas vacías y el total.

        Returns:
            (filas de la página, total de filas que cumplen los filtros)
        """
        start, end = query.row_range
        try:
            response = self._execute(
                self._filtered(query).order("created_at", desc=True).range(start, end)
            )
        except QueryError as e:
            if e.code != RANGE_NOT_SATISFIABLE:
                raise
            return [], self.count(query)

        rows = response.data or []
        total = response.count if response.count is not None else len(rows)
        return rows, total

    def get_section(
        self,
        section: str,
        listing_type: Optional[ListingType] = None,
        limit: int = 6,
        now: Optional[datetime] = None,
    ) -> list[dict]:
        """
        Listings para una sección del dashboard.

        Args:
            section: most_viewed, trending, recently_added, high_demand,
                featured; cualquier otro valor es discovery
            listing_type: Filtro opcional de categoría
            limit: Máximo de resultados
            now: Referencia temporal para trending (default: ahora UTC)
        """
        builder = self._visible()

        if listing_type is not None:
            builder = builder.eq("listing_type", listing_type.value)

        if section == "most_viewed":
            builder = builder.order("views", desc=True)
        elif section == "trending":
            now = now or datetime.now(timezone.utc)
            since = now - timedelta(days=TRENDING_WINDOW_DAYS)
            builder = builder.gte("created_at", since.isoformat()).order(
                "views", desc=True
            )
        elif section == "recently_added":
            builder = builder.order("created_at", desc=True)
        elif section == "high_demand":
            builder = builder.order("inquiries", desc=True).order(
                "favorites", desc=True
            )
        elif section == "featured":
            builder = builder.eq("featured", True).order("created_at", desc=True)
        else:
            builder = (
                builder.order("featured", desc=True)
                .order("views", desc=True)
                .order("created_at", desc=True)
            )

        response = self._execute(builder.limit(limit))
        return response.data or []

    def get_discovery_feed(
        self,
        listing_type: Optional[ListingType] = None,
        limit: int = DISCOVERY_FEED_SIZE,
    ) -> list[dict]:
        """Feed fijo de discovery para el dashboard completo."""
        builder = self._visible()
        if listing_type is not None:
            builder = builder.eq("listing_type", listing_type.value)

        response = self._execute(
            builder.order("views", desc=True)
            .order("created_at", desc=True)
            .limit(limit)
        )
        return response.data or []


class UserPreferencesRepository(BaseRepository):
    """Repositorio para preferencias del asistente."""

    TABLE = "user_preferences"

    def get_by_user_id(self, user_id: str) -> Optional[dict]:
        """Obtiene las preferencias guardadas de un usuario."""
        response = self._execute(
            self.client.table(self.TABLE)
            .select("*")
            .eq("user_id", user_id)
            .limit(1)
        )
        return response.data[0] if response.data else None

    def upsert(self, user_id: str, preferences: UserPreferences) -> dict:
        """Inserta o actualiza las preferencias de un usuario."""
        data = preferences.to_db_dict(user_id)
        response = self._execute(
            self.client.table(self.TABLE).upsert(data, on_conflict="user_id")
        )
        logger.info("Preferencias actualizadas", user_id=user_id)
        return response.data[0] if response.data else data


class AppointmentRepository(BaseRepository):
    """Repositorio para solicitudes y visitas."""

    APPLICATIONS_TABLE = "applied_properties"
    VIEWINGS_TABLE = "viewings"

    def create_application(self, user_id: str, request: AppointmentRequest) -> Optional[str]:
        """
        Registra la solicitud con estado appointment_booked.

        Returns:
            ID de la solicitud creada (si el backend lo devuelve)
        """
        response = self._execute(
            self.client.table(self.APPLICATIONS_TABLE).insert(
                request.application_row(user_id)
            )
        )
        logger.info(
            "Solicitud de visita creada",
            user_id=user_id,
            property_id=request.property_id,
        )
        return response.data[0].get("id") if response.data else None

    def create_viewing(self, user_id: str, request: AppointmentRequest) -> dict:
        """Registra la visita pendiente de confirmación."""
        response = self._execute(
            self.client.table(self.VIEWINGS_TABLE).insert(request.viewing_row(user_id))
        )
        return response.data[0] if response.data else {}
