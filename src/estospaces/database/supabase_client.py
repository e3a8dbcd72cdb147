"""
Cliente de Supabase.

Se construye una sola vez al iniciar el proceso y se inyecta en la
aplicación HTTP. Sin credenciales no hay cliente y la API degrada a
respuestas "not configured".
"""

from typing import Optional

import structlog
from postgrest.exceptions import APIError
from supabase import AuthError, Client, ClientOptions, create_client

from estospaces.config import PROPERTIES_TABLE, Settings
from estospaces.exceptions import AccessDeniedError, QueryError, TableNotFoundError

logger = structlog.get_logger()

APPLICATION_NAME = "estospaces-api"


class SupabaseClient:
    """Wrapper del cliente de Supabase con métodos de utilidad."""

    def __init__(self, client: Client, settings: Optional[Settings] = None):
        self._client = client
        self._settings = settings

    @property
    def client(self) -> Client:
        """Acceso directo al cliente de Supabase."""
        return self._client

    @property
    def uses_service_role(self) -> bool:
        return bool(self._settings and self._settings.supabase_service_key)

    def table(self, name: str):
        """Acceso a una tabla específica."""
        return self.client.table(name)

    def ping(self) -> bool:
        """Consulta mínima sobre properties para el health check."""
        self.table(PROPERTIES_TABLE).select("id").limit(1).execute()
        return True

    def get_user_id(self, token: str) -> Optional[str]:
        """
        Valida un access token contra Supabase Auth.

        Returns:
            El UUID del usuario, o None si el token no es válido
        """
        try:
            response = self.client.auth.get_user(token)
        except AuthError as e:
            logger.warning("Token rechazado por Supabase", error=str(e))
            return None

        user = getattr(response, "user", None) if response else None
        return getattr(user, "id", None) if user else None

    def for_user(self, token: str) -> "SupabaseClient":
        """
        Cliente para escrituras en nombre del usuario.

        Con service role se reutiliza el cliente admin; si no, se crea uno
        con el token del usuario para que apliquen las políticas RLS.
        """
        if self.uses_service_role or not self._settings:
            return self

        client = create_client(
            self._settings.supabase_url,
            self._settings.supabase_key,
            options=ClientOptions(
                headers={
                    "Authorization": f"Bearer {token}",
                    "x-application-name": APPLICATION_NAME,
                },
                auto_refresh_token=False,
                persist_session=False,
            ),
        )
        return SupabaseClient(client, self._settings)


def to_query_error(error: APIError) -> QueryError:
    """Clasifica un APIError de PostgREST según su mensaje."""
    message = error.message or str(error)

    if "relation" in message or "does not exist" in message:
        return TableNotFoundError(message, details=error.details, code=error.code)
    if "row-level security" in message or "RLS" in message:
        return AccessDeniedError(message, details=error.details, code=error.code)
    return QueryError(message, details=error.details, code=error.code)


def build_supabase_client(settings: Settings) -> Optional[SupabaseClient]:
    """
    Construye el cliente de Supabase a partir de la configuración.

    Returns:
        SupabaseClient configurado, o None si faltan credenciales
    """
    key = settings.supabase_service_key or settings.supabase_key

    if not settings.supabase_url or not key:
        logger.error(
            "Faltan credenciales de Supabase",
            required="SUPABASE_URL y SUPABASE_KEY (o SUPABASE_SERVICE_ROLE_KEY)",
        )
        return None

    client = create_client(
        settings.supabase_url,
        key,
        options=ClientOptions(
            headers={"x-application-name": APPLICATION_NAME},
            schema="public",
            auto_refresh_token=True,
            persist_session=False,
        ),
    )
    logger.info(
        "Cliente de Supabase inicializado",
        url=settings.supabase_url[:30],
        service_role=bool(settings.supabase_service_key),
    )

    return SupabaseClient(client, settings)
