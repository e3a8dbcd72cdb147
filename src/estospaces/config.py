"""
Configuración centralizada del sistema.
Carga variables de entorno y define settings globales.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Encontrar la raíz del proyecto (donde está el .env)
# config.py -> estospaces/ -> src/ -> raíz del proyecto
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Configuración principal de la API."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Supabase (opcionales: sin credenciales la API responde "not configured")
    supabase_url: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("supabase_url", "vite_supabase_url"),
        description="URL del proyecto Supabase",
    )
    supabase_key: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("supabase_key", "vite_supabase_anon_key"),
        description="Anon key de Supabase",
    )
    supabase_service_key: Optional[str] = Field(
        None,
        validation_alias=AliasChoices(
            "supabase_service_key", "supabase_service_role_key"
        ),
        description="Service role key para operaciones admin",
    )

    # HTTP
    api_host: str = Field("0.0.0.0", description="Host de escucha")
    api_port: int = Field(3002, description="Puerto de escucha")
    request_timeout: float = Field(
        30.0, gt=0, description="Timeout por request entrante (segundos)"
    )
    allowed_origin: str = Field(
        "http://localhost:5173",
        validation_alias=AliasChoices("allowed_origin", "vite_dev_url"),
        description="Origen permitido para CORS",
    )
    public_base_url: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("public_base_url", "vercel_url"),
        description="URL pública del frontend desplegado (ej: app.vercel.app)",
    )

    # Zoopla (búsqueda global)
    zoopla_api_key: Optional[str] = Field(None, description="API key de Zoopla")
    zoopla_base_url: str = Field(
        "https://api.zoopla.co.uk/api/v1", description="URL base de la API de Zoopla"
    )
    zoopla_timeout: float = Field(10.0, gt=0, description="Timeout por request a Zoopla")

    # Entorno
    environment: str = Field("development", description="development o production")

    # Logging
    log_level: str = Field("INFO", description="Nivel de logging")

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def cors_origin(self) -> str:
        """Origen CORS efectivo: la URL pública desplegada tiene prioridad."""
        if self.public_base_url:
            base = self.public_base_url.rstrip("/")
            if "://" not in base:
                base = f"https://{base}"
            return base
        return self.allowed_origin


@lru_cache
def get_settings() -> Settings:
    """Obtiene la configuración cacheada."""
    return Settings()


# Constantes del sistema
PROPERTIES_TABLE = "properties"

VISIBLE_STATUSES = ("online", "active")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

DEFAULT_SECTION_SIZE = 6
MAX_SECTION_SIZE = 20
DISCOVERY_FEED_SIZE = 8

TRENDING_WINDOW_DAYS = 7

SECTIONS = [
    "most_viewed",
    "trending",
    "recently_added",
    "high_demand",
    "featured",
]

DEFAULT_SECTION = "discovery"
