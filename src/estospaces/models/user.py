"""
Modelos de usuario: preferencias del asistente y reservas de visitas.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


class UserPreferences(BaseModel):
    """Preferencias del asistente (onboarding y respuestas guardadas)."""

    lakshmi_onboarding_completed: bool = Field(
        default=False, description="Completó el onboarding del asistente"
    )
    lakshmi_preferences: dict = Field(
        default_factory=dict, description="Respuestas libres del onboarding"
    )

    @classmethod
    def defaults_for(cls, user_id: Optional[str]) -> dict:
        """Respuesta por defecto cuando el usuario no tiene fila guardada."""
        data = cls().model_dump()
        if user_id:
            data = {"user_id": user_id, **data}
        return data

    def to_db_dict(self, user_id: str) -> dict:
        """
        Convierte a diccionario para upsert en Supabase.

        Solo incluye los campos enviados: un upsert parcial no pisa el resto.
        """
        return {
            "user_id": user_id,
            **self.model_dump(exclude_unset=True),
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }


class AppointmentRequest(BaseModel):
    """Pedido de visita a una propiedad."""

    property_id: str = Field(..., min_length=1)
    viewing_date: str = Field(..., min_length=1, description="Fecha ISO (YYYY-MM-DD)")
    viewing_time: str = Field(..., min_length=1, description="Hora (HH:MM)")
    notes: str = Field(default="")
    application_data: Optional[dict] = None

    def application_row(self, user_id: str) -> dict:
        """Fila para applied_properties."""
        return {
            "user_id": user_id,
            "property_id": self.property_id,
            "status": "appointment_booked",
            "application_data": self.application_data
            or {
                "appointment": {
                    "date": self.viewing_date,
                    "time": self.viewing_time,
                    "notes": self.notes,
                    "type": "viewing",
                }
            },
        }

    def viewing_row(self, user_id: str) -> dict:
        """Fila para viewings."""
        return {
            "user_id": user_id,
            "property_id": self.property_id,
            "viewing_date": self.viewing_date,
            "viewing_time": self.viewing_time,
            "notes": self.notes,
            "status": "pending",
        }
