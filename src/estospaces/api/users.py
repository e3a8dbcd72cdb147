"""
Endpoints del usuario autenticado: preferencias del asistente y reserva
de visitas. Requieren `Authorization: Bearer <access token>`.
"""

import asyncio
import json
from typing import Optional

import structlog
from aiohttp import web
from pydantic import ValidationError

from estospaces.api.keys import SUPABASE_KEY
from estospaces.database import (
    AppointmentRepository,
    SupabaseClient,
    UserPreferencesRepository,
)
from estospaces.exceptions import QueryError, TableNotFoundError
from estospaces.models import AppointmentRequest, UserPreferences

logger = structlog.get_logger()

routes = web.RouteTableDef()


def _error(message: str, status: int, **extra) -> web.Response:
    return web.json_response({"error": {"message": message, **extra}}, status=status)


def _unauthorized(message: str) -> web.HTTPUnauthorized:
    return web.HTTPUnauthorized(
        text=json.dumps({"error": {"message": message}}),
        content_type="application/json",
    )


def bearer_token(request: web.Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    return header[len("Bearer "):].strip() or None


def require_client(request: web.Request) -> SupabaseClient:
    client = request.app[SUPABASE_KEY]
    if client is None:
        raise web.HTTPInternalServerError(
            text=json.dumps(
                {"error": {"message": "Supabase not configured", "code": "NOT_CONFIGURED"}}
            ),
            content_type="application/json",
        )
    return client


async def require_user(request: web.Request, client: SupabaseClient) -> tuple[str, str]:
    """
    Valida el bearer token contra Supabase Auth.

    Returns:
        (user_id, token)

    Raises:
        HTTPUnauthorized: Sin header o con token inválido
    """
    token = bearer_token(request)
    if not token:
        raise _unauthorized("Unauthorized")

    user_id = await asyncio.to_thread(client.get_user_id, token)
    if not user_id:
        raise _unauthorized("Invalid token")
    return user_id, token


async def _read_json(request: web.Request) -> dict:
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


@routes.get("/api/user_preferences")
async def get_user_preferences(request: web.Request) -> web.Response:
    client = require_client(request)
    user_id, _ = await require_user(request, client)
    repo = UserPreferencesRepository(client)

    try:
        row = await asyncio.to_thread(repo.get_by_user_id, user_id)
    except TableNotFoundError:
        row = None
    except Exception as e:
        # El frontend espera siempre un objeto de preferencias
        logger.error("Error obteniendo preferencias", user_id=user_id, error=str(e))
        return web.json_response(UserPreferences.defaults_for(None))

    return web.json_response(row or UserPreferences.defaults_for(user_id))


@routes.post("/api/user_preferences")
async def save_user_preferences(request: web.Request) -> web.Response:
    client = require_client(request)
    user_id, _ = await require_user(request, client)

    try:
        preferences = UserPreferences.model_validate(await _read_json(request))
    except ValidationError as e:
        return _error("Invalid preferences payload", 400, details=json.loads(e.json(include_url=False)))

    repo = UserPreferencesRepository(client)
    try:
        row = await asyncio.to_thread(repo.upsert, user_id, preferences)
    except TableNotFoundError:
        logger.warning("Tabla user_preferences inexistente, no se guardó", user_id=user_id)
        return web.json_response(
            {"user_id": user_id, **preferences.model_dump(exclude_unset=True)}
        )
    except Exception as e:
        logger.error("Error guardando preferencias", user_id=user_id, error=str(e))
        return _error("Failed to save preferences", 500)

    return web.json_response(row)


@routes.post("/api/appointments/book")
async def book_appointment(request: web.Request) -> web.Response:
    client = require_client(request)
    user_id, token = await require_user(request, client)

    try:
        appointment = AppointmentRequest.model_validate(await _read_json(request))
    except ValidationError:
        return _error("Missing required fields", 400)

    repo = AppointmentRepository(client.for_user(token))

    try:
        application_id = await asyncio.to_thread(
            repo.create_application, user_id, appointment
        )
    except QueryError as e:
        return _error(e.message, 400)

    try:
        await asyncio.to_thread(repo.create_viewing, user_id, appointment)
    except QueryError as e:
        logger.warning(
            "Solicitud creada sin visita",
            application_id=application_id,
            error=e.message,
        )
        return web.json_response(
            {
                "ok": True,
                "application_id": application_id,
                "warning": {"message": e.message},
            },
            status=201,
        )

    return web.json_response({"ok": True, "application_id": application_id}, status=201)
