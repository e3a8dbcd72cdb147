"""
Script para ejecutar la API HTTP.

Uso:
    python -m estospaces.scripts.run_api
    python -m estospaces.scripts.run_api --port 8080
"""

import argparse
import logging
import sys

import structlog
from aiohttp import web

from estospaces.api import create_app
from estospaces.config import get_settings
from estospaces.database import build_supabase_client
from estospaces.providers import build_zoopla_client


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(message)s",
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger()


def main():
    """Entry point de la API."""
    parser = argparse.ArgumentParser(description="API de properties de Estospaces")
    parser.add_argument("--host", help="Host de escucha (default: API_HOST)")
    parser.add_argument("--port", type=int, help="Puerto (default: API_PORT)")
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level)

    host = args.host or settings.api_host
    port = args.port or settings.api_port

    try:
        client = build_supabase_client(settings)
        zoopla = build_zoopla_client(settings)
        app = create_app(settings, client, zoopla)

        logger.info(
            "Iniciando API",
            url=f"http://{host}:{port}",
            health_path="/api/health",
            cors_origin=settings.cors_origin,
            environment=settings.environment,
        )
        # run_app maneja SIGINT/SIGTERM y cierra el servidor ordenadamente
        web.run_app(app, host=host, port=port, print=None)
    except KeyboardInterrupt:
        logger.info("API detenida por usuario")
        sys.exit(0)
    except Exception as e:
        logger.error("Error fatal en API", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
