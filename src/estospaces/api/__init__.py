"""
API HTTP (aiohttp).

Endpoints:
- GET  /api/health
- GET  /api/properties
- GET  /api/properties/sections
- GET  /api/properties/all-sections
- GET  /api/properties/global
- GET  /api/user_preferences
- POST /api/user_preferences
- POST /api/appointments/book
"""

from estospaces.api.app import create_app

__all__ = ["create_app"]
