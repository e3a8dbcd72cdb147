"""
Proveedores externos de listings.
"""

from estospaces.providers.zoopla import (
    build_zoopla_client,
    ZooplaClient,
    ZooplaResults,
    ZooplaSearch,
    transform_listing,
)

__all__ = [
    "build_zoopla_client",
    "ZooplaClient",
    "ZooplaResults",
    "ZooplaSearch",
    "transform_listing",
]
