"""Clients for the ECS API and the Anchore inventory endpoint."""

from ecs_inventory.clients.anchore import AnchoreClient
from ecs_inventory.clients.ecs import ECSClient, create_session

__all__ = [
    "AnchoreClient",
    "ECSClient",
    "create_session",
]
