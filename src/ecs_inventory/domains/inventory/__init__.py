"""Inventory domain - gathering running containers from ECS clusters."""

from ecs_inventory.domains.inventory.coordinator import (
    ClusterResult,
    InventoryCoordinator,
    InventoryRun,
    get_inventory_reports_for_region,
    poll_inventory_reports,
)
from ecs_inventory.domains.inventory.fetcher import ClusterFetcher, ClusterInventory
from ecs_inventory.domains.inventory.models import (
    Container,
    Report,
    ServiceMetadata,
    TaskMetadata,
)
from ecs_inventory.domains.inventory.report import assemble_report

__all__ = [
    "ClusterFetcher",
    "ClusterInventory",
    "ClusterResult",
    "Container",
    "InventoryCoordinator",
    "InventoryRun",
    "Report",
    "ServiceMetadata",
    "TaskMetadata",
    "assemble_report",
    "get_inventory_reports_for_region",
    "poll_inventory_reports",
]
