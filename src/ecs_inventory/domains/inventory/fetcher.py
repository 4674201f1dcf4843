"""Per-cluster inventory fetching."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ecs_inventory.domains.inventory.models import Container, ServiceMetadata, TaskMetadata

if TYPE_CHECKING:
    from ecs_inventory.clients.ecs import ECSClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClusterInventory:
    """Everything fetched for one cluster, ready for assembly."""

    cluster_arn: str
    containers: list[Container] = field(default_factory=list)
    tasks: list[TaskMetadata] | None = None
    services: list[ServiceMetadata] | None = None


class ClusterFetcher:
    """Reads the running tasks, containers and optional metadata of a cluster.

    Any API failure propagates to the caller and aborts only the cluster
    being fetched.
    """

    def __init__(self, ecs: ECSClient, metadata: bool = False) -> None:
        self._ecs = ecs
        self._metadata = metadata

    def fetch(self, cluster_arn: str) -> ClusterInventory:
        """Fetch the inventory of one cluster.

        Args:
            cluster_arn: ARN (or name) of the cluster.

        Returns:
            ClusterInventory; ``tasks`` and ``services`` are only set in
            metadata mode.
        """
        logger.debug(f"Found cluster {cluster_arn}")

        task_arns = self._ecs.list_tasks(cluster_arn)

        services: list[ServiceMetadata] | None = None
        if self._metadata:
            services = self.fetch_services(cluster_arn)

        if not task_arns:
            logger.debug(f"No tasks found in cluster {cluster_arn}")
            return ClusterInventory(
                cluster_arn=cluster_arn,
                tasks=[] if self._metadata else None,
                services=services,
            )

        logger.debug(f"Found {len(task_arns)} tasks in cluster {cluster_arn}")

        described = self._ecs.describe_tasks(cluster_arn, task_arns, include_tags=self._metadata)

        containers: list[Container] = []
        for task in described:
            task_arn = task.get("taskArn", "")
            for container in task.get("containers", []):
                containers.append(Container.from_ecs_container(container, task_arn, cluster_arn))

        tasks: list[TaskMetadata] | None = None
        if self._metadata:
            tasks = [TaskMetadata.from_ecs_task(task) for task in described]

        logger.info(f"Found {len(containers)} containers in cluster {cluster_arn}")
        return ClusterInventory(
            cluster_arn=cluster_arn,
            containers=containers,
            tasks=tasks,
            services=services,
        )

    def fetch_services(self, cluster_arn: str) -> list[ServiceMetadata]:
        """Fetch metadata for every service in a cluster."""
        service_arns = self._ecs.list_services(cluster_arn)
        if not service_arns:
            logger.debug(f"No services found in cluster {cluster_arn}")
            return []
        described = self._ecs.describe_services(cluster_arn, service_arns, include_tags=True)
        return [ServiceMetadata.from_ecs_service(service) for service in described]
