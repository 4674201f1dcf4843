"""Pydantic models for ECS inventory reports.

Field names on the wire are camelCase and form the contract with the
Anchore ``ecs-inventory`` endpoint.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class InventoryModel(BaseModel):
    """Base for immutable, camelCase-serialized inventory models."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Container(InventoryModel):
    """A container running inside an ECS task."""

    name: str = Field(..., description="Container name from the task definition")
    image: str = Field(..., description="Image reference the container was started from")
    digest: str | None = Field(None, description="Image digest, when the runtime reports one")
    task_arn: str = Field(..., description="ARN of the task the container belongs to")
    cluster_arn: str = Field(..., description="ARN of the cluster the task runs in")

    @classmethod
    def from_ecs_container(
        cls, container: dict[str, Any], task_arn: str, cluster_arn: str
    ) -> Container:
        """Create from a container entry of an ECS ``DescribeTasks`` response."""
        return cls(
            name=container.get("name", ""),
            image=container.get("image", ""),
            digest=container.get("imageDigest") or None,
            task_arn=container.get("taskArn") or task_arn,
            cluster_arn=cluster_arn,
        )


class TaskMetadata(InventoryModel):
    """Descriptive fields of a running task (metadata mode)."""

    arn: str = Field(..., description="Task ARN")
    cluster_arn: str = Field(..., description="Cluster ARN")
    task_definition_arn: str = Field(..., description="Task definition ARN")
    group: str | None = Field(None, description="Task group, e.g. 'service:web'")
    launch_type: str | None = Field(None, description="EC2, FARGATE or EXTERNAL")
    tags: dict[str, str] | None = Field(None, description="Task tags")

    @classmethod
    def from_ecs_task(cls, task: dict[str, Any]) -> TaskMetadata:
        """Create from an entry of an ECS ``DescribeTasks`` response."""
        return cls(
            arn=task["taskArn"],
            cluster_arn=task.get("clusterArn", ""),
            task_definition_arn=task.get("taskDefinitionArn", ""),
            group=task.get("group"),
            launch_type=task.get("launchType"),
            tags=_parse_tags(task.get("tags")),
        )


class ServiceMetadata(InventoryModel):
    """Descriptive fields of an ECS service (metadata mode)."""

    arn: str = Field(..., description="Service ARN")
    name: str = Field(..., description="Service name")
    desired_count: int = Field(0, description="Number of tasks the service should run")
    running_count: int = Field(0, description="Number of tasks currently running")
    task_definition_arn: str | None = Field(None, description="Task definition in use")
    tags: dict[str, str] | None = Field(None, description="Service tags")

    @classmethod
    def from_ecs_service(cls, service: dict[str, Any]) -> ServiceMetadata:
        """Create from an entry of an ECS ``DescribeServices`` response."""
        return cls(
            arn=service["serviceArn"],
            name=service.get("serviceName", ""),
            desired_count=service.get("desiredCount", 0),
            running_count=service.get("runningCount", 0),
            task_definition_arn=service.get("taskDefinition"),
            tags=_parse_tags(service.get("tags")),
        )


class Report(InventoryModel):
    """Inventory of one cluster, as shown and delivered."""

    timestamp: str = Field(..., description="When the report was assembled (RFC3339, UTC)")
    cluster_name: str = Field(..., description="Cluster name")
    cluster_arn: str = Field(..., description="Cluster ARN")
    containers: list[Container] = Field(default_factory=list, description="Containers found")
    tasks: list[TaskMetadata] | None = Field(None, description="Task metadata (metadata mode)")
    services: list[ServiceMetadata] | None = Field(
        None, description="Service metadata (metadata mode)"
    )

    def to_wire_dict(self) -> dict[str, Any]:
        """JSON-ready dict; unset optional fields are omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def cluster_name_from_arn(cluster_arn: str) -> str:
    """Extract the cluster name from ``arn:aws:ecs:<region>:<account>:cluster/<name>``."""
    return cluster_arn.rsplit("/", 1)[-1]


def _parse_tags(tags: list[dict[str, str]] | None) -> dict[str, str] | None:
    if not tags:
        return None
    return {tag["key"]: tag.get("value", "") for tag in tags if "key" in tag}
