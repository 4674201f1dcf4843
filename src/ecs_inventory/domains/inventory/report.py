"""Report assembly."""

from __future__ import annotations

from datetime import datetime, timezone

from ecs_inventory.domains.inventory.models import (
    Container,
    Report,
    ServiceMetadata,
    TaskMetadata,
    cluster_name_from_arn,
)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def format_timestamp(moment: datetime) -> str:
    """Format a datetime as an RFC3339 UTC timestamp with second precision."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime(TIMESTAMP_FORMAT)


def assemble_report(
    cluster_arn: str,
    containers: list[Container],
    tasks: list[TaskMetadata] | None = None,
    services: list[ServiceMetadata] | None = None,
    timestamp: datetime | None = None,
) -> Report | None:
    """Fold the fetched entities of one cluster into a report.

    The timestamp is taken now, when the data is final, unless given.

    Returns:
        The report, or None when the cluster has no containers; such
        clusters are never shown or delivered.
    """
    if not containers:
        return None
    return Report(
        timestamp=format_timestamp(timestamp or datetime.now(timezone.utc)),
        cluster_name=cluster_name_from_arn(cluster_arn),
        cluster_arn=cluster_arn,
        containers=list(containers),
        tasks=list(tasks) if tasks is not None else None,
        services=list(services) if services is not None else None,
    )
