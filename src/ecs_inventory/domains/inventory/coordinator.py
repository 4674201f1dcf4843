"""Concurrent inventory gathering across all clusters of a region.

Each cluster is one unit of work on a bounded thread pool: fetch, assemble,
then dispatch as soon as that cluster is done. A unit never raises; its
outcome is captured in a ``ClusterResult`` so one failing cluster cannot
affect its siblings or the run.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ecs_inventory.clients.ecs import ECSClient, create_session
from ecs_inventory.domains.inventory.fetcher import ClusterFetcher
from ecs_inventory.domains.inventory.report import assemble_report
from ecs_inventory.domains.reporting.dispatcher import ReportDispatcher, ReportWriter
from ecs_inventory.utils.timing import track_time

if TYPE_CHECKING:
    from ecs_inventory.config import AppConfig
    from ecs_inventory.domains.inventory.models import Report

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 10


@dataclass(frozen=True)
class ClusterResult:
    """Outcome of processing one cluster."""

    cluster_arn: str
    report: Report | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class InventoryRun:
    """Outcome of one inventory run over a region."""

    clusters: list[str] = field(default_factory=list)
    results: list[ClusterResult] = field(default_factory=list)

    @property
    def reports(self) -> list[Report]:
        """Reports that were produced (and handed to the dispatcher)."""
        return [r.report for r in self.results if r.report is not None]

    @property
    def errors(self) -> list[Exception]:
        """Cluster-scoped errors, in cluster order."""
        return [r.error for r in self.results if r.error is not None]

    @property
    def failed_clusters(self) -> list[str]:
        return [r.cluster_arn for r in self.results if r.error is not None]


class InventoryCoordinator:
    """Runs one unit of work per cluster and waits for all of them."""

    def __init__(
        self,
        ecs: ECSClient,
        dispatcher: ReportDispatcher,
        metadata: bool = False,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self._fetcher = ClusterFetcher(ecs, metadata=metadata)
        self._dispatcher = dispatcher
        self._max_workers = max(1, max_workers)

    def process_cluster(self, cluster_arn: str) -> ClusterResult:
        """Fetch, assemble and dispatch one cluster, capturing any failure."""
        try:
            inventory = self._fetcher.fetch(cluster_arn)
            report = assemble_report(
                cluster_arn,
                inventory.containers,
                tasks=inventory.tasks,
                services=inventory.services,
            )
        except Exception as e:
            logger.error(f"Failed to get inventory report for cluster {cluster_arn}: {e}")
            return ClusterResult(cluster_arn=cluster_arn, error=e)

        if report is None:
            logger.debug(f"No containers found in cluster {cluster_arn}, not reporting")
            return ClusterResult(cluster_arn=cluster_arn)

        try:
            self._dispatcher.handle_report(report)
        except Exception as e:
            logger.error(f"Failed to report inventory for cluster {cluster_arn}: {e}")
            return ClusterResult(cluster_arn=cluster_arn, report=report, error=e)

        return ClusterResult(cluster_arn=cluster_arn, report=report)

    def run(self, clusters: list[str]) -> InventoryRun:
        """Process all clusters concurrently and wait for every one to finish."""
        if not clusters:
            logger.info("No clusters found")
            return InventoryRun()

        workers = min(self._max_workers, len(clusters))
        logger.debug(f"Processing {len(clusters)} clusters with {workers} workers")
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="cluster") as executor:
            # map preserves cluster order in the results
            results = list(executor.map(self.process_cluster, clusters))

        run = InventoryRun(clusters=list(clusters), results=results)
        if run.failed_clusters:
            logger.error(
                f"{len(run.failed_clusters)} of {len(clusters)} clusters failed: "
                f"{', '.join(run.failed_clusters)}"
            )
        return run


def get_inventory_reports_for_region(
    config: AppConfig,
    session: Any | None = None,
    writer: ReportWriter | None = None,
    dispatcher: ReportDispatcher | None = None,
) -> InventoryRun:
    """Gather and dispatch inventory reports for every cluster in the region.

    Args:
        config: Application configuration.
        session: boto3 session to use (default: a new one for ``config.region``).
        writer: Where reports are printed (default: stdout).
        dispatcher: Dispatcher to use (default: built from ``config``).

    Raises:
        AuthenticationError: If the AWS credentials are missing or rejected.
        ECSAPIError: If the clusters could not be listed.
    """
    region = config.region or "default region"
    logger.info(f"Getting inventory reports for {region}")

    with track_time(f"Inventory run for {region}"):
        ecs = ECSClient(session if session is not None else create_session(config.region))
        ecs.check_credentials()
        clusters = ecs.list_clusters()
        logger.debug(f"Found {len(clusters)} clusters")

        if dispatcher is None:
            dispatcher = ReportDispatcher(
                config.anchore,
                quiet=config.quiet,
                dry_run=config.dry_run,
                writer=writer,
            )
        coordinator = InventoryCoordinator(
            ecs,
            dispatcher,
            metadata=config.metadata,
            max_workers=config.max_concurrent_clusters,
        )
        return coordinator.run(clusters)


def poll_inventory_reports(
    config: AppConfig,
    stop: threading.Event,
    session: Any | None = None,
    writer: ReportWriter | None = None,
) -> None:
    """Run inventory gathering every ``polling_interval_seconds`` until stopped.

    Failures of a single run are logged and the next run still happens.
    """
    while not stop.is_set():
        try:
            get_inventory_reports_for_region(config, session=session, writer=writer)
        except Exception as e:
            logger.error(f"Failed to get inventory reports for region: {e}")
        stop.wait(config.polling_interval_seconds)
