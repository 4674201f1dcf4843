"""Deciding what happens to each finished report."""

from __future__ import annotations

import json
import logging
import sys
import threading
from typing import TYPE_CHECKING, TextIO

from ecs_inventory.clients.anchore import AnchoreClient
from ecs_inventory.utils.errors import ReportingError

if TYPE_CHECKING:
    from ecs_inventory.config import AnchoreInfo
    from ecs_inventory.domains.inventory.models import Report

logger = logging.getLogger(__name__)


class ReportWriter:
    """Writes reports as indented JSON documents to a shared stream.

    Cluster workers call ``write`` concurrently; each document is written
    under a lock so output from different clusters never interleaves.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self._lock = threading.Lock()

    def write(self, report: Report) -> None:
        """Serialize and write one report.

        Raises:
            ReportingError: If the report cannot be serialized or written.
        """
        try:
            # ensure_ascii off and no HTML escaping: "<", ">" and "&" stay literal
            document = json.dumps(report.to_wire_dict(), indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise ReportingError(f"unable to show inventory: {e}", cluster=report.cluster_arn) from e

        stream = self._stream or sys.stdout
        with self._lock:
            try:
                stream.write(document + "\n")
                stream.flush()
            except OSError as e:
                raise ReportingError(
                    f"unable to show inventory: {e}", cluster=report.cluster_arn
                ) from e


class ReportDispatcher:
    """Shows and/or delivers reports according to the run mode.

    Delivery, in priority order: dry run skips it, a valid Anchore target
    gets the report posted, otherwise it is skipped. Independently, unless
    quiet, the report is written to stdout, even when delivery failed.
    """

    def __init__(
        self,
        anchore: AnchoreInfo,
        quiet: bool = False,
        dry_run: bool = False,
        client: AnchoreClient | None = None,
        writer: ReportWriter | None = None,
    ) -> None:
        self._anchore = anchore
        self._quiet = quiet
        self._dry_run = dry_run
        self._client = client or AnchoreClient(anchore)
        self._writer = writer or ReportWriter()

    def handle_report(self, report: Report) -> None:
        """Dispatch one report.

        Raises:
            ReportingError: If delivery or printing failed. A delivery
                failure is raised after the report has been printed.
        """
        delivery_error: ReportingError | None = None

        if self._dry_run:
            logger.info("Dry run specified, not reporting inventory")
        elif self._anchore.is_valid():
            try:
                self._client.post(report)
            except ReportingError as e:
                delivery_error = ReportingError(
                    f"unable to report inventory to Anchore for cluster {report.cluster_arn}: {e}",
                    cluster=report.cluster_arn,
                )
                delivery_error.__cause__ = e
        else:
            logger.debug("Anchore details not specified, not reporting inventory")

        if not self._quiet:
            self._writer.write(report)

        if delivery_error is not None:
            raise delivery_error
