"""Client for delivering inventory reports to Anchore."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import httpx

from ecs_inventory.utils.errors import (
    AnchoreAuthenticationError,
    AnchoreConnectionError,
    AnchoreResponseError,
)
from ecs_inventory.utils.timing import track_time

if TYPE_CHECKING:
    from ecs_inventory.config import AnchoreInfo
    from ecs_inventory.domains.inventory.models import Report

logger = logging.getLogger(__name__)

REPORT_API_PATH = "/v1/enterprise/ecs-inventory"
ACCOUNT_HEADER = "x-anchore-account"

# Characters of the response body kept in error messages
RESPONSE_DETAIL_LIMIT = 500


class AnchoreClient:
    """Posts inventory reports to the Anchore ecs-inventory endpoint.

    The configured base URL is used verbatim: the API path is appended
    without any slash normalization.

    ``anchore.http.timeout_seconds`` bounds each phase of a request
    (connect, write, read, pool acquisition) separately, not the request as
    a whole. A timeout of 0 disables the limit.
    """

    def __init__(
        self,
        anchore: AnchoreInfo,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._anchore = anchore
        self._transport = transport

    def build_url(self) -> str:
        """Full URL reports are posted to."""
        return self._anchore.url + REPORT_API_PATH

    def _client(self) -> httpx.Client:
        # Skipping verification is an explicit opt-in through anchore.http.insecure
        return httpx.Client(
            auth=httpx.BasicAuth(self._anchore.user, self._anchore.password),
            timeout=self._anchore.http.timeout_seconds or None,
            verify=not self._anchore.http.insecure,
            transport=self._transport,
        )

    def post(self, report: Report) -> None:
        """Deliver one report.

        Raises:
            AnchoreAuthenticationError: On HTTP 401.
            AnchoreConnectionError: If the request could not be sent, including
                when the configured URL is malformed.
            AnchoreResponseError: On any other non-2xx response.
        """
        logger.info(f"Reporting results to Anchore for account {self._anchore.account}")
        body = json.dumps(report.to_wire_dict(), ensure_ascii=False).encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            ACCOUNT_HEADER: self._anchore.account,
        }

        with track_time(f"Posting inventory report for cluster {report.cluster_arn}"):
            # A malformed base URL raises InvalidURL, or UnicodeError from idna
            try:
                with self._client() as client:
                    response = client.post(self.build_url(), content=body, headers=headers)
            except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
                raise AnchoreConnectionError(
                    f"failed to report data to Anchore: {e}", cluster=report.cluster_arn
                ) from e

        if response.status_code == 401:
            raise AnchoreAuthenticationError(
                "failed to report data to Anchore, check credentials", cluster=report.cluster_arn
            )
        if not response.is_success:
            raise AnchoreResponseError(
                response.status_code,
                response.text[:RESPONSE_DETAIL_LIMIT],
                cluster=report.cluster_arn,
            )

        logger.debug(f"Successfully reported results to Anchore for account {self._anchore.account}")
