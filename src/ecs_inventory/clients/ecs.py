"""ECS API client wrapper.

Thin layer over the boto3 ECS client that pages through list operations,
batches describe operations by the API limits, and turns botocore failures
into ecs-inventory errors. A single instance is shared read-only by all
cluster workers; boto3 clients are safe to use from multiple threads.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from ecs_inventory.utils.errors import AuthenticationError, ConfigurationError, ECSAPIError

logger = logging.getLogger(__name__)

# Maximum identifiers accepted by a single describe call
DESCRIBE_TASKS_BATCH_SIZE = 100
DESCRIBE_SERVICES_BATCH_SIZE = 10

CREDENTIAL_ERROR_CODES = frozenset(
    {
        "UnrecognizedClientException",
        "InvalidClientTokenId",
        "ExpiredToken",
        "ExpiredTokenException",
        "InvalidSignatureException",
        "SignatureDoesNotMatch",
        "AuthFailure",
    }
)


def create_session(region: str | None = None) -> boto3.Session:
    """Create a boto3 session, optionally pinned to a region.

    Raises:
        ConfigurationError: If the AWS profile configuration is unusable.
    """
    try:
        if region:
            return boto3.Session(region_name=region)
        return boto3.Session()
    except BotoCoreError as e:
        raise ConfigurationError(f"failed to create AWS session: {e}") from e


def _chunks(items: list[str], size: int) -> Iterator[list[str]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


class ECSClient:
    """Read-only access to the ECS API for one account/region."""

    def __init__(self, session: Any, ecs: Any | None = None) -> None:
        self._session = session
        if ecs is None:
            try:
                ecs = session.client("ecs")
            except BotoCoreError as e:
                # NoRegionError lands here when neither config nor AWS profile sets one
                raise ConfigurationError(f"failed to create ECS client: {e}") from e
        self._ecs = ecs

    @property
    def region(self) -> str | None:
        """Region the underlying session is bound to."""
        return getattr(self._session, "region_name", None)

    def _wrap(self, operation: str, error: Exception, cluster: str | None = None) -> Exception:
        if isinstance(error, NoCredentialsError):
            return AuthenticationError(f"no AWS credentials available for {operation}: {error}")
        if isinstance(error, ClientError) and _error_code(error) in CREDENTIAL_ERROR_CODES:
            return AuthenticationError(f"AWS rejected the credentials during {operation}: {error}")
        return ECSAPIError(operation, str(error), cluster=cluster)

    def check_credentials(self) -> str:
        """Verify that the session holds usable AWS credentials.

        Returns:
            The AWS account ID the credentials belong to.

        Raises:
            AuthenticationError: If there are no credentials or STS rejects them.
        """
        if self._session.get_credentials() is None:
            raise AuthenticationError(
                "no AWS credentials found; configure them via environment, profile or instance role"
            )
        try:
            identity = self._session.client("sts").get_caller_identity()
        except (ClientError, BotoCoreError) as e:
            raise AuthenticationError(f"unable to verify AWS credentials: {e}") from e
        account = identity.get("Account", "")
        logger.debug(f"Using AWS credentials for account {account}")
        return account

    def _paginate(
        self, operation: str, result_key: str, scope: str | None = None, **kwargs: Any
    ) -> list[str]:
        results: list[str] = []
        try:
            paginator = self._ecs.get_paginator(operation)
            for page in paginator.paginate(**kwargs):
                results.extend(page.get(result_key, []))
        except (ClientError, BotoCoreError) as e:
            raise self._wrap(operation, e, scope) from e
        return results

    def list_clusters(self) -> list[str]:
        """List every cluster ARN visible to the credentials.

        All pages must succeed; a partial cluster list is never returned.
        """
        return self._paginate("list_clusters", "clusterArns")

    def list_tasks(self, cluster: str) -> list[str]:
        """List ARNs of the running tasks in a cluster."""
        return self._paginate(
            "list_tasks", "taskArns", scope=cluster, cluster=cluster, desiredStatus="RUNNING"
        )

    def list_services(self, cluster: str) -> list[str]:
        """List ARNs of the services in a cluster."""
        return self._paginate("list_services", "serviceArns", scope=cluster, cluster=cluster)

    def describe_tasks(
        self, cluster: str, task_arns: list[str], include_tags: bool = False
    ) -> list[dict[str, Any]]:
        """Describe tasks, batching by the API limit."""
        tasks: list[dict[str, Any]] = []
        for batch in _chunks(task_arns, DESCRIBE_TASKS_BATCH_SIZE):
            kwargs: dict[str, Any] = {"cluster": cluster, "tasks": batch}
            if include_tags:
                kwargs["include"] = ["TAGS"]
            try:
                response = self._ecs.describe_tasks(**kwargs)
            except (ClientError, BotoCoreError) as e:
                raise self._wrap("describe_tasks", e, cluster) from e
            self._log_failures("describe_tasks", cluster, response)
            tasks.extend(response.get("tasks", []))
        return tasks

    def describe_services(
        self, cluster: str, service_arns: list[str], include_tags: bool = False
    ) -> list[dict[str, Any]]:
        """Describe services, batching by the API limit."""
        services: list[dict[str, Any]] = []
        for batch in _chunks(service_arns, DESCRIBE_SERVICES_BATCH_SIZE):
            kwargs: dict[str, Any] = {"cluster": cluster, "services": batch}
            if include_tags:
                kwargs["include"] = ["TAGS"]
            try:
                response = self._ecs.describe_services(**kwargs)
            except (ClientError, BotoCoreError) as e:
                raise self._wrap("describe_services", e, cluster) from e
            self._log_failures("describe_services", cluster, response)
            services.extend(response.get("services", []))
        return services

    @staticmethod
    def _log_failures(operation: str, cluster: str, response: dict[str, Any]) -> None:
        # Resources that vanished between list and describe show up here
        for failure in response.get("failures", []):
            logger.debug(
                f"{operation} skipped {failure.get('arn')} in cluster {cluster}: "
                f"{failure.get('reason')}"
            )
