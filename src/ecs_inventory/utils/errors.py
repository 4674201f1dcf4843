"""Error types for ECS inventory gathering and reporting."""


class ECSInventoryError(Exception):
    """Base error for all ecs-inventory failures."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(ECSInventoryError):
    """Invalid or unreadable configuration."""

    pass


class AuthenticationError(ECSInventoryError):
    """AWS credentials are missing, expired or rejected."""

    pass


class ECSAPIError(ECSInventoryError):
    """A call to the ECS API failed."""

    def __init__(self, operation: str, detail: str, cluster: str | None = None) -> None:
        self.operation = operation
        self.cluster = cluster
        scope = f" for cluster '{cluster}'" if cluster else ""
        super().__init__(f"{operation} failed{scope}: {detail}")


class ReportingError(ECSInventoryError):
    """A report could not be delivered or shown."""

    def __init__(self, message: str, cluster: str | None = None) -> None:
        self.cluster = cluster
        super().__init__(message)


class AnchoreConnectionError(ReportingError):
    """The request to Anchore could not be sent (connect, TLS, timeout)."""

    pass


class AnchoreAuthenticationError(ReportingError):
    """Anchore rejected the configured credentials (HTTP 401)."""

    pass


class AnchoreResponseError(ReportingError):
    """Anchore answered with a non-2xx status."""

    def __init__(self, status_code: int, detail: str, cluster: str | None = None) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(
            f"failed to report data to Anchore: HTTP {status_code}: {detail}", cluster=cluster
        )
