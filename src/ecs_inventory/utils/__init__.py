"""Utility functions and helpers for ecs-inventory."""

from ecs_inventory.utils.errors import (
    AnchoreAuthenticationError,
    AnchoreConnectionError,
    AnchoreResponseError,
    AuthenticationError,
    ConfigurationError,
    ECSAPIError,
    ECSInventoryError,
    ReportingError,
)
from ecs_inventory.utils.timing import track_time

__all__ = [
    # Errors
    "ECSInventoryError",
    "ConfigurationError",
    "AuthenticationError",
    "ECSAPIError",
    "ReportingError",
    "AnchoreConnectionError",
    "AnchoreAuthenticationError",
    "AnchoreResponseError",
    # Timing
    "track_time",
]
