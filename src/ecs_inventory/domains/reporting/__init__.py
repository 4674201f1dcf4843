"""Reporting domain - showing and delivering inventory reports."""

from ecs_inventory.domains.reporting.dispatcher import ReportDispatcher, ReportWriter

__all__ = [
    "ReportDispatcher",
    "ReportWriter",
]
