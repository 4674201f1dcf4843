"""Inventory of running ECS containers, reported to Anchore."""

__version__ = "0.1.0"
