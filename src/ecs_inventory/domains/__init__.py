"""Domain modules for ecs-inventory.

The dependency flow is one-way: ``inventory`` imports from ``reporting``,
never the reverse.
"""
