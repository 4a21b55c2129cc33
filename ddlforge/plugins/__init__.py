"""
DDLForge Plugin Support

Discovery of the aggregate functions DDL files may reference in summarize
blocks, from plugin directories and entry points.

Usage:
    from ddlforge.plugins import AggregateRegistry

    registry = AggregateRegistry.from_config(config)
"""

from ddlforge.plugins.aggregates import (
    AGGREGATE_DIR,
    AGGREGATE_ENTRY_POINT,
    AggregateRegistry,
)

__all__ = [
    "AggregateRegistry",
    "AGGREGATE_ENTRY_POINT",
    "AGGREGATE_DIR",
]
