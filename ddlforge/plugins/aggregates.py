"""
Aggregate Function Registry

Knows which aggregate functions exist. DDL files reference them by name
inside summarize blocks; the names come from two sources:

1. Aggregate plugin files found on the library search path:

       <libdir>/aggregate/summary.py
       <libdir>/aggregate/average.ddl

2. Python entry points registered in pyproject.toml:

       [project.entry-points."ddlforge.aggregates"]
       summary = "my_package.aggregates:Summary"

Usage:
    from ddlforge.plugins import AggregateRegistry

    registry = AggregateRegistry(["summary"])
    registry.discover(["/usr/libexec/ddlforge"])
    registry.is_function("summary")  # True
"""

import logging
from collections.abc import Iterable
from importlib.metadata import entry_points
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ddlforge.config import DDLConfig

logger = logging.getLogger(__name__)

__all__ = ["AGGREGATE_ENTRY_POINT", "AGGREGATE_DIR", "AggregateRegistry"]

# Entry point group name
AGGREGATE_ENTRY_POINT = "ddlforge.aggregates"

# Plugin directory below each libdir
AGGREGATE_DIR = "aggregate"

_PLUGIN_SUFFIXES = (".py", ".ddl")


class AggregateRegistry:
    """Set of known aggregate function identifiers."""

    def __init__(self, names: Iterable[str] = ()):
        self._names: set[str] = set()
        for name in names:
            self.register(name)

    def register(self, name: str) -> None:
        """Register an aggregate function name."""
        if not isinstance(name, str) or not name.isidentifier():
            raise ValueError(f"Invalid aggregate function name: {name!r}")
        self._names.add(name)

    def is_function(self, name: str) -> bool:
        """Check whether a name refers to a known aggregate function."""
        return name in self._names

    def names(self) -> list[str]:
        return sorted(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._names)

    def discover(self, libdirs: Iterable[str | Path]) -> int:
        """
        Register aggregate plugins found below each libdir.

        Returns:
            Number of names found (including already registered ones)
        """
        found = 0
        for libdir in libdirs:
            plugin_dir = Path(libdir) / AGGREGATE_DIR
            if not plugin_dir.is_dir():
                continue

            for path in sorted(plugin_dir.iterdir()):
                if path.suffix not in _PLUGIN_SUFFIXES or path.stem.startswith("_"):
                    continue
                if not path.stem.isidentifier():
                    logger.warning(f"Ignoring aggregate plugin with invalid name: {path}")
                    continue
                self._names.add(path.stem)
                found += 1
                logger.debug(f"Found aggregate function {path.stem} at {path}")

        return found

    def load_entry_points(self, group: str = AGGREGATE_ENTRY_POINT) -> int:
        """
        Register aggregate functions advertised via entry points.

        Returns:
            Number of entry points registered
        """
        count = 0
        for ep in entry_points(group=group):
            try:
                self.register(ep.name)
                count += 1
            except ValueError as e:
                logger.warning(f"Failed to register aggregate entry point {ep.name}: {e}")
        return count

    @classmethod
    def from_config(cls, config: "DDLConfig") -> "AggregateRegistry":
        """Build a registry from the configured search path and entry points."""
        registry = cls()
        registry.discover(config.libdirs)
        if config.aggregate_entry_points:
            registry.load_entry_points()
        logger.debug(f"Aggregate registry has {len(registry)} function(s)")
        return registry
