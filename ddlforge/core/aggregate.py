"""
DDLForge Aggregate Recognizer

Resolves function references written inside DDL argument values. Recognition
is only active inside a summarize region; everywhere else, and for names the
aggregate registry does not know, a reference is an unknown directive. This
keeps typos outside summarize blocks from being read as aggregate functions.
"""

from typing import Any

from ddlforge.core.descriptor import AggregateCall
from ddlforge.core.directives import FunctionRef
from ddlforge.core.errors import SchemaError, UnknownDirectiveError
from ddlforge.plugins.aggregates import AggregateRegistry

__all__ = ["AggregateRecognizer"]


class AggregateRecognizer:
    """Turns function references into AggregateCall values."""

    def __init__(self, registry: AggregateRegistry):
        self.registry = registry

    def recognize(self, ref: FunctionRef, active: bool) -> AggregateCall:
        """
        Resolve one function reference.

        Args:
            ref: The unresolved call
            active: True while evaluating a summarize region

        Raises:
            UnknownDirectiveError: Recognition is inactive or the name is not registered
            SchemaError: A registered function was called with keyword arguments
        """
        if not active:
            raise UnknownDirectiveError(ref.name)
        if not self.registry.is_function(ref.name):
            raise UnknownDirectiveError(
                ref.name, detail="not a directive or a registered aggregate function"
            )
        if ref.kwargs:
            raise SchemaError(f"Aggregate function {ref.name} only takes positional arguments")

        args = tuple(self.resolve(arg, active) for arg in ref.args)
        return AggregateCall(function=ref.name, args=args)

    def resolve(self, value: Any, active: bool) -> Any:
        """Resolve every function reference nested in a DDL value."""
        if isinstance(value, FunctionRef):
            return self.recognize(value, active)
        if isinstance(value, list):
            return [self.resolve(v, active) for v in value]
        if isinstance(value, tuple):
            return tuple(self.resolve(v, active) for v in value)
        if isinstance(value, dict):
            return {k: self.resolve(v, active) for k, v in value.items()}
        return value
