"""
Command-line Argument Coercion

Arguments typed on the command line are strings. These helpers turn them into
the booleans and numbers an action's DDL declares.
"""

import re
from collections.abc import Mapping
from typing import Any

from ddlforge.core.descriptor import InputType, PluginDescriptor

__all__ = ["CoercionError", "string_to_boolean", "string_to_number", "coerce_arguments"]

_TRUE = ("true", "t", "yes", "y", "1")
_FALSE = ("false", "f", "no", "n", "0")

_FLOAT_PATTERN = re.compile(r"^\d+\.\d+$")
_INT_PATTERN = re.compile(r"^\d+$")


class CoercionError(ValueError):
    """A command-line string can't be read as the declared type."""


def string_to_boolean(val: str) -> bool:
    """Read true/t/yes/y/1 or false/f/no/n/0, case-insensitively."""
    lowered = val.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise CoercionError(f"{val} does not look like a boolean argument")


def string_to_number(val: str) -> int | float:
    """Read an unsigned integer or decimal; decimals become floats."""
    if _FLOAT_PATTERN.match(val):
        return float(val)
    if _INT_PATTERN.match(val):
        return int(val)
    raise CoercionError(f"{val} does not look like a number")


def coerce_arguments(
    descriptor: PluginDescriptor,
    action: str,
    arguments: Mapping[str, Any],
) -> dict[str, Any]:
    """
    Convert string arguments to the types declared for an action's inputs.

    Undeclared keys, non-string values, and string/list inputs are returned
    unchanged. Unknown actions are left for the validator to report.
    """
    result = dict(arguments)
    interface = descriptor.action_interface(action)
    if interface is None:
        return result

    for key, value in arguments.items():
        spec = interface.inputs.get(key)
        if spec is None or not isinstance(value, str):
            continue

        if spec.type is InputType.BOOLEAN:
            result[key] = string_to_boolean(value)
        elif spec.type in (InputType.INTEGER, InputType.NUMBER):
            result[key] = string_to_number(value)
        elif spec.type is InputType.FLOAT:
            result[key] = float(string_to_number(value))

    return result
