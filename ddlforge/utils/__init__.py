"""DDLForge Utilities Module"""

# Structured logging
from ddlforge.utils.logging import (
    configure_logging,
    get_logger,
    LogContext,
)

# Command-line argument coercion
from ddlforge.utils.coercion import (
    CoercionError,
    coerce_arguments,
    string_to_boolean,
    string_to_number,
)

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "LogContext",
    # Coercion
    "CoercionError",
    "coerce_arguments",
    "string_to_boolean",
    "string_to_number",
]
