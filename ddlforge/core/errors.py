"""
DDLForge Errors

Two families of errors, split by phase:

- Load time (SchemaError and subclasses): a DDL file violates a structural
  rule. Fatal to the load; there is no partially valid descriptor.
- Request time (DDLValidationError and subclasses): a concrete call does not
  match the descriptor. Recoverable; usually reported back to the caller.

DescriptorNotFound is separate: the search path was exhausted, and the caller
may retry with another path or fall back.
"""

from typing import Any

__all__ = [
    "DDLError",
    "SchemaError",
    "DDLSyntaxError",
    "UnknownDirectiveError",
    "PluginKindError",
    "DescriptorNotFound",
    "DDLValidationError",
    "UnknownAction",
    "MissingRequiredArgument",
    "ArgumentTypeMismatch",
    "ArgumentTooLong",
    "ArgumentPatternMismatch",
    "ArgumentNotInList",
]


class DDLError(Exception):
    """Base class for all DDLForge errors."""


# ═══════════════════════════════════════════════════════════════════════════════
#                              LOAD-TIME ERRORS
# ═══════════════════════════════════════════════════════════════════════════════


class SchemaError(DDLError):
    """
    Raised when a directive violates a structural rule of the descriptor.

    Attributes:
        message: The rule that was violated
        location: "source:line" of the offending directive, when known
    """

    def __init__(self, message: str, location: str | None = None):
        self.message = message
        self.location = location
        super().__init__(message)

    def __str__(self) -> str:
        if self.location:
            return f"{self.location}: {self.message}"
        return self.message


class DDLSyntaxError(SchemaError):
    """The DDL text is not a sequence of directive statements."""


class UnknownDirectiveError(SchemaError):
    """A call names neither a directive nor a registered aggregate function."""

    def __init__(self, name: str, location: str | None = None, detail: str | None = None):
        self.name = name
        message = f"Unknown directive '{name}'"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message, location)


class PluginKindError(DDLError):
    """An operation was used on a descriptor of the wrong plugin kind."""


class DescriptorNotFound(DDLError):
    """No DDL file for the plugin exists in any searched directory."""

    def __init__(self, plugin_name: str, plugin_kind: str, searched: list[str]):
        self.plugin_name = plugin_name
        self.plugin_kind = plugin_kind
        self.searched = list(searched)
        super().__init__(
            f"Can't find DDL for {plugin_kind} plugin '{plugin_name}' "
            f"(searched: {', '.join(self.searched) or 'nothing'})"
        )


# ═══════════════════════════════════════════════════════════════════════════════
#                            REQUEST-TIME ERRORS
# ═══════════════════════════════════════════════════════════════════════════════


class DDLValidationError(DDLError):
    """
    Raised when a request does not conform to a plugin's DDL.

    Attributes:
        plugin: Name of the plugin the request was validated against
        action: Requested action
        key: Offending argument key (None for action-level failures)
        constraint: The constraint that was not met, for display
    """

    def __init__(
        self,
        message: str,
        plugin: str,
        action: str,
        key: str | None = None,
        constraint: Any = None,
    ):
        self.plugin = plugin
        self.action = action
        self.key = key
        self.constraint = constraint
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": type(self).__name__,
            "plugin": self.plugin,
            "action": self.action,
            "key": self.key,
            "constraint": self.constraint,
            "message": str(self),
        }


class UnknownAction(DDLValidationError):
    pass


class MissingRequiredArgument(DDLValidationError):
    pass


class ArgumentTypeMismatch(DDLValidationError):
    pass


class ArgumentTooLong(DDLValidationError):
    pass


class ArgumentPatternMismatch(DDLValidationError):
    pass


class ArgumentNotInList(DDLValidationError):
    pass
