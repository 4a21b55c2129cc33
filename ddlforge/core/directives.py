"""
DDLForge Directives

Tagged directive variants produced by the DDL parser. A parsed DDL is an
ordered tuple of these; entity directives carry their nested block in
``body``. Argument values are plain Python literals, except that nested
calls (``summary("status")``) are kept as unresolved FunctionRef values for
the aggregate recognizer.
"""

from dataclasses import dataclass, field
from typing import Any

__all__ = [
    "FunctionRef",
    "Directive",
    "Metadata",
    "Action",
    "Dataquery",
    "Discovery",
    "Capabilities",
    "Input",
    "Output",
    "Display",
    "Aggregate",
    "Summarize",
    "Call",
    "BLOCK_DIRECTIVES",
]


@dataclass(frozen=True)
class FunctionRef:
    """A call expression whose name is not a directive."""

    name: str
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)
    lineno: int = 0


@dataclass(frozen=True, kw_only=True)
class Directive:
    lineno: int = 0


@dataclass(frozen=True, kw_only=True)
class Metadata(Directive):
    fields: Any


@dataclass(frozen=True, kw_only=True)
class Action(Directive):
    name: Any
    props: Any
    body: tuple[Directive, ...] = ()


@dataclass(frozen=True, kw_only=True)
class Dataquery(Directive):
    props: Any
    body: tuple[Directive, ...] = ()


@dataclass(frozen=True, kw_only=True)
class Discovery(Directive):
    body: tuple[Directive, ...] = ()


@dataclass(frozen=True, kw_only=True)
class Capabilities(Directive):
    caps: Any


@dataclass(frozen=True, kw_only=True)
class Input(Directive):
    name: Any
    props: Any


@dataclass(frozen=True, kw_only=True)
class Output(Directive):
    name: Any
    props: Any


@dataclass(frozen=True, kw_only=True)
class Display(Directive):
    pref: Any


@dataclass(frozen=True, kw_only=True)
class Aggregate(Directive):
    function: Any
    format_spec: Any = None


@dataclass(frozen=True, kw_only=True)
class Summarize(Directive):
    body: tuple[Directive, ...] = ()


@dataclass(frozen=True, kw_only=True)
class Call(Directive):
    """A statement whose name is not a directive (possible aggregate function)."""

    ref: FunctionRef


BLOCK_DIRECTIVES = frozenset({"action", "dataquery", "discovery", "summarize"})
