"""
DDLForge Descriptor Model

Passive, immutable description of a plugin's calling interface:

    PluginDescriptor
      ├── metadata            name, description, author, license, version, url, timeout
      └── entities
            ├── <action>      ActionEntity      (agent plugins, one per action)
            ├── "data"        DataQueryEntity   (data plugins, exactly one)
            └── "discovery"   DiscoveryEntity   (discovery plugins, exactly one)

Descriptors are produced by SchemaBuilder.finish() and never change afterwards.
Entities expose with_*() helpers that return updated copies; the builder uses
them while a DDL is being evaluated.
"""

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from ddlforge.core.errors import PluginKindError

__all__ = [
    "PluginKind",
    "DisplayPolicy",
    "Capability",
    "InputType",
    "DATA_ENTITY",
    "DISCOVERY_ENTITY",
    "METADATA_KEYS",
    "InputDescriptor",
    "OutputDescriptor",
    "AggregateCall",
    "ActionEntity",
    "DataQueryEntity",
    "DiscoveryEntity",
    "PluginDescriptor",
    "normalize_kind",
]

DATA_ENTITY = "data"
DISCOVERY_ENTITY = "discovery"

METADATA_KEYS = ("name", "description", "author", "license", "version", "url", "timeout")

_KIND_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$")


class PluginKind(str, Enum):
    """Plugin kinds with dedicated entity semantics. Other kinds carry metadata only."""

    AGENT = "agent"
    DATA = "data"
    DISCOVERY = "discovery"


class DisplayPolicy(str, Enum):
    """When an action's result is shown to the user"""

    OK = "ok"
    FAILED = "failed"
    FLATTEN = "flatten"
    ALWAYS = "always"


class Capability(str, Enum):
    """Discovery plugin capabilities"""

    CLASSES = "classes"
    FACTS = "facts"
    IDENTITY = "identity"
    AGENTS = "agents"
    COMPOUND = "compound"


class InputType(str, Enum):
    """Declared type of an action input"""

    STRING = "string"
    LIST = "list"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    NUMBER = "number"


def normalize_kind(kind: "str | PluginKind") -> str:
    """
    Normalize a plugin kind to its string form.

    Known kinds map to their PluginKind value; any other lowercase identifier
    is accepted as an extensible kind.
    """
    value = kind.value if isinstance(kind, PluginKind) else str(kind).strip().lower()
    if not _KIND_PATTERN.match(value):
        raise PluginKindError(f"Invalid plugin kind: {kind!r}")
    return value


def _freeze(mapping: Mapping[str, Any] | None = None) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


# ═══════════════════════════════════════════════════════════════════════════════
#                              INPUTS / OUTPUTS
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class InputDescriptor:
    """
    Declared input of an action or data query.

    Attributes:
        prompt: Short label used when asking for the value
        description: Human-readable description
        type: Declared InputType
        optional: Whether callers may omit it (always set for agent plugins)
        validation: Regular expression a string value must fully match
        maxlength: Maximum string length, 0 disables the check
        choices: Allowed values of a list input (the DDL's ``list`` property)
    """

    prompt: str
    description: str
    type: InputType
    optional: bool | None = None
    validation: str | None = None
    maxlength: int | None = None
    choices: tuple[Any, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the structure declared in the DDL."""
        result: dict[str, Any] = {
            "prompt": self.prompt,
            "description": self.description,
            "type": self.type.value,
            "optional": self.optional,
        }
        if self.type is InputType.STRING:
            result["validation"] = self.validation
            result["maxlength"] = self.maxlength
        elif self.type is InputType.LIST:
            result["list"] = list(self.choices or ())
        return result


@dataclass(frozen=True)
class OutputDescriptor:
    """Declared output of an action or data query"""

    description: str
    display_as: str
    default: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "description": self.description,
            "display_as": self.display_as,
            "default": self.default,
        }


@dataclass(frozen=True)
class AggregateCall:
    """
    Reference to a registered aggregate function, with its arguments.

    Only the aggregate recognizer creates these.
    """

    function: str
    args: tuple[Any, ...]
    format: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"function": self.function, "args": list(self.args)}
        if self.format is not None:
            result["format"] = self.format
        return result


# ═══════════════════════════════════════════════════════════════════════════════
#                                  ENTITIES
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class ActionEntity:
    """An agent action and its interface"""

    name: str
    description: str
    display: DisplayPolicy = DisplayPolicy.FAILED
    inputs: Mapping[str, InputDescriptor] = field(default_factory=_freeze)
    outputs: Mapping[str, OutputDescriptor] = field(default_factory=_freeze)
    aggregate: tuple[AggregateCall, ...] = ()

    def with_input(self, name: str, spec: InputDescriptor) -> "ActionEntity":
        return replace(self, inputs=_freeze({**self.inputs, name: spec}))

    def with_output(self, name: str, spec: OutputDescriptor) -> "ActionEntity":
        return replace(self, outputs=_freeze({**self.outputs, name: spec}))

    def with_display(self, display: DisplayPolicy) -> "ActionEntity":
        return replace(self, display=display)

    def with_aggregate(self, call: AggregateCall) -> "ActionEntity":
        return replace(self, aggregate=self.aggregate + (call,))

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "action": self.name,
            "description": self.description,
            "display": self.display.value,
            "input": {k: v.to_dict() for k, v in self.inputs.items()},
            "output": {k: v.to_dict() for k, v in self.outputs.items()},
        }
        if self.aggregate:
            result["aggregate"] = [a.to_dict() for a in self.aggregate]
        return result


@dataclass(frozen=True)
class DataQueryEntity:
    """The single query interface of a data plugin"""

    description: str
    inputs: Mapping[str, InputDescriptor] = field(default_factory=_freeze)
    outputs: Mapping[str, OutputDescriptor] = field(default_factory=_freeze)

    def with_input(self, name: str, spec: InputDescriptor) -> "DataQueryEntity":
        return replace(self, inputs=_freeze({**self.inputs, name: spec}))

    def with_output(self, name: str, spec: OutputDescriptor) -> "DataQueryEntity":
        return replace(self, outputs=_freeze({**self.outputs, name: spec}))

    def to_dict(self) -> dict[str, Any]:
        return {
            "description": self.description,
            "input": {k: v.to_dict() for k, v in self.inputs.items()},
            "output": {k: v.to_dict() for k, v in self.outputs.items()},
        }


@dataclass(frozen=True)
class DiscoveryEntity:
    """Capabilities advertised by a discovery plugin"""

    capabilities: tuple[Capability, ...] = ()

    def with_capabilities(self, caps: tuple[Capability, ...]) -> "DiscoveryEntity":
        return replace(self, capabilities=self.capabilities + tuple(caps))

    def to_dict(self) -> dict[str, Any]:
        return {"capabilities": [c.value for c in self.capabilities]}


Entity = ActionEntity | DataQueryEntity | DiscoveryEntity


# ═══════════════════════════════════════════════════════════════════════════════
#                             PLUGIN DESCRIPTOR
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class PluginDescriptor:
    """
    Complete, read-only description of a plugin's interface.

    Attributes:
        plugin_name: Plugin identifier the DDL was loaded for
        plugin_kind: "agent", "data", "discovery" or an extensible kind
        metadata: The metadata directive's fields, verbatim
        entities: Entity key -> entity, in declaration order
    """

    plugin_name: str
    plugin_kind: str
    metadata: Mapping[str, Any] = field(default_factory=_freeze)
    entities: Mapping[str, Entity] = field(default_factory=_freeze)

    def __post_init__(self):
        object.__setattr__(self, "plugin_kind", normalize_kind(self.plugin_kind))
        object.__setattr__(self, "metadata", _freeze(self.metadata))
        object.__setattr__(self, "entities", _freeze(self.entities))

    @property
    def display_name(self) -> str:
        """Metadata name, falling back to the plugin identifier."""
        return self.metadata.get("name", self.plugin_name)

    def _require_kind(self, kind: PluginKind, message: str) -> None:
        if self.plugin_kind != kind.value:
            raise PluginKindError(message)

    def actions(self) -> list[str]:
        """Names of the actions this agent supports."""
        self._require_kind(PluginKind.AGENT, "Only agent DDLs have actions")
        return list(self.entities.keys())

    def action_interface(self, name: str) -> ActionEntity | None:
        """Interface of a single action, None if it is not declared."""
        self._require_kind(PluginKind.AGENT, "Only agent DDLs have actions")
        return self.entities.get(name)

    def dataquery_interface(self) -> DataQueryEntity | None:
        self._require_kind(PluginKind.DATA, "Only data DDLs have data queries")
        return self.entities.get(DATA_ENTITY)

    def discovery_interface(self) -> DiscoveryEntity | None:
        self._require_kind(
            PluginKind.DISCOVERY, "Only discovery DDLs have discovery interfaces"
        )
        return self.entities.get(DISCOVERY_ENTITY)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (for serialization/help rendering)."""
        return {
            "plugin_name": self.plugin_name,
            "plugin_kind": self.plugin_kind,
            "metadata": dict(self.metadata),
            "entities": {k: v.to_dict() for k, v in self.entities.items()},
        }
