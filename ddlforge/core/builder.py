"""
DDLForge Schema Builder

Incrementally assembles a PluginDescriptor, enforcing structural rules at the
moment each directive is issued.

Entity directives (action, dataquery, discovery) return an EntityScope: an
explicit, immutable handle on the entity being described. Entity-level
directives (input, output, display, capabilities, aggregate) are only
reachable through a scope, so there is no "current entity" state on the
builder itself.

Usage:
    builder = SchemaBuilder("service", "agent")
    builder.metadata({...})

    with builder.action("status", {"description": "Gets the status"}) as act:
        act.display("always")
        act.input("service", {
            "prompt": "Service Name",
            "description": "The service to check",
            "type": "string",
            "validation": r"^[a-zA-Z\\-_\\d]+$",
            "maxlength": 30,
            "optional": False,
        })

    descriptor = builder.finish()
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from typing import Any

from ddlforge.core.descriptor import (
    DATA_ENTITY,
    DISCOVERY_ENTITY,
    ActionEntity,
    AggregateCall,
    Capability,
    DataQueryEntity,
    DiscoveryEntity,
    DisplayPolicy,
    InputDescriptor,
    InputType,
    OutputDescriptor,
    PluginDescriptor,
    PluginKind,
    normalize_kind,
)
from ddlforge.core.errors import SchemaError
from ddlforge.core.props import (
    DescribedProps,
    InputProps,
    MetadataProps,
    OutputProps,
    validate_props,
)

logger = logging.getLogger(__name__)

__all__ = ["SchemaBuilder", "EntityScope"]

_CAPABILITY_NAMES = [c.value for c in Capability]
_DISPLAY_NAMES = [d.value for d in DisplayPolicy]


def _enumerate(names: list[str]) -> str:
    return f"{', '.join(names[:-1])} and {names[-1]}"


def _check_name(name: Any, what: str) -> str:
    if not isinstance(name, str) or not name:
        raise SchemaError(f"{what} name should be a non-empty string, got {name!r}")
    return name


@dataclass(frozen=True)
class EntityScope:
    """
    Handle on one entity of a SchemaBuilder.

    Attributes:
        builder: Builder owning the entity
        key: Entity key (action name, "data" or "discovery")
        aggregate_mode: True inside a summarize region
    """

    builder: "SchemaBuilder"
    key: str
    aggregate_mode: bool = False

    def __enter__(self) -> "EntityScope":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        return None

    def input(self, name: str, props: Mapping[str, Any]) -> None:
        self.builder._add_input(self, name, props)

    def output(self, name: str, props: Mapping[str, Any]) -> None:
        self.builder._add_output(self, name, props)

    def display(self, pref: "str | DisplayPolicy") -> None:
        self.builder._set_display(self, pref)

    def capabilities(self, caps: Any) -> None:
        self.builder._add_capabilities(self, caps)

    def aggregate(
        self,
        function: Any,
        format_spec: Mapping[str, Any] | None = None,
    ) -> None:
        self.builder._add_aggregate(self, function, format_spec)

    def summarize(self) -> "EntityScope":
        """Scope for a summarize region of an action."""
        self.builder._require_action(self, "summarize")
        return replace(self, aggregate_mode=True)


class SchemaBuilder:
    """
    Builds one PluginDescriptor in a single sequential pass.

    Every method raises SchemaError as soon as a rule is broken.
    """

    def __init__(self, plugin_name: str, plugin_kind: "str | PluginKind" = PluginKind.AGENT):
        self.plugin_name = plugin_name
        self.plugin_kind = normalize_kind(plugin_kind)
        self._metadata: dict[str, Any] | None = None
        self._entities: dict[str, Any] = {}

    # ─────────────────────────────────────────────────────────────────────────
    #                          Plugin-level directives
    # ─────────────────────────────────────────────────────────────────────────

    def metadata(self, fields: Mapping[str, Any]) -> None:
        """Register plugin metadata; all seven keys are required."""
        if self._metadata is not None:
            raise SchemaError("Metadata can only be defined once")
        validate_props(MetadataProps, fields, "Metadata")
        self._metadata = dict(fields)

    def action(self, name: str, props: Mapping[str, Any]) -> EntityScope:
        """
        Define an action of an agent plugin.

        A repeated action name keeps the first definition and returns a scope
        on it, so later blocks can attach more inputs and outputs.
        """
        self._require_kind(PluginKind.AGENT, "Only agent DDLs have actions")
        _check_name(name, "Action")
        described = validate_props(DescribedProps, props, f"Action {name}")

        if name not in self._entities:
            self._entities[name] = ActionEntity(name=name, description=described.description)
        else:
            logger.debug(f"Action {name} already defined, attaching to existing definition")

        return EntityScope(self, name)

    def dataquery(self, props: Mapping[str, Any]) -> EntityScope:
        """Define the single data query of a data plugin."""
        self._require_kind(PluginKind.DATA, "Only data DDLs have data queries")
        described = validate_props(DescribedProps, props, "Data query")
        if DATA_ENTITY in self._entities:
            raise SchemaError("Data queries can only have one definition")

        self._entities[DATA_ENTITY] = DataQueryEntity(description=described.description)
        return EntityScope(self, DATA_ENTITY)

    def discovery(self) -> EntityScope:
        """Define the single discovery interface of a discovery plugin."""
        self._require_kind(PluginKind.DISCOVERY, "Only discovery DDLs have discovery definitions")
        if DISCOVERY_ENTITY in self._entities:
            raise SchemaError("Discovery plugins can only have one definition")

        self._entities[DISCOVERY_ENTITY] = DiscoveryEntity()
        return EntityScope(self, DISCOVERY_ENTITY)

    def finish(self) -> PluginDescriptor:
        """Freeze what has been declared into a PluginDescriptor."""
        return PluginDescriptor(
            plugin_name=self.plugin_name,
            plugin_kind=self.plugin_kind,
            metadata=self._metadata or {},
            entities=self._entities,
        )

    # ─────────────────────────────────────────────────────────────────────────
    #                          Entity-level directives
    # ─────────────────────────────────────────────────────────────────────────

    def _add_input(self, scope: EntityScope, name: str, props: Mapping[str, Any]) -> None:
        entity = self._entity(scope)
        _check_name(name, "Input")
        if isinstance(entity, DiscoveryEntity):
            raise SchemaError(f"Discovery definitions can't declare input {name}")
        if self.plugin_kind == PluginKind.DATA.value and name != "query":
            raise SchemaError("The only valid input name for a data query is 'query'")

        validated = validate_props(
            InputProps, props, f"Input {name}", context={"plugin_kind": self.plugin_kind}
        )

        spec = InputDescriptor(
            prompt=validated.prompt,
            description=validated.description,
            type=validated.type,
            optional=validated.optional,
        )
        if validated.type is InputType.STRING:
            spec = replace(spec, validation=validated.validation, maxlength=validated.maxlength)
        elif validated.type is InputType.LIST:
            spec = replace(spec, choices=tuple(validated.choices))

        self._entities[scope.key] = entity.with_input(name, spec)

    def _add_output(self, scope: EntityScope, name: str, props: Mapping[str, Any]) -> None:
        entity = self._entity(scope)
        _check_name(name, "Output")
        if isinstance(entity, DiscoveryEntity):
            raise SchemaError(f"Discovery definitions can't declare output {name}")

        validated = validate_props(OutputProps, props, f"Output {name}")
        spec = OutputDescriptor(
            description=validated.description,
            display_as=validated.display_as,
            default=validated.default,
        )
        self._entities[scope.key] = entity.with_output(name, spec)

    def _set_display(self, scope: EntityScope, pref: Any) -> None:
        entity = self._require_action(scope, "display")
        try:
            policy = DisplayPolicy(pref)
        except ValueError:
            raise SchemaError(
                f"Display preference {pref} is not valid, should be {_enumerate(_DISPLAY_NAMES)}"
            ) from None
        self._entities[scope.key] = entity.with_display(policy)

    def _add_capabilities(self, scope: EntityScope, caps: Any) -> None:
        if self.plugin_kind != PluginKind.DISCOVERY.value:
            raise SchemaError("Only discovery DDLs have capabilities")
        entity = self._entity(scope)
        if not isinstance(entity, DiscoveryEntity):
            raise SchemaError("Capabilities can only be declared in a discovery definition")

        if isinstance(caps, (str, Capability)) or not isinstance(caps, Iterable):
            caps = [caps]
        caps = list(caps)
        if not caps:
            raise SchemaError("Discovery plugin capabilities can't be empty")

        valid = []
        for cap in caps:
            try:
                valid.append(Capability(cap))
            except ValueError:
                raise SchemaError(
                    f"{cap} is not a valid capability, valid capabilities are "
                    f"{_enumerate(_CAPABILITY_NAMES)}"
                ) from None

        self._entities[scope.key] = entity.with_capabilities(tuple(valid))

    def _add_aggregate(
        self,
        scope: EntityScope,
        function: Any,
        format_spec: Mapping[str, Any] | None,
    ) -> None:
        entity = self._require_action(scope, "aggregate")
        if format_spec is None:
            format_spec = {"format": None}

        if not isinstance(format_spec, Mapping):
            raise SchemaError("Formats supplied to aggregation functions should be a mapping")
        if "format" not in format_spec:
            raise SchemaError("Formats supplied to aggregation functions must have a 'format' key")
        if not isinstance(function, AggregateCall):
            raise SchemaError("Functions supplied to aggregate should be aggregate function calls")
        if not function.args:
            raise SchemaError(
                f"aggregate method for action '{entity.name}' missing a function parameter"
            )

        fmt = format_spec["format"]
        if fmt is not None:
            if not isinstance(fmt, str):
                raise SchemaError(f"Aggregate format for action '{entity.name}' should be a string")
            function = replace(function, format=fmt)

        self._entities[scope.key] = entity.with_aggregate(function)

    # ─────────────────────────────────────────────────────────────────────────
    #                                Helpers
    # ─────────────────────────────────────────────────────────────────────────

    def _require_kind(self, kind: PluginKind, message: str) -> None:
        if self.plugin_kind != kind.value:
            raise SchemaError(message)

    def _entity(self, scope: EntityScope) -> Any:
        if scope.builder is not self or scope.key not in self._entities:
            raise SchemaError(f"Cannot figure out what entity '{scope.key}' refers to")
        return self._entities[scope.key]

    def _require_action(self, scope: EntityScope, directive: str) -> ActionEntity:
        entity = self._entity(scope)
        if not isinstance(entity, ActionEntity):
            raise SchemaError(f"{directive} can only be used inside an action")
        return entity
