"""
DDLForge Directive Evaluator

Applies parsed directives to a SchemaBuilder in source order. The scope of
the entity being described is passed explicitly down the recursion, together
with the aggregate mode of the current region; nothing about the evaluation
is kept in shared state between directives.

Name resolution is two-phase: the parser already dispatched every directive
name it knows, so only the remaining calls reach the aggregate recognizer,
which accepts them solely inside summarize regions.
"""

import logging
from typing import Any

from ddlforge.core.aggregate import AggregateRecognizer
from ddlforge.core.builder import EntityScope, SchemaBuilder
from ddlforge.core.directives import (
    Action,
    Aggregate,
    Call,
    Capabilities,
    Dataquery,
    Directive,
    Discovery,
    Display,
    Input,
    Metadata,
    Output,
    Summarize,
)
from ddlforge.core.errors import SchemaError

logger = logging.getLogger(__name__)

__all__ = ["DirectiveEvaluator"]


class DirectiveEvaluator:
    """
    Evaluates a directive tree against a builder.

    Args:
        builder: Builder receiving the directives
        recognizer: Aggregate recognizer used for function references
        summarize_enabled: False when running as the authoritative server;
            summarize blocks are then skipped entirely
        source: Name used in error locations
    """

    def __init__(
        self,
        builder: SchemaBuilder,
        recognizer: AggregateRecognizer,
        summarize_enabled: bool = True,
        source: str = "<ddl>",
    ):
        self.builder = builder
        self.recognizer = recognizer
        self.summarize_enabled = summarize_enabled
        self.source = source
        self._handlers = {
            Metadata: self._metadata,
            Action: self._action,
            Dataquery: self._dataquery,
            Discovery: self._discovery,
            Capabilities: self._capabilities,
            Input: self._input,
            Output: self._output,
            Display: self._display,
            Aggregate: self._aggregate,
            Summarize: self._summarize,
            Call: self._call,
        }

    def evaluate(self, directives: tuple[Directive, ...]) -> None:
        """Apply top-level directives. Raises the first SchemaError met."""
        self._apply_all(directives, None)

    def _apply_all(self, directives: tuple[Directive, ...], scope: EntityScope | None) -> None:
        for directive in directives:
            try:
                self._handlers[type(directive)](directive, scope)
            except SchemaError as e:
                if e.location is None:
                    e.location = f"{self.source}:{directive.lineno}"
                raise

    def _resolve(self, value: Any, scope: EntityScope | None) -> Any:
        active = scope is not None and scope.aggregate_mode
        return self.recognizer.resolve(value, active)

    def _top_level(self, scope: EntityScope | None, name: str) -> None:
        if scope is not None:
            raise SchemaError(f"{name} can't be nested inside '{scope.key}'")

    def _entity_level(self, scope: EntityScope | None, what: str) -> EntityScope:
        if scope is None:
            raise SchemaError(f"Cannot figure out what entity {what} belongs to")
        return scope

    # ─────────────────────────────────────────────────────────────────────────
    #                              Handlers
    # ─────────────────────────────────────────────────────────────────────────

    def _metadata(self, d: Metadata, scope: EntityScope | None) -> None:
        self._top_level(scope, "metadata")
        self.builder.metadata(self._resolve(d.fields, scope))

    def _action(self, d: Action, scope: EntityScope | None) -> None:
        self._top_level(scope, f"action {d.name}")
        entity = self.builder.action(d.name, self._resolve(d.props, scope))
        self._apply_all(d.body, entity)

    def _dataquery(self, d: Dataquery, scope: EntityScope | None) -> None:
        self._top_level(scope, "dataquery")
        entity = self.builder.dataquery(self._resolve(d.props, scope))
        self._apply_all(d.body, entity)

    def _discovery(self, d: Discovery, scope: EntityScope | None) -> None:
        self._top_level(scope, "discovery")
        entity = self.builder.discovery()
        self._apply_all(d.body, entity)

    def _capabilities(self, d: Capabilities, scope: EntityScope | None) -> None:
        self._entity_level(scope, "capabilities").capabilities(self._resolve(d.caps, scope))

    def _input(self, d: Input, scope: EntityScope | None) -> None:
        entity = self._entity_level(scope, f"input {d.name}")
        entity.input(d.name, self._resolve(d.props, scope))

    def _output(self, d: Output, scope: EntityScope | None) -> None:
        entity = self._entity_level(scope, f"output {d.name}")
        entity.output(d.name, self._resolve(d.props, scope))

    def _display(self, d: Display, scope: EntityScope | None) -> None:
        self._entity_level(scope, "display").display(self._resolve(d.pref, scope))

    def _aggregate(self, d: Aggregate, scope: EntityScope | None) -> None:
        entity = self._entity_level(scope, "aggregate")
        entity.aggregate(self._resolve(d.function, scope), self._resolve(d.format_spec, scope))

    def _summarize(self, d: Summarize, scope: EntityScope | None) -> None:
        entity = self._entity_level(scope, "summarize")
        if entity.aggregate_mode:
            raise SchemaError("summarize blocks can't be nested")
        region = entity.summarize()
        if not self.summarize_enabled:
            logger.debug(f"Skipping summarize block of {entity.key} in server mode")
            return
        self._apply_all(d.body, region)

    def _call(self, d: Call, scope: EntityScope | None) -> None:
        result = self._resolve(d.ref, scope)
        logger.warning(
            f"Aggregate function {result.function} used outside aggregate() has no effect"
        )
