"""
DDLForge DDL Parser

Parses DDL text into an ordered tuple of directives. DDL files use Python
call syntax but are never executed: the text is parsed with ``ast`` and only
directive calls, ``with`` blocks and literal values are accepted.

    metadata(name="Service Agent", description="Manage services", author="ops",
             license="ASL 2.0", version="1.1", url="https://example.com", timeout=60)

    with action("status", description="Gets the status of a service"):
        display("always")
        input("service", prompt="Service Name", description="The service",
              type="string", validation=r"^[a-zA-Z\\-_\\d]+$", optional=False, maxlength=30)
        output("status", description="The status of the service", display_as="Service Status")
        with summarize():
            aggregate(summary("status"))

Properties may be given as keyword arguments, as one positional dict, or both.
"""

import ast
import logging
from collections.abc import Callable
from typing import Any

from ddlforge.core.directives import (
    BLOCK_DIRECTIVES,
    Action,
    Aggregate,
    Call,
    Capabilities,
    Dataquery,
    Directive,
    Discovery,
    Display,
    FunctionRef,
    Input,
    Metadata,
    Output,
    Summarize,
)
from ddlforge.core.errors import DDLSyntaxError

logger = logging.getLogger(__name__)

__all__ = ["parse_ddl", "DIRECTIVE_NAMES"]


class _CallArgs:
    """Positional and keyword arguments of one directive call."""

    def __init__(self, name: str, args: list[Any], kwargs: dict[str, Any], location: str):
        self.name = name
        self.args = args
        self.kwargs = kwargs
        self.location = location

    def fail(self, message: str) -> DDLSyntaxError:
        return DDLSyntaxError(f"{self.name}: {message}", self.location)

    def expect(self, minimum: int, maximum: int, keywords: bool = True) -> None:
        count = len(self.args)
        if count < minimum or count > maximum:
            if minimum == maximum:
                expected = str(minimum)
            else:
                expected = f"{minimum} to {maximum}"
            raise self.fail(f"expected {expected} positional argument(s), got {count}")
        if self.kwargs and not keywords:
            raise self.fail("does not take keyword arguments")

    def props(self, start: int) -> Any:
        """Merge an optional positional property dict with keyword properties."""
        self.expect(start, start + 1)
        if len(self.args) == start:
            return dict(self.kwargs)
        positional = self.args[start]
        if not self.kwargs:
            return positional
        if not isinstance(positional, dict):
            raise self.fail("positional properties must be a dict when keywords are also given")
        return {**positional, **self.kwargs}


def _metadata(call: _CallArgs, body: tuple, lineno: int) -> Directive:
    return Metadata(fields=call.props(0), lineno=lineno)


def _action(call: _CallArgs, body: tuple, lineno: int) -> Directive:
    props = call.props(1)
    return Action(name=call.args[0], props=props, body=body, lineno=lineno)


def _dataquery(call: _CallArgs, body: tuple, lineno: int) -> Directive:
    return Dataquery(props=call.props(0), body=body, lineno=lineno)


def _discovery(call: _CallArgs, body: tuple, lineno: int) -> Directive:
    call.expect(0, 0, keywords=False)
    return Discovery(body=body, lineno=lineno)


def _summarize(call: _CallArgs, body: tuple, lineno: int) -> Directive:
    call.expect(0, 0, keywords=False)
    return Summarize(body=body, lineno=lineno)


def _capabilities(call: _CallArgs, body: tuple, lineno: int) -> Directive:
    if not call.args:
        raise call.fail("expected at least 1 positional argument")
    call.expect(1, len(call.args), keywords=False)
    caps = call.args[0] if len(call.args) == 1 else list(call.args)
    return Capabilities(caps=caps, lineno=lineno)


def _input(call: _CallArgs, body: tuple, lineno: int) -> Directive:
    props = call.props(1)
    return Input(name=call.args[0], props=props, lineno=lineno)


def _output(call: _CallArgs, body: tuple, lineno: int) -> Directive:
    props = call.props(1)
    return Output(name=call.args[0], props=props, lineno=lineno)


def _display(call: _CallArgs, body: tuple, lineno: int) -> Directive:
    call.expect(1, 1, keywords=False)
    return Display(pref=call.args[0], lineno=lineno)


def _aggregate(call: _CallArgs, body: tuple, lineno: int) -> Directive:
    call.expect(1, 2)
    if len(call.args) == 2 and call.kwargs:
        raise call.fail("give the format either as a dict or as keywords, not both")
    if len(call.args) == 2:
        format_spec = call.args[1]
    elif call.kwargs:
        format_spec = dict(call.kwargs)
    else:
        format_spec = None
    return Aggregate(function=call.args[0], format_spec=format_spec, lineno=lineno)


_DIRECTIVES: dict[str, Callable[[_CallArgs, tuple, int], Directive]] = {
    "metadata": _metadata,
    "action": _action,
    "dataquery": _dataquery,
    "discovery": _discovery,
    "summarize": _summarize,
    "capabilities": _capabilities,
    "input": _input,
    "output": _output,
    "display": _display,
    "aggregate": _aggregate,
}

DIRECTIVE_NAMES = frozenset(_DIRECTIVES)


class _Parser:
    def __init__(self, source: str):
        self.source = source

    def location(self, node: ast.AST) -> str:
        return f"{self.source}:{getattr(node, 'lineno', 0)}"

    def parse(self, text: str) -> tuple[Directive, ...]:
        try:
            tree = ast.parse(text, filename=self.source)
        except SyntaxError as e:
            raise DDLSyntaxError(f"invalid syntax: {e.msg}", f"{self.source}:{e.lineno}") from e
        return self.body(tree.body)

    def body(self, statements: list[ast.stmt]) -> tuple[Directive, ...]:
        directives = []
        for stmt in statements:
            if isinstance(stmt, ast.Pass):
                continue
            if isinstance(stmt, ast.Expr):
                value = stmt.value
                # docstrings
                if isinstance(value, ast.Constant) and isinstance(value.value, str):
                    continue
                if isinstance(value, ast.Call):
                    directives.append(self.directive(value, None))
                    continue
            elif isinstance(stmt, ast.With):
                directives.append(self.block(stmt))
                continue
            raise DDLSyntaxError(
                f"unsupported statement: {ast.unparse(stmt).splitlines()[0]}",
                self.location(stmt),
            )
        return tuple(directives)

    def block(self, stmt: ast.With) -> Directive:
        if len(stmt.items) != 1:
            raise DDLSyntaxError("a with block takes exactly one directive", self.location(stmt))
        item = stmt.items[0]
        if item.optional_vars is not None:
            raise DDLSyntaxError("directive blocks don't support 'as'", self.location(stmt))
        if not isinstance(item.context_expr, ast.Call):
            raise DDLSyntaxError("a with block must open a directive call", self.location(stmt))
        return self.directive(item.context_expr, self.body(stmt.body))

    def directive(self, node: ast.Call, body: tuple[Directive, ...] | None) -> Directive:
        ref = self.call(node)
        location = self.location(node)

        factory = _DIRECTIVES.get(ref.name)
        if factory is None:
            if body is not None:
                raise DDLSyntaxError(f"'{ref.name}' does not take a block", location)
            return Call(ref=ref, lineno=node.lineno)

        if body is not None and ref.name not in BLOCK_DIRECTIVES:
            raise DDLSyntaxError(f"'{ref.name}' does not take a block", location)

        call = _CallArgs(ref.name, list(ref.args), dict(ref.kwargs), location)
        return factory(call, body or (), node.lineno)

    def call(self, node: ast.Call) -> FunctionRef:
        if not isinstance(node.func, ast.Name):
            raise DDLSyntaxError(
                f"expected a directive name, got {ast.unparse(node.func)}", self.location(node)
            )

        args = []
        for arg in node.args:
            if isinstance(arg, ast.Starred):
                raise DDLSyntaxError("*args are not supported", self.location(node))
            args.append(self.value(arg))

        kwargs = {}
        for keyword in node.keywords:
            if keyword.arg is None:
                raise DDLSyntaxError("**kwargs are not supported", self.location(node))
            kwargs[keyword.arg] = self.value(keyword.value)

        return FunctionRef(name=node.func.id, args=tuple(args), kwargs=kwargs, lineno=node.lineno)

    def value(self, node: ast.expr) -> Any:
        if isinstance(node, ast.Call):
            return self.call(node)
        if isinstance(node, ast.List):
            return [self.value(e) for e in node.elts]
        if isinstance(node, ast.Tuple):
            return tuple(self.value(e) for e in node.elts)
        if isinstance(node, ast.Dict):
            result = {}
            for key, value in zip(node.keys, node.values):
                if key is None:
                    raise DDLSyntaxError("** unpacking is not supported", self.location(node))
                result[self.literal(key)] = self.value(value)
            return result
        return self.literal(node)

    def literal(self, node: ast.expr) -> Any:
        try:
            return ast.literal_eval(node)
        except (ValueError, TypeError, SyntaxError):
            raise DDLSyntaxError(
                f"expected a literal value, got {ast.unparse(node)}", self.location(node)
            ) from None


def parse_ddl(text: str, source: str = "<ddl>") -> tuple[Directive, ...]:
    """
    Parse DDL text into directives.

    Args:
        text: DDL source
        source: Name used in error locations (usually the file path)

    Returns:
        Top-level directives in source order

    Raises:
        DDLSyntaxError: If the text is not a sequence of directive statements
    """
    directives = _Parser(source).parse(text)
    logger.debug(f"Parsed {len(directives)} top-level directive(s) from {source}")
    return directives
