"""
Unit Tests for the DDL Parser

Tests for:
- Directive calls and with blocks
- Property forms (keywords, positional dict, both)
- Function references left for the aggregate recognizer
- Rejected statements and values
"""

import pytest

from ddlforge.core.directives import (
    Action,
    Aggregate,
    Call,
    Capabilities,
    Display,
    FunctionRef,
    Input,
    Metadata,
    Summarize,
)
from ddlforge.core.errors import DDLSyntaxError
from ddlforge.core.parser import DIRECTIVE_NAMES, parse_ddl


class TestDirectives:
    """Tests for well-formed DDL text."""

    def test_directive_names(self):
        assert DIRECTIVE_NAMES == {
            "metadata", "action", "dataquery", "discovery", "summarize",
            "capabilities", "input", "output", "display", "aggregate",
        }

    def test_metadata(self):
        (directive,) = parse_ddl('metadata(name="svc", timeout=60)')

        assert isinstance(directive, Metadata)
        assert directive.fields == {"name": "svc", "timeout": 60}
        assert directive.lineno == 1

    def test_action_block(self):
        text = '''
with action("status", description="Gets the status"):
    display("always")
    input("service", prompt="Service", description="The service", type="string",
          validation="^\\\\w+$", optional=False, maxlength=30)
'''
        (action,) = parse_ddl(text)

        assert isinstance(action, Action)
        assert action.name == "status"
        assert action.props == {"description": "Gets the status"}
        assert action.lineno == 2

        display, service = action.body
        assert display == Display(pref="always", lineno=3)
        assert isinstance(service, Input)
        assert service.name == "service"
        assert service.props["validation"] == "^\\w+$"
        assert service.props["optional"] is False

    def test_positional_dict_props(self):
        (directive,) = parse_ddl('input("service", {"prompt": "Service", "type": "string"}, optional=True)')

        assert directive.props == {"prompt": "Service", "type": "string", "optional": True}

    def test_capabilities_forms(self):
        listed, spread = parse_ddl('capabilities(["facts", "classes"])\ncapabilities("facts", "classes")')

        assert isinstance(listed, Capabilities)
        assert listed.caps == ["facts", "classes"]
        assert spread.caps == ["facts", "classes"]

    def test_docstrings_and_pass_are_ignored(self):
        text = '"""Service agent interface"""\npass\nmetadata(name="svc")\n'

        (directive,) = parse_ddl(text)
        assert isinstance(directive, Metadata)

    def test_empty_text(self):
        assert parse_ddl("") == ()


class TestFunctionReferences:
    """Tests for calls that are not directives."""

    def test_aggregate_keeps_function_reference(self):
        text = '''
with action("status", description="Gets the status"):
    with summarize():
        aggregate(summary("status"), format="%s")
'''
        (action,) = parse_ddl(text)
        (summarize,) = action.body
        (aggregate,) = summarize.body

        assert isinstance(summarize, Summarize)
        assert isinstance(aggregate, Aggregate)
        assert isinstance(aggregate.function, FunctionRef)
        assert aggregate.function.name == "summary"
        assert aggregate.function.args == ("status",)
        assert aggregate.format_spec == {"format": "%s"}

    def test_aggregate_positional_format(self):
        (aggregate,) = parse_ddl('aggregate(average("size"), {"format": "%.1f"})')

        assert aggregate.format_spec == {"format": "%.1f"}

    def test_aggregate_without_format(self):
        (aggregate,) = parse_ddl('aggregate(summary("status"))')

        assert aggregate.format_spec is None

    def test_unknown_statement_becomes_call(self):
        (call,) = parse_ddl('summary("status")')

        assert isinstance(call, Call)
        assert call.ref.name == "summary"

    def test_nested_references_in_values(self):
        (directive,) = parse_ddl('metadata(name=lookup("x"), tags=[tag("a")])')

        assert isinstance(directive.fields["name"], FunctionRef)
        assert directive.fields["tags"][0].name == "tag"


class TestRejected:
    """Tests for text that is not a valid DDL."""

    def test_syntax_error(self):
        with pytest.raises(DDLSyntaxError, match="invalid syntax") as exc_info:
            parse_ddl('metadata(name="svc"', source="service.ddl")

        assert exc_info.value.location.startswith("service.ddl:")

    @pytest.mark.parametrize("text", ["x = 1", "import os", "def f():\n    pass", "for x in y:\n    pass"])
    def test_unsupported_statements(self, text):
        with pytest.raises(DDLSyntaxError, match="unsupported statement"):
            parse_ddl(text)

    def test_non_literal_value(self):
        with pytest.raises(DDLSyntaxError, match="expected a literal value"):
            parse_ddl('display(policy)')

    def test_attribute_call(self):
        with pytest.raises(DDLSyntaxError, match="expected a directive name"):
            parse_ddl('os.system("true")')

    def test_block_on_plain_directive(self):
        with pytest.raises(DDLSyntaxError, match="'input' does not take a block"):
            parse_ddl('with input("x"):\n    pass')

    def test_block_on_unknown_call(self):
        with pytest.raises(DDLSyntaxError, match="'helper' does not take a block"):
            parse_ddl('with helper():\n    pass')

    def test_block_with_as(self):
        with pytest.raises(DDLSyntaxError, match="don't support 'as'"):
            parse_ddl('with action("status", description="d") as a:\n    pass')

    def test_star_args(self):
        with pytest.raises(DDLSyntaxError, match=r"\*args"):
            parse_ddl('input(*names)')

    def test_wrong_argument_count(self):
        with pytest.raises(DDLSyntaxError, match="expected 1 positional argument"):
            parse_ddl('display("ok", "failed")')

    def test_display_takes_no_keywords(self):
        with pytest.raises(DDLSyntaxError, match="does not take keyword arguments"):
            parse_ddl('display("ok", force=True)')

    def test_format_given_twice(self):
        with pytest.raises(DDLSyntaxError, match="not both"):
            parse_ddl('aggregate(summary("x"), {"format": "%s"}, format="%d")')

    def test_error_location(self):
        with pytest.raises(DDLSyntaxError) as exc_info:
            parse_ddl('metadata(name="svc")\n\ndisplay()', source="service.ddl")

        assert exc_info.value.location == "service.ddl:3"
        assert str(exc_info.value).startswith("service.ddl:3: display:")
