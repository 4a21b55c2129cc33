"""
DDLForge Directive Property Records

Pydantic models for the property records passed to DDL directives, and the
translation of pydantic validation failures into SchemaError, so a bad DDL
fails at the directive that introduced the problem with a message naming the
property.
"""

import re
from typing import Any, List, Mapping, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

from ddlforge.core.descriptor import InputType, PluginKind
from ddlforge.core.errors import SchemaError

__all__ = [
    "MetadataProps",
    "DescribedProps",
    "InputProps",
    "OutputProps",
    "validate_props",
]


class MetadataProps(BaseModel):
    """Plugin metadata. All seven keys must be present; values are kept verbatim."""

    model_config = ConfigDict(extra="allow")

    name: Any
    description: Any
    author: Any
    license: Any
    version: Any
    url: Any
    timeout: Any


class DescribedProps(BaseModel):
    """Properties of an action or data query"""

    model_config = ConfigDict(extra="ignore")

    description: StrictStr


class InputProps(BaseModel):
    """
    Properties of an input declaration.

    Validation context:
        plugin_kind: kind of the plugin being built; agent plugins must
            declare ``optional`` explicitly
    """

    model_config = ConfigDict(extra="ignore")

    prompt: StrictStr
    description: StrictStr
    type: InputType
    optional: Optional[StrictBool] = None
    validation: Optional[StrictStr] = None
    maxlength: Optional[StrictInt] = Field(default=None, ge=0)
    choices: Optional[List[Any]] = Field(default=None, alias="list")

    @field_validator("validation")
    @classmethod
    def _compiles(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            try:
                re.compile(value)
            except re.error as e:
                raise ValueError(f"'{value}' is not a valid regular expression: {e}") from e
        return value

    @model_validator(mode="after")
    def _check_requirements(self, info: ValidationInfo) -> "InputProps":
        context = info.context or {}
        if context.get("plugin_kind") == PluginKind.AGENT.value:
            if "optional" not in self.model_fields_set:
                raise ValueError("Input needs a 'optional' property")

        if self.type is InputType.STRING:
            if self.validation is None:
                raise ValueError("Input type 'string' needs a 'validation' property")
            if self.maxlength is None:
                raise ValueError("Input type 'string' needs a 'maxlength' property")
        elif self.type is InputType.LIST:
            if not self.choices:
                raise ValueError("Input type 'list' needs a non-empty 'list' property")

        return self


class OutputProps(BaseModel):
    """Properties of an output declaration"""

    model_config = ConfigDict(extra="ignore")

    description: StrictStr
    display_as: StrictStr
    default: Any = None


def validate_props(
    model: type[BaseModel],
    props: Any,
    what: str,
    context: dict[str, Any] | None = None,
) -> Any:
    """
    Validate a directive's property record against a pydantic model.

    Args:
        model: Pydantic model describing the record
        props: The record as written in the DDL
        what: Directive description used in messages (e.g. "Input service")
        context: Validation context passed to model validators

    Returns:
        Validated model instance

    Raises:
        SchemaError: On the first missing or invalid property
    """
    if not isinstance(props, Mapping):
        raise SchemaError(f"{what} properties should be a mapping, got {type(props).__name__}")

    try:
        return model.model_validate(dict(props), context=context)
    except ValidationError as e:
        raise SchemaError(_describe(e.errors()[0], what)) from e


def _describe(error: dict[str, Any], what: str) -> str:
    """Turn one pydantic error into a DDL-oriented message."""
    loc = ".".join(str(part) for part in error.get("loc", ()))
    if error.get("type") == "missing":
        return f"{what} needs a '{loc}' property"

    cause = error.get("ctx", {}).get("error")
    detail = str(cause) if isinstance(cause, Exception) else error.get("msg", "invalid")
    if not loc:
        return f"{what}: {detail}"
    return f"{what} property '{loc}' is invalid: {detail}"
