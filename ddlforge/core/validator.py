"""
DDLForge Request Validator

Checks a concrete call (action name plus argument mapping) against an agent
descriptor before it is dispatched.

Only declared inputs are checked. Arguments the DDL does not mention are let
through, since callers commonly pass extra context alongside the inputs.
Checks are fail-fast: the first violation is raised.

Usage:
    from ddlforge import RequestValidator

    validator = RequestValidator(ddl)
    validator.validate("status", {"service": "nginx"})  # True or raises
"""

import logging
import numbers
import re
from collections.abc import Mapping
from typing import Any

from ddlforge.core.descriptor import InputDescriptor, InputType, PluginDescriptor, PluginKind
from ddlforge.core.errors import (
    ArgumentNotInList,
    ArgumentPatternMismatch,
    ArgumentTooLong,
    ArgumentTypeMismatch,
    MissingRequiredArgument,
    PluginKindError,
    UnknownAction,
)

logger = logging.getLogger(__name__)

__all__ = ["RequestValidator", "validate_rpc_request"]


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Number) and not isinstance(value, bool)


_TYPE_CHECKS = {
    InputType.BOOLEAN: (lambda v: isinstance(v, bool), "a boolean"),
    InputType.INTEGER: (_is_integer, "an integer"),
    InputType.FLOAT: (lambda v: isinstance(v, float), "a floating point number"),
    InputType.NUMBER: (_is_number, "a number"),
}


def _in_list(value: Any, choices: tuple[Any, ...]) -> bool:
    """Membership by equality, without treating booleans as 0/1."""
    return any(
        value == choice and isinstance(value, bool) == isinstance(choice, bool)
        for choice in choices
    )


class RequestValidator:
    """
    Validates requests against one agent descriptor.

    The descriptor is only read, so one validator can be shared freely.
    """

    def __init__(self, descriptor: PluginDescriptor):
        if descriptor.plugin_kind != PluginKind.AGENT.value:
            raise PluginKindError("Can only validate RPC requests against Agent DDLs")
        self.descriptor = descriptor

    @property
    def plugin(self) -> str:
        return self.descriptor.plugin_name

    def validate(self, action: str, arguments: Mapping[str, Any]) -> bool:
        """
        Validate a request.

        Returns:
            True when the request conforms

        Raises:
            UnknownAction: The action is not declared
            MissingRequiredArgument: A non-optional input is absent
            DDLValidationError: An argument violates its declaration
        """
        interface = self.descriptor.action_interface(action)
        if interface is None:
            raise UnknownAction(
                f"Attempted to call action {action} for {self.plugin} but it's not declared in the DDL",
                plugin=self.plugin,
                action=action,
            )

        for key, spec in interface.inputs.items():
            if key not in arguments:
                if not spec.optional:
                    raise MissingRequiredArgument(
                        f"Action {action} needs a {key} argument for plugin {self.plugin}",
                        plugin=self.plugin,
                        action=action,
                        key=key,
                        constraint="required",
                    )
                continue

            self.validate_argument(action, key, spec, arguments[key])

        logger.debug(f"Request {self.plugin}#{action} conforms to the DDL")
        return True

    def validate_argument(self, action: str, key: str, spec: InputDescriptor, value: Any) -> bool:
        """Validate one argument value against its input declaration."""
        if spec.type is InputType.STRING:
            self._validate_string(action, key, spec, value)

        elif spec.type is InputType.LIST:
            choices = spec.choices or ()
            if not _in_list(value, choices):
                raise ArgumentNotInList(
                    f"Input {key} doesn't match list {', '.join(str(c) for c in choices)} "
                    f"for plugin {self.plugin}",
                    plugin=self.plugin,
                    action=action,
                    key=key,
                    constraint=list(choices),
                )

        else:
            check, expected = _TYPE_CHECKS[spec.type]
            if not check(value):
                self._type_mismatch(action, key, spec, expected)

        return True

    def _validate_string(self, action: str, key: str, spec: InputDescriptor, value: Any) -> None:
        if not isinstance(value, str):
            self._type_mismatch(action, key, spec, "a string")

        maxlength = spec.maxlength or 0
        if maxlength > 0 and len(value) > maxlength:
            raise ArgumentTooLong(
                f"Input {key} is longer than {maxlength} character(s) for plugin {self.plugin}",
                plugin=self.plugin,
                action=action,
                key=key,
                constraint=maxlength,
            )

        if re.fullmatch(spec.validation, value) is None:
            raise ArgumentPatternMismatch(
                f"Input {key} does not match validation regex {spec.validation} "
                f"for plugin {self.plugin}",
                plugin=self.plugin,
                action=action,
                key=key,
                constraint=spec.validation,
            )

    def _type_mismatch(self, action: str, key: str, spec: InputDescriptor, expected: str) -> None:
        raise ArgumentTypeMismatch(
            f"Input {key} should be {expected} for plugin {self.plugin}",
            plugin=self.plugin,
            action=action,
            key=key,
            constraint=spec.type.value,
        )


def validate_rpc_request(
    descriptor: PluginDescriptor,
    action: str,
    arguments: Mapping[str, Any],
) -> bool:
    """Validate a request against an agent descriptor. See RequestValidator.validate."""
    return RequestValidator(descriptor).validate(action, arguments)
