"""
DDLForge: Plugin Interface Descriptions

Loads DDL files that describe a plugin's calling interface (metadata, actions,
inputs, outputs, aggregate summaries) into immutable descriptors, validates
requests against them and renders help.

Usage:
    import ddlforge

    config = ddlforge.DDLConfig(libdirs=["/usr/libexec/ddlforge"])
    ddl = ddlforge.load_ddl("service", "agent", config=config)

    ddl.actions()                          # ["restart", "status"]
    ddl.action_interface("status")         # ActionEntity

    ddlforge.validate_rpc_request(ddl, "status", {"service": "nginx"})
    print(ddlforge.render_help(ddl))

A DDL file is a sequence of directive calls:

    metadata(name="Service", description="Manage services", author="ops",
             license="ASL 2.0", version="1.0", url="https://example.net", timeout=60)

    with action("status", description="Gets the status of a service"):
        display("always")
        input("service", prompt="Service Name", description="The service",
              type="string", validation=r"^[a-zA-Z\\-_\\d]+$", optional=False, maxlength=30)
        output("status", description="The status", display_as="Service Status")
        with summarize():
            aggregate(summary("status"))

CLI Usage:
    ddlforge help service
    ddlforge check service --json
    ddlforge validate service status service=nginx
"""

# Configuration
from ddlforge.config import ConfigError, DDLConfig, get_config, reset_config, set_config

# Descriptor model, loading and validation
from ddlforge.core import (
    ActionEntity,
    AggregateCall,
    Capability,
    DataQueryEntity,
    DDLLoader,
    DiscoveryEntity,
    DisplayPolicy,
    InputDescriptor,
    InputType,
    OutputDescriptor,
    PluginDescriptor,
    PluginKind,
    RequestValidator,
    SchemaBuilder,
    load_ddl,
    parse_ddl,
    validate_rpc_request,
)

# Errors
from ddlforge.core.errors import (
    ArgumentNotInList,
    ArgumentPatternMismatch,
    ArgumentTooLong,
    ArgumentTypeMismatch,
    DDLError,
    DDLSyntaxError,
    DDLValidationError,
    DescriptorNotFound,
    MissingRequiredArgument,
    PluginKindError,
    SchemaError,
    UnknownAction,
    UnknownDirectiveError,
)

# Help
from ddlforge.help import render_help

# Plugins
from ddlforge.plugins import AggregateRegistry

# Utilities
from ddlforge.utils import (
    CoercionError,
    coerce_arguments,
    configure_logging,
    get_logger,
    LogContext,
)

__version__ = "0.1.0"
__all__ = [
    # Configuration
    "DDLConfig",
    "ConfigError",
    "get_config",
    "set_config",
    "reset_config",
    # Descriptor model
    "PluginDescriptor",
    "PluginKind",
    "ActionEntity",
    "DataQueryEntity",
    "DiscoveryEntity",
    "InputDescriptor",
    "OutputDescriptor",
    "AggregateCall",
    "InputType",
    "DisplayPolicy",
    "Capability",
    # Loading
    "DDLLoader",
    "SchemaBuilder",
    "load_ddl",
    "parse_ddl",
    "AggregateRegistry",
    # Validation
    "RequestValidator",
    "validate_rpc_request",
    "coerce_arguments",
    "CoercionError",
    # Help
    "render_help",
    # Logging
    "configure_logging",
    "get_logger",
    "LogContext",
    # Errors
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
