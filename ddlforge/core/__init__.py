"""DDLForge Core Module"""

from ddlforge.core.aggregate import AggregateRecognizer
from ddlforge.core.builder import EntityScope, SchemaBuilder
from ddlforge.core.descriptor import (
    DATA_ENTITY,
    DISCOVERY_ENTITY,
    METADATA_KEYS,
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
from ddlforge.core.evaluator import DirectiveEvaluator
from ddlforge.core.loader import DDLLoader, find_ddl_file, load_ddl
from ddlforge.core.parser import parse_ddl
from ddlforge.core.validator import RequestValidator, validate_rpc_request

__all__ = [
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
    "DATA_ENTITY",
    "DISCOVERY_ENTITY",
    "METADATA_KEYS",
    "normalize_kind",
    # Loading
    "parse_ddl",
    "SchemaBuilder",
    "EntityScope",
    "DirectiveEvaluator",
    "AggregateRecognizer",
    "DDLLoader",
    "find_ddl_file",
    "load_ddl",
    # Validation
    "RequestValidator",
    "validate_rpc_request",
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
