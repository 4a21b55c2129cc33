#!/usr/bin/env python3
"""
DDLForge CLI

Command-line interface for inspecting DDL files and checking requests against them.

Usage:
    ddlforge help <plugin> [--kind agent] [--template rpc-help.j2]
    ddlforge check <plugin> [--kind agent] [--json]
    ddlforge validate <plugin> <action> [key=value ...] [--data '{"key": "value"}']
    ddlforge version

Global options:
    --libdir DIR      Library directory searched for DDL files (repeatable)
    --mode MODE       client or server
    --log-level LVL   DEBUG, INFO, WARNING or ERROR
    --json-logs       Emit JSON log lines
"""

import argparse
import json
import sys
from dataclasses import replace

from ddlforge.config import ConfigError, DDLConfig, MODES
from ddlforge.core.errors import DDLError, DDLValidationError
from ddlforge.core.loader import DDLLoader
from ddlforge.core.validator import RequestValidator
from ddlforge.utils.coercion import CoercionError, coerce_arguments
from ddlforge.utils.logging import LogContext, configure_logging, get_logger

logger = get_logger(__name__)


def _build_config(args: argparse.Namespace) -> DDLConfig:
    """Environment config, overridden by command-line options."""
    overrides = {}
    if args.libdir:
        overrides["libdirs"] = list(args.libdir)
    if args.mode:
        overrides["mode"] = args.mode
    if args.log_level:
        overrides["log_level"] = args.log_level
    return replace(DDLConfig.from_env(), **overrides)


def _load(args: argparse.Namespace, config: DDLConfig):
    with LogContext(plugin=args.plugin, plugin_kind=args.kind):
        logger.debug("Loading DDL", libdirs=config.libdirs, mode=config.mode)
        return DDLLoader(config).load(args.plugin, args.kind)


def cmd_help(args: argparse.Namespace, config: DDLConfig) -> int:
    """Render help for a plugin."""
    from ddlforge.help import render_help

    try:
        ddl = _load(args, config)
        print(render_help(ddl, template=args.template, template_dir=args.template_dir, config=config), end="")
        return 0
    except DDLError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_check(args: argparse.Namespace, config: DDLConfig) -> int:
    """Load a DDL and report its structure."""
    try:
        ddl = _load(args, config)
    except DDLError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(ddl.to_dict(), indent=2, default=str))
        return 0

    print(f"\n{'═' * 60}")
    print(f"  {ddl.display_name} ({ddl.plugin_kind} plugin '{ddl.plugin_name}')")
    print(f"{'═' * 60}")
    for key, entity in ddl.entities.items():
        data = entity.to_dict()
        inputs = ", ".join(data.get("input", {})) or "-"
        outputs = ", ".join(data.get("output", {})) or "-"
        print(f"  {key}")
        if "capabilities" in data:
            print(f"    capabilities: {', '.join(data['capabilities'])}")
        else:
            print(f"    input:  {inputs}")
            print(f"    output: {outputs}")
    print(f"{'═' * 60}\n")
    print("✓ DDL is valid")
    return 0


def cmd_validate(args: argparse.Namespace, config: DDLConfig) -> int:
    """Validate a request against an agent DDL."""
    arguments = {}

    if args.data:
        try:
            arguments = json.loads(args.data)
        except json.JSONDecodeError as e:
            print(f"Error parsing --data JSON: {e}", file=sys.stderr)
            return 1
        if not isinstance(arguments, dict):
            print("Error: --data must be a JSON object", file=sys.stderr)
            return 1

    for item in args.arguments:
        if "=" not in item:
            print(f"Error: expected key=value, got '{item}'", file=sys.stderr)
            return 1
        key, value = item.split("=", 1)
        arguments[key] = value

    try:
        ddl = _load(args, config)
        arguments = coerce_arguments(ddl, args.action, arguments)
        with LogContext(plugin=args.plugin, action=args.action):
            RequestValidator(ddl).validate(args.action, arguments)
    except DDLValidationError as e:
        if args.json:
            print(json.dumps({"valid": False, "error": e.to_dict()}, indent=2, default=str))
        else:
            print(f"✗ {e}", file=sys.stderr)
        return 1
    except (DDLError, CoercionError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps({"valid": True, "arguments": arguments}, indent=2, default=str))
    else:
        print(f"✓ {args.plugin}#{args.action} request is valid")
    return 0


def cmd_version(args: argparse.Namespace, config: DDLConfig) -> int:
    """Show version information."""
    from ddlforge import __version__

    if args.json:
        print(json.dumps({"name": "ddlforge", "version": __version__}, indent=2))
    else:
        print(f"ddlforge v{__version__}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="ddlforge",
        description="DDLForge CLI - plugin interface descriptions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ddlforge --libdir /usr/libexec/ddlforge help service
  ddlforge check puppet --kind agent
  ddlforge check fstat --kind data --json
  ddlforge validate service status service=nginx
        """,
    )

    parser.add_argument(
        "--libdir", "-l", action="append", help="Library directory (repeatable, overrides DDL_LIBDIR)"
    )
    parser.add_argument(
        "--mode", choices=MODES, help="Process mode (overrides DDL_MODE)"
    )
    parser.add_argument(
        "--log-level", help="Log level (overrides DDL_LOG_LEVEL)"
    )
    parser.add_argument(
        "--json-logs", action="store_true", help="Emit JSON log lines"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_plugin_args(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("plugin", help="Plugin name")
        sub.add_argument(
            "--kind", "-k", default="agent", help="Plugin kind (default: agent)"
        )

    # help command
    help_parser = subparsers.add_parser("help", help="Render help for a plugin")
    add_plugin_args(help_parser)
    help_parser.add_argument(
        "--template", "-t", help="Template name or absolute path"
    )
    help_parser.add_argument(
        "--template-dir", help="Directory searched first for templates"
    )
    help_parser.set_defaults(func=cmd_help)

    # check command
    check_parser = subparsers.add_parser("check", help="Load a DDL and show its entities")
    add_plugin_args(check_parser)
    check_parser.add_argument(
        "--json", "-j", action="store_true", help="Output the descriptor as JSON"
    )
    check_parser.set_defaults(func=cmd_check)

    # validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a request against an agent DDL")
    add_plugin_args(validate_parser)
    validate_parser.add_argument("action", help="Action to call")
    validate_parser.add_argument(
        "--data", "-d", help="JSON object of arguments"
    )
    validate_parser.add_argument(
        "--json", "-j", action="store_true", help="Output the result as JSON"
    )
    validate_parser.add_argument(
        "arguments", nargs="*", help="Arguments as key=value pairs"
    )
    validate_parser.set_defaults(func=cmd_validate)

    # version command
    version_parser = subparsers.add_parser("version", help="Show version info")
    version_parser.add_argument(
        "--json", "-j", action="store_true", help="Output as JSON"
    )
    version_parser.set_defaults(func=cmd_version)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        config = _build_config(args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    configure_logging(level=config.log_level, json_output=args.json_logs)

    return args.func(args, config)


if __name__ == "__main__":
    sys.exit(main())
