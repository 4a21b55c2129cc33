"""
DDLForge Help Rendering

Renders a descriptor as human-readable help using Jinja2 templates.

Template lookup:
- no template given: "rpc-help.j2" for agents, "<kind>-help.j2" otherwise
- absolute paths are read directly
- relative names are searched in template_dir, then the configured
  help_template_dir, then the templates bundled with ddlforge

Templates receive ``meta`` (metadata), ``entities`` (plain dicts, as declared),
``plugin_name`` and ``plugin_kind``.
"""

import logging
import os
from pathlib import Path

from jinja2 import FileSystemLoader, StrictUndefined, TemplateNotFound, TemplateSyntaxError, UndefinedError
from jinja2.exceptions import SecurityError
from jinja2.sandbox import SandboxedEnvironment

from ddlforge.config import DDLConfig, get_config
from ddlforge.core.descriptor import PluginDescriptor, PluginKind
from ddlforge.core.errors import DDLError

logger = logging.getLogger(__name__)

__all__ = ["BUNDLED_TEMPLATE_DIR", "template_for_kind", "render_help"]

BUNDLED_TEMPLATE_DIR = Path(__file__).parent / "templates"


def template_for_kind(plugin_kind: str) -> str:
    """Default help template name for a plugin kind."""
    if plugin_kind == PluginKind.AGENT.value:
        return "rpc-help.j2"
    return f"{plugin_kind}-help.j2"


def _environment(search_path: list[str]) -> SandboxedEnvironment:
    return SandboxedEnvironment(
        loader=FileSystemLoader(search_path),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def render_help(
    descriptor: PluginDescriptor,
    template: str | None = None,
    template_dir: str | None = None,
    config: DDLConfig | None = None,
) -> str:
    """
    Render help text for a descriptor.

    Args:
        descriptor: Loaded plugin descriptor
        template: Template name or absolute path (default chosen by plugin kind)
        template_dir: Directory searched first for relative template names
        config: Supplies help_template_dir (defaults to the process config)

    Raises:
        DDLError: The template is missing or invalid, or fails to render
    """
    config = config or get_config()
    name = template or template_for_kind(descriptor.plugin_kind)

    search_path = [d for d in (template_dir, config.help_template_dir) if d]
    search_path.append(str(BUNDLED_TEMPLATE_DIR))

    try:
        if os.path.isabs(name):
            source = Path(name).read_text(encoding="utf-8")
            compiled = _environment(search_path).from_string(source)
        else:
            compiled = _environment(search_path).get_template(name)
    except (TemplateNotFound, FileNotFoundError) as e:
        raise DDLError(f"Help template {name} not found (searched: {', '.join(search_path)})") from e
    except TemplateSyntaxError as e:
        raise DDLError(f"Help template {name} is invalid: {e}") from e

    data = descriptor.to_dict()
    try:
        return compiled.render(
            meta=data["metadata"],
            entities=data["entities"],
            plugin_name=descriptor.plugin_name,
            plugin_kind=descriptor.plugin_kind,
        )
    except (UndefinedError, SecurityError) as e:
        logger.warning(f"Help rendering failed for {descriptor.plugin_name}: {e}")
        raise DDLError(f"Cannot render help for {descriptor.plugin_name}: {e}") from e
