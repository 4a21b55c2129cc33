"""
DDLForge Loader

Finds a plugin's DDL file on the library search path, parses it and evaluates
it into a PluginDescriptor.

DDL files live at ``<libdir>/<plugin kind>/<plugin name>.ddl``; the first
libdir containing the file wins.

Usage:
    from ddlforge import DDLConfig, DDLLoader

    loader = DDLLoader(DDLConfig(libdirs=["/usr/libexec/ddlforge"]))
    ddl = loader.load("service", "agent")
    ddl.actions()
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from ddlforge.config import DDLConfig, get_config
from ddlforge.core.aggregate import AggregateRecognizer
from ddlforge.core.builder import SchemaBuilder
from ddlforge.core.descriptor import PluginDescriptor, PluginKind, normalize_kind
from ddlforge.core.errors import DDLError, DDLSyntaxError, DescriptorNotFound
from ddlforge.core.evaluator import DirectiveEvaluator
from ddlforge.core.parser import parse_ddl
from ddlforge.plugins.aggregates import AggregateRegistry

logger = logging.getLogger(__name__)

__all__ = ["DDL_SUFFIX", "find_ddl_file", "DDLLoader", "load_ddl"]

DDL_SUFFIX = ".ddl"


def find_ddl_file(
    plugin_name: str,
    plugin_kind: "str | PluginKind",
    libdirs: Iterable[str | Path],
) -> Path | None:
    """
    Locate the DDL file of a plugin.

    Args:
        plugin_name: Plugin identifier
        plugin_kind: Plugin kind, used as the directory below each libdir
        libdirs: Ordered search path

    Returns:
        Path of the first match, None when no libdir has the file
    """
    kind = normalize_kind(plugin_kind)
    for libdir in libdirs:
        ddlfile = Path(libdir) / kind / f"{plugin_name}{DDL_SUFFIX}"
        if ddlfile.is_file():
            logger.debug(f"Found {plugin_name} ddl at {ddlfile}")
            return ddlfile
    return None


class DDLLoader:
    """
    Loads DDL files into PluginDescriptors.

    Args:
        config: Search path and process mode (defaults to the process config)
        registry: Known aggregate functions (defaults to one built from config)
    """

    def __init__(
        self,
        config: DDLConfig | None = None,
        registry: AggregateRegistry | None = None,
    ):
        self.config = config or get_config()
        self.registry = registry if registry is not None else AggregateRegistry.from_config(self.config)
        self.recognizer = AggregateRecognizer(self.registry)

    def find(self, plugin_name: str, plugin_kind: "str | PluginKind" = PluginKind.AGENT) -> Path | None:
        return find_ddl_file(plugin_name, plugin_kind, self.config.libdirs)

    def load(
        self,
        plugin_name: str,
        plugin_kind: "str | PluginKind" = PluginKind.AGENT,
    ) -> PluginDescriptor:
        """
        Find and load a plugin's DDL.

        Raises:
            DescriptorNotFound: No libdir holds the DDL file
            SchemaError: The DDL is invalid or not UTF-8 text
            DDLError: The DDL file cannot be read
        """
        ddlfile = self.find(plugin_name, plugin_kind)
        if ddlfile is None:
            raise DescriptorNotFound(plugin_name, normalize_kind(plugin_kind), self.config.libdirs)
        return self.load_file(ddlfile, plugin_name, plugin_kind)

    def load_file(
        self,
        path: str | Path,
        plugin_name: str | None = None,
        plugin_kind: "str | PluginKind" = PluginKind.AGENT,
    ) -> PluginDescriptor:
        """Load a DDL file; the plugin name defaults to the file's stem."""
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise DDLSyntaxError(f"DDL is not valid UTF-8 text: {e.reason} at byte {e.start}", str(path)) from e
        except OSError as e:
            raise DDLError(f"Cannot read DDL {path}: {e.strerror or e}") from e
        return self.load_text(text, plugin_name or path.stem, plugin_kind, source=str(path))

    def load_text(
        self,
        text: str,
        plugin_name: str,
        plugin_kind: "str | PluginKind" = PluginKind.AGENT,
        source: str = "<ddl>",
    ) -> PluginDescriptor:
        """
        Parse and evaluate DDL text.

        The whole text is evaluated in one pass; the first SchemaError aborts
        the load and no descriptor is returned.
        """
        directives = parse_ddl(text, source)

        builder = SchemaBuilder(plugin_name, plugin_kind)
        evaluator = DirectiveEvaluator(
            builder,
            self.recognizer,
            summarize_enabled=not self.config.is_server,
            source=source,
        )
        evaluator.evaluate(directives)

        descriptor = builder.finish()
        logger.debug(
            f"Loaded {descriptor.plugin_kind} DDL for {plugin_name} "
            f"with {len(descriptor.entities)} entit{'y' if len(descriptor.entities) == 1 else 'ies'}"
        )
        return descriptor


def load_ddl(
    plugin_name: str,
    plugin_kind: "str | PluginKind" = PluginKind.AGENT,
    config: DDLConfig | None = None,
    registry: AggregateRegistry | None = None,
) -> PluginDescriptor:
    """Convenience wrapper around DDLLoader(config, registry).load()."""
    return DDLLoader(config, registry).load(plugin_name, plugin_kind)
