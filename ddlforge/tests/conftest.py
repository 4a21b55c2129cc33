"""
DDLForge Test Fixtures

Shared fixtures for all DDLForge tests.
"""

from pathlib import Path

import pytest

from ddlforge.config import DDLConfig, reset_config
from ddlforge.core.descriptor import PluginDescriptor
from ddlforge.core.loader import DDLLoader
from ddlforge.plugins.aggregates import AggregateRegistry


# ══════════════════════════════════════════════════════════════════════════════
#                           DDL SOURCES
# ══════════════════════════════════════════════════════════════════════════════


METADATA = '''\
metadata(name="Service Agent", description="Start and stop system services",
         author="ops team", license="ASL 2.0", version="1.0",
         url="https://example.com/service", timeout=60)
'''

SERVICE_DDL = METADATA + r'''
with action("status", description="Gets the status of a service"):
    display("always")
    input("service", prompt="Service Name", description="The service to get the status for",
          type="string", validation=r"^[a-zA-Z\-_\d]+$", optional=False, maxlength=30)
    output("status", description="The status of the service",
           display_as="Service Status", default="unknown")
    with summarize():
        aggregate(summary("status"))

with action("restart", description="Restart a service"):
    input("service", prompt="Service Name", description="The service to restart",
          type="string", validation=r"^[a-zA-Z\-_\d]+$", optional=False, maxlength=30)
    input("force", prompt="Force", description="Kill the service if needed",
          type="boolean", optional=True)
    input("priority", prompt="Priority", description="Restart priority",
          type="list", list=["low", "high"], optional=True)
    input("delay", prompt="Delay", description="Seconds to wait first",
          type="integer", optional=True)
    output("status", description="The status after restarting", display_as="Service Status")
'''

DATA_DDL = METADATA + r'''
with dataquery(description="File statistics"):
    input("query", prompt="File Name", description="Absolute path to a file",
          type="string", validation=r"^\/.+$", maxlength=120)
    output("size", description="File size in bytes", display_as="Size")
    output("present", description="Whether the file exists", display_as="Present")
'''

DISCOVERY_DDL = METADATA + '''
with discovery():
    capabilities(["classes", "facts", "identity"])
'''


@pytest.fixture
def service_ddl_text() -> str:
    return SERVICE_DDL


@pytest.fixture
def data_ddl_text() -> str:
    return DATA_DDL


@pytest.fixture
def discovery_ddl_text() -> str:
    return DISCOVERY_DDL


@pytest.fixture
def metadata_fields() -> dict:
    """The seven metadata keys, as a builder would receive them."""
    return {
        "name": "Service Agent",
        "description": "Start and stop system services",
        "author": "ops team",
        "license": "ASL 2.0",
        "version": "1.0",
        "url": "https://example.com/service",
        "timeout": 60,
    }


# ══════════════════════════════════════════════════════════════════════════════
#                           LIBRARY DIRECTORY
# ══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def libdir(tmp_path: Path) -> Path:
    """
    A library directory holding one plugin of each kind:

        agent/service.ddl
        data/fstat.ddl
        discovery/mc.ddl
        aggregate/summary.py
        aggregate/average.ddl
    """
    root = tmp_path / "lib"
    for kind, name, text in (
        ("agent", "service", SERVICE_DDL),
        ("data", "fstat", DATA_DDL),
        ("discovery", "mc", DISCOVERY_DDL),
    ):
        (root / kind).mkdir(parents=True)
        (root / kind / f"{name}.ddl").write_text(text)

    (root / "aggregate").mkdir()
    (root / "aggregate" / "summary.py").write_text("# summary aggregate\n")
    (root / "aggregate" / "average.ddl").write_text("# average aggregate\n")
    return root


@pytest.fixture
def config(libdir: Path) -> DDLConfig:
    """Client-mode config searching only the fixture libdir."""
    return DDLConfig(libdirs=[str(libdir)], aggregate_entry_points=False)


@pytest.fixture
def server_config(libdir: Path) -> DDLConfig:
    return DDLConfig(libdirs=[str(libdir)], mode="server", aggregate_entry_points=False)


@pytest.fixture
def registry() -> AggregateRegistry:
    return AggregateRegistry(["summary", "average", "sum"])


@pytest.fixture
def loader(config: DDLConfig, registry: AggregateRegistry) -> DDLLoader:
    return DDLLoader(config, registry)


@pytest.fixture
def service_ddl(loader: DDLLoader) -> PluginDescriptor:
    """The loaded service agent descriptor."""
    return loader.load("service", "agent")


@pytest.fixture(autouse=True)
def isolated_config():
    """Don't let a process default config leak between tests."""
    reset_config()
    yield
    reset_config()
