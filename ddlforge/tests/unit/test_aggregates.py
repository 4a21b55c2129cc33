"""
Unit Tests for the Aggregate Function Registry
"""

from types import SimpleNamespace

import pytest

from ddlforge.config import DDLConfig
from ddlforge.plugins import aggregates
from ddlforge.plugins.aggregates import AGGREGATE_ENTRY_POINT, AggregateRegistry


class TestRegistration:
    """Tests for explicit registration."""

    def test_register(self):
        registry = AggregateRegistry(["summary"])
        registry.register("average")

        assert registry.is_function("summary")
        assert "average" in registry
        assert not registry.is_function("median")
        assert registry.names() == ["average", "summary"]
        assert len(registry) == 2

    @pytest.mark.parametrize("name", ["", "two words", "bad-name", 3])
    def test_invalid_names(self, name):
        with pytest.raises(ValueError, match="Invalid aggregate function name"):
            AggregateRegistry().register(name)


class TestDiscovery:
    """Tests for plugin directory and entry point discovery."""

    def test_discover_libdir(self, libdir):
        aggregate_dir = libdir / "aggregate"
        (aggregate_dir / "_helpers.py").write_text("")
        (aggregate_dir / "README.txt").write_text("")
        (aggregate_dir / "bad-name.py").write_text("")

        registry = AggregateRegistry()
        found = registry.discover([libdir])

        assert found == 2
        assert registry.names() == ["average", "summary"]

    def test_discover_skips_missing_dirs(self, tmp_path):
        registry = AggregateRegistry()

        assert registry.discover([tmp_path / "nowhere"]) == 0
        assert len(registry) == 0

    def test_entry_points(self, monkeypatch):
        requested = []

        def fake_entry_points(group):
            requested.append(group)
            return [SimpleNamespace(name="percentile"), SimpleNamespace(name="not valid")]

        monkeypatch.setattr(aggregates, "entry_points", fake_entry_points)
        registry = AggregateRegistry()

        assert registry.load_entry_points() == 1
        assert requested == [AGGREGATE_ENTRY_POINT]
        assert registry.names() == ["percentile"]

    def test_from_config(self, libdir, monkeypatch):
        monkeypatch.setattr(aggregates, "entry_points", lambda group: [SimpleNamespace(name="percentile")])

        with_eps = AggregateRegistry.from_config(DDLConfig(libdirs=[str(libdir)]))
        without_eps = AggregateRegistry.from_config(
            DDLConfig(libdirs=[str(libdir)], aggregate_entry_points=False)
        )

        assert with_eps.names() == ["average", "percentile", "summary"]
        assert without_eps.names() == ["average", "summary"]
