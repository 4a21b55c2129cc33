"""
Integration Tests for DDLForge

Tests the full path from DDL files on the library search path to validated
requests and rendered help, including the CLI.
"""

import json

import pytest

from ddlforge import (
    ArgumentPatternMismatch,
    DDLConfig,
    DDLError,
    DDLLoader,
    DDLSyntaxError,
    DescriptorNotFound,
    MissingRequiredArgument,
    RequestValidator,
    SchemaError,
    UnknownDirectiveError,
    load_ddl,
)
from ddlforge.cli import main


# ══════════════════════════════════════════════════════════════════════════════
#                           Loading
# ══════════════════════════════════════════════════════════════════════════════


class TestLoading:
    """Tests for DDLLoader against a library directory."""

    def test_load_agent(self, loader):
        ddl = loader.load("service")

        assert ddl.plugin_name == "service"
        assert ddl.plugin_kind == "agent"
        assert ddl.actions() == ["status", "restart"]
        assert set(ddl.metadata) == {"name", "description", "author", "license", "version", "url", "timeout"}

    def test_round_trip_structure(self, service_ddl):
        """The descriptor reports exactly what the DDL declared."""
        status = service_ddl.to_dict()["entities"]["status"]

        assert status == {
            "action": "status",
            "description": "Gets the status of a service",
            "display": "always",
            "input": {
                "service": {
                    "prompt": "Service Name",
                    "description": "The service to get the status for",
                    "type": "string",
                    "optional": False,
                    "validation": "^[a-zA-Z\\-_\\d]+$",
                    "maxlength": 30,
                },
            },
            "output": {
                "status": {
                    "description": "The status of the service",
                    "display_as": "Service Status",
                    "default": "unknown",
                },
            },
            "aggregate": [{"function": "summary", "args": ["status"]}],
        }

    def test_restart_defaults_to_failed_display(self, service_ddl):
        assert service_ddl.action_interface("restart").display.value == "failed"

    def test_load_data_and_discovery(self, loader):
        fstat = loader.load("fstat", "data")
        mc = loader.load("mc", "discovery")

        assert list(fstat.dataquery_interface().inputs) == ["query"]
        assert list(fstat.dataquery_interface().outputs) == ["size", "present"]
        assert len(mc.discovery_interface().capabilities) == 3

    def test_loading_twice_gives_equal_descriptors(self, loader):
        assert loader.load("service") == loader.load("service")

    def test_first_libdir_wins(self, libdir, tmp_path, registry):
        override = tmp_path / "override"
        (override / "agent").mkdir(parents=True)
        (libdir / "agent" / "service.ddl").replace(override / "agent" / "service.ddl")
        (libdir / "agent" / "service.ddl").write_text("this is not a DDL")

        loader = DDLLoader(DDLConfig(libdirs=[str(override), str(libdir)], aggregate_entry_points=False), registry)

        assert loader.load("service").actions() == ["status", "restart"]

    def test_not_found(self, loader, libdir):
        with pytest.raises(DescriptorNotFound, match="Can't find DDL for agent plugin 'puppet'") as exc_info:
            loader.load("puppet")

        assert exc_info.value.searched == [str(libdir)]

    def test_server_mode_skips_aggregates(self, server_config, registry):
        ddl = DDLLoader(server_config, registry).load("service")

        assert ddl.action_interface("status").aggregate == ()

    def test_aggregates_found_on_search_path(self, config):
        """Without an explicit registry, aggregate plugins come from <libdir>/aggregate."""
        ddl = DDLLoader(config).load("service")

        assert ddl.action_interface("status").aggregate[0].function == "summary"

    def test_unknown_aggregate_fails_load(self, libdir, config):
        (libdir / "aggregate" / "summary.py").unlink()

        with pytest.raises(UnknownDirectiveError, match="summary") as exc_info:
            DDLLoader(config).load("service")

        assert exc_info.value.location.endswith("service.ddl:12")

    def test_invalid_ddl_reports_file(self, libdir, loader):
        (libdir / "agent" / "broken.ddl").write_text('with action("x", description="x"):\n    display("never")\n')

        with pytest.raises(SchemaError) as exc_info:
            loader.load("broken")

        assert str(exc_info.value).startswith(str(libdir / "agent" / "broken.ddl") + ":2:")

    def test_non_utf8_ddl_is_a_syntax_error(self, libdir, loader):
        ddlfile = libdir / "agent" / "garbled.ddl"
        ddlfile.write_bytes(b'metadata(name="\xff\xfe")')

        with pytest.raises(DDLSyntaxError, match="not valid UTF-8") as exc_info:
            loader.load("garbled")

        assert exc_info.value.location == str(ddlfile)

    def test_unreadable_ddl_is_a_ddl_error(self, libdir, loader):
        with pytest.raises(DDLError, match="Cannot read DDL"):
            loader.load_file(libdir / "agent")

    def test_load_ddl(self, config, registry):
        ddl = load_ddl("service", "agent", config=config, registry=registry)

        assert ddl.display_name == "Service Agent"

    def test_load_file_uses_stem(self, loader, libdir):
        ddl = loader.load_file(libdir / "data" / "fstat.ddl", plugin_kind="data")

        assert ddl.plugin_name == "fstat"


# ══════════════════════════════════════════════════════════════════════════════
#                           Validation
# ══════════════════════════════════════════════════════════════════════════════


class TestEndToEnd:
    """Loading then validating requests."""

    def test_valid_request(self, service_ddl):
        assert RequestValidator(service_ddl).validate("status", {"service": "nginx"}) is True

    def test_pattern_violation(self, service_ddl):
        with pytest.raises(ArgumentPatternMismatch):
            RequestValidator(service_ddl).validate("status", {"service": "nginx!"})

    def test_missing_argument(self, service_ddl):
        with pytest.raises(MissingRequiredArgument) as exc_info:
            RequestValidator(service_ddl).validate("status", {})

        assert exc_info.value.key == "service"


# ══════════════════════════════════════════════════════════════════════════════
#                           CLI
# ══════════════════════════════════════════════════════════════════════════════


class TestCLI:
    """Tests for the ddlforge command."""

    @pytest.fixture(autouse=True)
    def cli_env(self, monkeypatch, tmp_path):
        for key in ("DDL_LIBDIR", "DDL_MODE", "DDL_HELP_TEMPLATE_DIR", "DDL_LOG_LEVEL"):
            monkeypatch.delenv(key, raising=False)
        monkeypatch.setenv("DDL_AGGREGATE_ENTRY_POINTS", "false")
        monkeypatch.chdir(tmp_path)

    def run(self, libdir, *argv) -> int:
        return main(["--libdir", str(libdir), "--log-level", "WARNING", *argv])

    def test_no_command_prints_usage(self, capsys):
        assert main([]) == 0
        assert "usage: ddlforge" in capsys.readouterr().out

    def test_validate_ok(self, libdir, capsys):
        assert self.run(libdir, "validate", "service", "status", "service=nginx") == 0
        assert "request is valid" in capsys.readouterr().out

    def test_validate_coerces_arguments(self, libdir, capsys):
        code = self.run(
            libdir, "validate", "service", "restart", "service=nginx", "force=yes", "delay=5", "--json"
        )

        assert code == 0
        result = json.loads(capsys.readouterr().out)
        assert result["arguments"] == {"service": "nginx", "force": True, "delay": 5}

    def test_validate_data_json(self, libdir):
        assert self.run(libdir, "validate", "service", "status", "--data", '{"service": "nginx"}') == 0

    def test_validate_failure(self, libdir, capsys):
        assert self.run(libdir, "validate", "service", "status", "service=nginx!", "--json") == 1

        result = json.loads(capsys.readouterr().out)
        assert result["valid"] is False
        assert result["error"]["type"] == "ArgumentPatternMismatch"

    def test_validate_bad_pair(self, libdir, capsys):
        assert self.run(libdir, "validate", "service", "status", "nginx") == 1
        assert "expected key=value" in capsys.readouterr().err

    def test_validate_bad_boolean(self, libdir, capsys):
        assert self.run(libdir, "validate", "service", "restart", "service=nginx", "force=perhaps") == 1
        assert "does not look like a boolean" in capsys.readouterr().err

    def test_check(self, libdir, capsys):
        assert self.run(libdir, "check", "fstat", "--kind", "data") == 0
        out = capsys.readouterr().out
        assert "Service Agent (data plugin 'fstat')" in out
        assert "input:  query" in out

    def test_check_json(self, libdir, capsys):
        assert self.run(libdir, "check", "service", "--json") == 0

        data = json.loads(capsys.readouterr().out)
        assert list(data["entities"]) == ["status", "restart"]

    def test_check_missing_plugin(self, libdir, capsys):
        assert self.run(libdir, "check", "puppet") == 1
        assert "Can't find DDL" in capsys.readouterr().err

    def test_check_non_utf8_plugin(self, libdir, capsys):
        (libdir / "agent" / "garbled.ddl").write_bytes(b'metadata(name="\xff\xfe")')

        assert self.run(libdir, "check", "garbled") == 1
        assert "not valid UTF-8" in capsys.readouterr().err

    def test_help(self, libdir, capsys):
        assert self.run(libdir, "help", "mc", "--kind", "discovery") == 0
        assert "DISCOVERY METHODS:" in capsys.readouterr().out

    def test_version(self, capsys):
        from ddlforge import __version__

        assert main(["version", "--json"]) == 0
        assert json.loads(capsys.readouterr().out)["version"] == __version__

    def test_invalid_log_level(self, libdir, capsys):
        assert main(["--log-level", "LOUD", "version"]) == 1
        assert "Configuration error" in capsys.readouterr().err
