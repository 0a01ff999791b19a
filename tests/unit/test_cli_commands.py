"""Unit tests for the CLI — command registration and behaviour via CliRunner.

The registry client is replaced with an in-memory resolver by patching
``RegistryResolver`` in the command modules.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from compose_oci.cli import app as app_module
from compose_oci.cli.app import app
from compose_oci.cli.commands import inspect_cmd, resolve

runner = CliRunner()

REFERENCE = "docker.io/acme/stack:1.0"


class _ResolverContext:
    """Stands in for ``RegistryResolver``: a context manager yielding the fake."""

    def __init__(self, fake):
        self._fake = fake

    def __call__(self, *args, **kwargs):
        return self

    def __enter__(self):
        return self._fake

    def __exit__(self, *exc_info):
        return None


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the CLI from installing handlers on the root logger."""
    monkeypatch.setattr(app_module, "setup_logging", lambda level: None)


@pytest.fixture
def patched_registry(resolver, monkeypatch: pytest.MonkeyPatch):
    """Route every CLI registry access to the in-memory resolver."""
    monkeypatch.setattr(resolve, "RegistryResolver", _ResolverContext(resolver))
    monkeypatch.setattr(inspect_cmd, "RegistryResolver", _ResolverContext(resolver))
    return resolver


class TestCliApp:
    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert result.exit_code in (0, 2)
        assert "usage" in result.output.lower()

    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "resolve" in result.output
        assert "inspect" in result.output
        assert "cache-dir" in result.output

    @pytest.mark.parametrize("command", ["resolve", "inspect", "cache-dir"])
    def test_command_help(self, command: str):
        result = runner.invoke(app, [command, "--help"])
        assert result.exit_code == 0


class TestResolveCommand:
    def test_prints_local_path(self, patched_registry, tmp_path: Path):
        desc = patched_registry.publish(REFERENCE, [patched_registry.yaml(b"services: {}\n")])
        cache = tmp_path / "cli-cache"
        result = runner.invoke(app, ["resolve", REFERENCE, "--cache-dir", str(cache)])
        assert result.exit_code == 0, result.output
        expected = cache / desc.digest_hex / "compose.yaml"
        assert result.stdout.strip() == str(expected)
        assert expected.read_bytes() == b"services: {}\n"

    def test_accepts_oci_prefix(self, patched_registry, tmp_path: Path):
        patched_registry.publish(REFERENCE, [patched_registry.yaml(b"a")])
        result = runner.invoke(
            app, ["resolve", f"oci://{REFERENCE}", "--cache-dir", str(tmp_path / "c")]
        )
        assert result.exit_code == 0, result.output
        assert result.stdout.strip().endswith("compose.yaml")

    def test_offline(self, patched_registry):
        result = runner.invoke(app, ["resolve", REFERENCE, "--offline"])
        assert result.exit_code == 0
        assert "compose.yaml" not in result.output
        assert patched_registry.calls == []

    def test_error_exits_with_code_1(self, patched_registry, tmp_path: Path):
        result = runner.invoke(
            app, ["resolve", "acme/missing:1", "--cache-dir", str(tmp_path / "c")]
        )
        assert result.exit_code == 1

    def test_write_failure_is_reported(self, patched_registry, tmp_path: Path):
        desc = patched_registry.publish(
            REFERENCE,
            [
                patched_registry.yaml(b"main"),
                patched_registry.env(b"A=1", envfile="app.env"),
                patched_registry.env(b"A=2", envfile="app.env"),
            ],
        )
        cache = tmp_path / "c"
        result = runner.invoke(app, ["resolve", REFERENCE, "--cache-dir", str(cache)])
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Error:" in result.output
        assert not (cache / desc.digest_hex).exists()

    def test_disabled_by_flag(self, patched_registry, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("COMPOSE_EXPERIMENTAL_OCI_REMOTE", "false")
        result = runner.invoke(app, ["resolve", REFERENCE])
        assert result.exit_code == 1


class TestInspectCommand:
    def test_lists_layers(self, patched_registry):
        patched_registry.publish(
            REFERENCE,
            [
                patched_registry.yaml(b"main", file="compose.yaml"),
                patched_registry.env(b"A=1", envfile="app.env"),
            ],
        )
        result = runner.invoke(app, ["inspect", REFERENCE])
        assert result.exit_code == 0, result.output
        assert "compose_yaml" in result.output
        assert "app.env" in result.output
        assert "Compose project artifact" in result.output

    def test_reports_non_compose_artifact(self, patched_registry):
        patched_registry.publish(REFERENCE, [], artifact_type="application/vnd.acme.thing")
        result = runner.invoke(app, ["inspect", REFERENCE])
        assert result.exit_code == 0
        assert "Not a compose project artifact" in result.output

    def test_missing_reference(self, patched_registry):
        result = runner.invoke(app, ["inspect", "acme/missing:1"])
        assert result.exit_code == 1


class TestCacheDirCommand:
    def test_prints_override(self, tmp_path: Path):
        target = tmp_path / "explicit"
        result = runner.invoke(app, ["cache-dir", "--cache-dir", str(target)])
        assert result.exit_code == 0
        assert result.stdout.strip() == str(target)
        assert target.is_dir()
