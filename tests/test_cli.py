"""
Command line (cli.py)

Tests ``serve`` wiring with uvicorn patched out, and ``resolve`` output.
"""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from static_simple import __version__
from static_simple.asgi import ASGIAdapter
from static_simple.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


class TestResolve:

    def test_found(self, runner, docroot):
        result = runner.invoke(cli, ["resolve", str(docroot), "/files/static.css"])
        assert result.exit_code == 0, result.output
        path, found, mime = result.output.strip().split("\t")
        assert path == "/files/static.css"
        assert found == str((docroot / "files/static.css").absolute())
        assert mime == "text/css"

    def test_not_found(self, runner, docroot):
        result = runner.invoke(cli, ["resolve", str(docroot), "/files/404.txt"])
        assert result.exit_code == 1

    def test_include_order(self, runner, docroot, tmp_path):
        overlay = tmp_path / "overlay"
        (overlay / "files").mkdir(parents=True)
        (overlay / "files/static.css").write_text("overlay")

        result = runner.invoke(cli, [
            "resolve", str(docroot), "files/static.css",
            "--include", str(overlay), "--include", str(docroot),
        ])
        assert result.exit_code == 0, result.output
        assert str(overlay / "files/static.css") in result.output

    def test_mime_override(self, runner, docroot):
        result = runner.invoke(cli, [
            "resolve", str(docroot), "files/err.omg", "--mime", "omg=application/x-omg",
        ])
        assert result.output.strip().endswith("application/x-omg")

    def test_bad_mime_option(self, runner, docroot):
        result = runner.invoke(cli, ["resolve", str(docroot), "x.css", "--mime", "css"])
        assert result.exit_code == 2
        assert "EXT=TYPE" in result.output

    def test_bad_rule(self, runner, docroot):
        result = runner.invoke(cli, ["resolve", str(docroot), "x.css", "--dir", "qr/(/"])
        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_config_file(self, runner, docroot, tmp_path):
        config = tmp_path / "static.yaml"
        config.write_text("static:\n  mime_types: {css: text/x-css}\n")
        result = runner.invoke(cli, [
            "resolve", str(docroot), "files/static.css", "--config", str(config),
        ])
        assert result.output.strip().endswith("text/x-css")


class TestServe:

    def test_runs_uvicorn(self, runner, docroot):
        with patch("uvicorn.run") as run:
            result = runner.invoke(cli, [
                "serve", str(docroot), "--dir", "static", "--bind", "0.0.0.0:9000",
            ])

        assert result.exit_code == 0, result.output
        args, kwargs = run.call_args
        assert isinstance(args[0], ASGIAdapter)
        assert kwargs["host"] == "0.0.0.0"
        assert kwargs["port"] == 9000
        assert args[0].native_document_root is None
        assert args[0].app.prepare.names == ["static.prepare"]

    def test_native_and_debug(self, runner, docroot):
        with patch("uvicorn.run") as run:
            result = runner.invoke(cli, ["serve", str(docroot), "--native", "--debug"])

        assert result.exit_code == 0, result.output
        adapter = run.call_args.args[0]
        assert adapter.native_document_root == docroot.absolute()
        assert adapter.app.debug is True
        assert run.call_args.kwargs["log_level"] == "debug"

    def test_bad_bind(self, runner, docroot):
        with patch("uvicorn.run"):
            result = runner.invoke(cli, ["serve", str(docroot), "--bind", "host:port"])
        assert result.exit_code == 2

    def test_missing_root(self, runner, tmp_path):
        result = runner.invoke(cli, ["serve", str(tmp_path / "nope")])
        assert result.exit_code == 2


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert __version__ in result.output
