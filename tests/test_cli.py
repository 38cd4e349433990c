"""
Tests for the metaquarry command-line interface.
"""

import json

import pytest
from click.testing import CliRunner

from metaquarry import __version__
from metaquarry.cli import cli

PAGE = (
    '<html lang="en"><head><title>T</title>'
    '<meta property="og:title" content="OG"><meta property="og:url" content="/p"></head></html>'
)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def page_file(tmp_path):
    path = tmp_path / "page.html"
    path.write_text(PAGE, encoding="utf-8")
    return path


@pytest.mark.integration
class TestExtractCommand:
    """metaquarry extract."""

    def test_extract_file(self, runner, page_file, reset_logging):
        """Test present formats are printed as one JSON object."""
        result = runner.invoke(cli, ["--log-level", "ERROR", "extract", str(page_file), "--base-url", "https://x.test/"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["meta"] == {"language": "en", "title": "T"}
        assert data["open_graph"] == {"title": "OG", "url": "https://x.test/p"}
        assert "twitter" not in data

    def test_extract_stdin_with_format_filter(self, runner, reset_logging):
        """Test reading stdin and selecting formats."""
        result = runner.invoke(cli, ["--log-level", "ERROR", "extract", "-", "-f", "open_graph"], input=PAGE)

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"open_graph": {"title": "OG", "url": "/p"}}

    def test_extract_with_manifest(self, runner, tmp_path, reset_logging):
        """Test a manifest file is attached to the discovered link."""
        page = tmp_path / "app.html"
        page.write_text('<link rel="manifest" href="/m.json">', encoding="utf-8")
        manifest = tmp_path / "m.json"
        manifest.write_text('{"icons": [{"src": "i.png"}]}', encoding="utf-8")

        result = runner.invoke(
            cli,
            ["--log-level", "ERROR", "extract", str(page), "-b", "https://x.test/", "--manifest-json", str(manifest), "-f", "manifest"],
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {
            "manifest": {"href": "https://x.test/m.json", "manifest": {"icons": [{"src": "https://x.test/i.png"}]}}
        }

    def test_invalid_utf8(self, runner, tmp_path, reset_logging):
        """Test undecodable input exits with status 1."""
        path = tmp_path / "bad.html"
        path.write_bytes(b"\xff\xfe<p>")

        result = runner.invoke(cli, ["--log-level", "ERROR", "extract", str(path)])

        assert result.exit_code == 1


@pytest.mark.integration
class TestOtherCommands:
    """manifest, formats and global options."""

    def test_manifest_command(self, runner, tmp_path, reset_logging):
        """Test standalone manifest normalization."""
        path = tmp_path / "m.json"
        path.write_text('{"start_url": "/", "icons": [{"src": "/i.png"}]}', encoding="utf-8")

        result = runner.invoke(cli, ["--log-level", "ERROR", "manifest", str(path), "--base-url", "https://x.test/"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"start_url": "https://x.test/", "icons": [{"src": "https://x.test/i.png"}]}

    def test_manifest_command_malformed(self, runner, tmp_path, reset_logging):
        """Test a malformed manifest exits with status 1."""
        path = tmp_path / "m.json"
        path.write_text("[1, 2]", encoding="utf-8")

        result = runner.invoke(cli, ["--log-level", "ERROR", "manifest", str(path)])

        assert result.exit_code == 1

    def test_formats_table(self, runner, reset_logging):
        """Test the format listing names every field."""
        result = runner.invoke(cli, ["formats"])

        assert result.exit_code == 0
        assert "open_graph" in result.output
        assert "rel_links" in result.output

    def test_config_file(self, runner, tmp_path, page_file, reset_logging):
        """Test a configuration file limits the enabled formats."""
        config = tmp_path / "custom.yaml"
        config.write_text("extraction:\n  enabled_formats: [meta]\n", encoding="utf-8")

        result = runner.invoke(cli, ["--config", str(config), "--log-level", "ERROR", "extract", str(page_file)])

        assert result.exit_code == 0, result.output
        assert list(json.loads(result.stdout)) == ["meta"]

    def test_invalid_config_file(self, runner, tmp_path, reset_logging):
        """Test an invalid configuration file exits with status 1."""
        config = tmp_path / "bad.yaml"
        config.write_text("extraction:\n  enabled_formats: [nope]\n", encoding="utf-8")

        result = runner.invoke(cli, ["--config", str(config), "formats"])

        assert result.exit_code == 1

    def test_version(self, runner):
        """Test --version prints the package version."""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output
