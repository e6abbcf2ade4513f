"""
Tests for the command-line interface.
"""

import json
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import structlog
from click.testing import CliRunner

from postharvest.cli import cli
from postharvest.errors import AllStrategiesFailedError
from tests.helpers.pages import POST_URL


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging():
    """Keep log lines off stdout so command output stays parseable."""
    structlog.configure(logger_factory=structlog.PrintLoggerFactory(sys.stderr))
    with patch("postharvest.cli.configure_logging") as configure:
        yield configure
    structlog.reset_defaults()


class TestExtractCommand:
    def test_demo_json(self, runner):
        result = runner.invoke(cli, ["extract", POST_URL, "--demo", "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert len(payload["images"]) == 3
        assert payload["documents"][1]["filename"] == "roadmap-2024.pptx"

    def test_demo_table(self, runner):
        result = runner.invoke(cli, ["extract", POST_URL, "--demo"])

        assert result.exit_code == 0
        assert "Post text" in result.output
        assert "Media" in result.output

    def test_invalid_url(self, runner):
        result = runner.invoke(cli, ["extract", "https://example.com/posts/1", "--demo"])

        assert result.exit_code == 1
        assert "Invalid URL" in result.output

    def test_all_strategies_failed(self, runner):
        manager = MagicMock()
        manager.extract = AsyncMock(
            side_effect=AllStrategiesFailedError(POST_URL, [("rendered", "no credential"), ("static", "HTTP [403]")])
        )
        with patch("postharvest.cli.ExtractorManager", return_value=manager):
            result = runner.invoke(cli, ["extract", POST_URL])

        assert result.exit_code == 1
        assert "Failed to extract post content" in result.output
        assert "static: HTTP [403]" in result.output

    def test_log_level_applied(self, runner, quiet_logging):
        runner.invoke(cli, ["--log-level", "DEBUG", "extract", POST_URL, "--demo", "--json"])
        assert quiet_logging.call_args.args[0].log_level == "DEBUG"

    def test_config_file(self, runner, tmp_path: Path):
        path = tmp_path / "custom.yaml"
        path.write_text("extraction:\n  target_domain: example.org\n")

        result = runner.invoke(cli, ["--config", str(path), "extract", "https://www.example.org/p/1", "--demo", "--json"])

        assert result.exit_code == 0


class TestDownloadCommand:
    def test_writes_archive(self, runner, tmp_path: Path):
        builder = MagicMock()
        builder.build = AsyncMock(return_value=b"PK\x05\x06" + b"\x00" * 18)
        output = tmp_path / "post.zip"

        with patch("postharvest.cli.ArchiveBuilder", return_value=builder):
            result = runner.invoke(cli, ["download", POST_URL, "--demo", "-o", str(output)])

        assert result.exit_code == 0
        assert output.read_bytes().startswith(b"PK")
        assert "Packaging 6 media items" in result.output
        builder.build.assert_awaited_once()


class TestServeCommand:
    def test_serve_uses_config_defaults(self, runner):
        with patch("postharvest.web.main.run_web_server") as run:
            result = runner.invoke(cli, ["serve", "--port", "9001"])

        assert result.exit_code == 0
        assert run.call_args.kwargs["port"] == 9001
        assert run.call_args.kwargs["host"] is None
