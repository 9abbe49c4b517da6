"""Tests for the command line interface."""

import json

import pytest
import structlog
from click.testing import CliRunner

from sitegraph import __version__
from sitegraph import cli
from sitegraph.crawler import Crawler
from sitegraph.models import CrawlConfig


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    structlog.reset_defaults()


@pytest.fixture
def fake_site(monkeypatch, make_transport, page_html):
    """Route CLI crawls to an in-memory site."""
    transport = make_transport(
        {
            "https://example.test/": page_html("/a", "/blog/post", "https://other.test/b"),
            "https://example.test/a": page_html("/"),
        }
    )

    class InMemoryCrawler(Crawler):
        def __init__(self, config, **kwargs):
            super().__init__(config, transport=transport, **kwargs)

    monkeypatch.setattr(cli, "Crawler", InMemoryCrawler)
    return transport


class TestCrawlCommand:
    """Test the crawl command."""

    def test_crawl_writes_outputs(self, runner, fake_site, tmp_path):
        result = runner.invoke(
            cli.main,
            ["crawl", "https://example.test/", "--delay", "0", "--no-progress", "-o", str(tmp_path)],
        )

        assert result.exit_code == 0, result.output
        sitemap = (tmp_path / "sitemap.txt").read_text(encoding="utf-8").splitlines()
        assert sorted(sitemap) == ["https://example.test/", "https://example.test/a"]

        sitegraph = (tmp_path / "sitegraph.txt").read_text(encoding="utf-8")
        assert "-> https://other.test/b" in sitegraph
        assert "Crawled 2 pages" in result.output
        assert fake_site.calls["https://example.test/blog/post"] == 0

    def test_exclude_path_overrides_defaults(self, runner, fake_site, tmp_path):
        result = runner.invoke(
            cli.main,
            [
                "crawl",
                "https://example.test/",
                "--delay",
                "0",
                "--no-progress",
                "--exclude-path",
                "/a",
                "-o",
                str(tmp_path),
            ],
        )

        assert result.exit_code == 0, result.output
        assert fake_site.calls["https://example.test/a"] == 0
        assert fake_site.calls["https://example.test/blog/post"] == 1

    def test_no_collect_writes_empty_outputs(self, runner, fake_site, tmp_path):
        result = runner.invoke(
            cli.main,
            ["crawl", "https://example.test/", "--delay", "0", "--no-progress",
             "--no-collect", "-o", str(tmp_path)],
        )

        assert result.exit_code == 0, result.output
        assert "Crawled 2 pages" in result.output
        assert (tmp_path / "sitemap.txt").read_text(encoding="utf-8") == ""
        assert (tmp_path / "sitegraph.txt").read_text(encoding="utf-8") == ""

    def test_option_defaults_follow_config(self, runner, fake_site, tmp_path, monkeypatch):
        seen = {}

        class RecordingCrawler(cli.Crawler):
            def __init__(self, config, **kwargs):
                seen["config"] = config
                super().__init__(config, **kwargs)

        monkeypatch.setattr(cli, "Crawler", RecordingCrawler)
        result = runner.invoke(
            cli.main,
            ["crawl", "https://example.test/", "--delay", "0", "--no-progress", "-o", str(tmp_path)],
        )

        assert result.exit_code == 0, result.output
        config = seen["config"]
        defaults = CrawlConfig(seed_url="https://example.test/")
        assert config.max_depth == defaults.max_depth
        assert config.max_concurrency == defaults.max_concurrency
        assert config.queue_size == defaults.queue_size
        assert config.timeout == defaults.timeout
        assert config.per_host_delay is defaults.per_host_delay

    def test_invalid_seed(self, runner, fake_site):
        result = runner.invoke(cli.main, ["crawl", "example.test", "--no-progress"])

        assert result.exit_code != 0
        assert "seed_url" in result.output

    def test_output_failure_is_fatal(self, runner, fake_site, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")

        result = runner.invoke(
            cli.main,
            ["crawl", "https://example.test/", "--delay", "0", "--no-progress",
             "-o", str(blocker / "out")],
        )

        assert result.exit_code == 1
        assert "Error writing output" in result.output


class TestStatsCommand:
    """Test the stats command."""

    @pytest.fixture
    def sitegraph_file(self, tmp_path):
        path = tmp_path / "sitegraph.txt"
        path.write_text(
            "https://example.test/\n"
            "-> https://example.test/a\n"
            "-> https://other.test/b\n"
            "https://example.test/a\n",
            encoding="utf-8",
        )
        return path

    def test_summary(self, runner, sitegraph_file):
        result = runner.invoke(cli.main, ["stats", str(sitegraph_file)])

        assert result.exit_code == 0, result.output
        assert "Total Pages: 2" in result.output

    def test_json(self, runner, sitegraph_file):
        result = runner.invoke(cli.main, ["stats", str(sitegraph_file), "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["total_pages"] == 2
        assert data["external_references"] == 1

    def test_export(self, runner, sitegraph_file, tmp_path):
        export = tmp_path / "stats.csv"
        result = runner.invoke(cli.main, ["stats", str(sitegraph_file), "-e", str(export)])

        assert result.exit_code == 0, result.output
        assert export.exists()


def test_version(runner):
    result = runner.invoke(cli.main, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output
