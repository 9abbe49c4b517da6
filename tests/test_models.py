"""Tests for data models."""

import pytest
from pydantic import ValidationError
from sitegraph.models import CrawlConfig, DEFAULT_EXCLUDED_PATHS, Site, Webpage


class TestWebpage:
    """Test Webpage model."""

    def test_webpage_defaults(self):
        page = Webpage(url="https://example.test/")

        assert page.references == []
        assert page.depth is None

    def test_references_keep_duplicates(self):
        page = Webpage(
            url="https://example.test/",
            references=["https://example.test/a", "https://example.test/a"],
        )

        assert len(page.references) == 2


class TestSite:
    """Test Site model and rendering."""

    @pytest.fixture
    def site(self):
        site = Site(name="https://example.test/")
        site.add_webpage(
            Webpage(
                url="https://example.test/",
                references=["https://example.test/a", "https://other.test/b"],
                depth=0,
            )
        )
        site.add_webpage(Webpage(url="https://example.test/a", depth=1))
        return site

    def test_add_webpage_appends(self, site):
        assert site.urls() == ["https://example.test/", "https://example.test/a"]

    def test_sitemap_lines(self, site):
        assert site.sitemap_lines() == ["https://example.test/", "https://example.test/a"]

    def test_sitegraph_lines(self, site):
        assert site.sitegraph_lines() == [
            "https://example.test/",
            "-> https://example.test/a",
            "-> https://other.test/b",
            "https://example.test/a",
        ]

    def test_from_sitegraph(self, site, tmp_path):
        path = tmp_path / "sitegraph.txt"
        path.write_text("\n".join(site.sitegraph_lines()) + "\n", encoding="utf-8")

        loaded = Site.from_sitegraph(path)

        assert loaded.name == "https://example.test/"
        assert loaded.urls() == site.urls()
        assert loaded.webpages[0].references == site.webpages[0].references
        assert loaded.webpages[1].references == []
        assert loaded.webpages[0].depth is None

    def test_from_sitegraph_rejects_leading_edge(self, tmp_path):
        path = tmp_path / "sitegraph.txt"
        path.write_text("-> https://example.test/a\n", encoding="utf-8")

        with pytest.raises(ValueError):
            Site.from_sitegraph(path)


class TestCrawlConfig:
    """Test CrawlConfig model."""

    def test_config_defaults(self):
        config = CrawlConfig(seed_url="https://monzo.com/")

        assert config.max_depth == 2
        assert config.politeness_delay == 2.0
        assert config.per_host_delay is True
        assert config.excluded_paths == DEFAULT_EXCLUDED_PATHS
        assert config.excluded_subdomains == []
        assert config.max_concurrency == 10
        assert config.queue_size == 0
        assert config.crawl_timeout is None
        assert config.collect_pages is True

    def test_default_paths_not_shared(self):
        config = CrawlConfig(seed_url="https://monzo.com/")
        config.excluded_paths.append("/careers")

        assert "/careers" not in DEFAULT_EXCLUDED_PATHS

    def test_hostname(self):
        config = CrawlConfig(seed_url="https://Sub.Monzo.com:443/start")

        assert config.hostname == "sub.monzo.com"

    @pytest.mark.parametrize("seed", ["monzo.com", "/relative", "ftp://monzo.com/", ""])
    def test_invalid_seed(self, seed):
        with pytest.raises(ValidationError):
            CrawlConfig(seed_url=seed)

    def test_config_validation(self):
        assert CrawlConfig(seed_url="https://monzo.com/", max_depth=0).max_depth == 0

        with pytest.raises(ValidationError):
            CrawlConfig(seed_url="https://monzo.com/", max_depth=-1)
        with pytest.raises(ValidationError):
            CrawlConfig(seed_url="https://monzo.com/", max_concurrency=0)
        with pytest.raises(ValidationError):
            CrawlConfig(seed_url="https://monzo.com/", politeness_delay=-1)
