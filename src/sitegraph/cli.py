"""CLI interface for sitegraph."""

import asyncio
import json
import logging
from pathlib import Path
import click
import structlog
from pydantic import ValidationError

from sitegraph.crawler import Crawler
from sitegraph.models import CrawlConfig, DEFAULT_EXCLUDED_PATHS
from sitegraph.writers import Writer
from sitegraph.stats import CrawlStats
from sitegraph import __version__


def configure_logging(verbose: bool = False) -> None:
    """Configure structured logging for CLI runs."""
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.INFO
        ),
    )


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """
    sitegraph - map a website's pages and links.
    """
    configure_logging(verbose)


@main.command()
@click.argument("url")
@click.option(
    "--depth",
    "-d",
    default=CrawlConfig.model_fields["max_depth"].default,
    show_default=True,
    help="Maximum link depth from the seed URL",
    type=int,
)
@click.option(
    "--delay",
    default=CrawlConfig.model_fields["politeness_delay"].default,
    show_default=True,
    help="Politeness delay in seconds between dispatches",
    type=float,
)
@click.option(
    "--global-delay",
    is_flag=True,
    help="Apply the politeness delay across all hosts instead of per host",
)
@click.option(
    "--concurrency",
    "-c",
    default=CrawlConfig.model_fields["max_concurrency"].default,
    show_default=True,
    help="Maximum number of concurrent fetches",
    type=int,
)
@click.option(
    "--exclude-path",
    multiple=True,
    help=f"Path prefix to skip, repeatable (default: {', '.join(DEFAULT_EXCLUDED_PATHS)})",
)
@click.option(
    "--exclude-subdomain",
    multiple=True,
    help="Skip hosts containing this string, repeatable",
)
@click.option(
    "--queue-size",
    default=CrawlConfig.model_fields["queue_size"].default,
    show_default=True,
    help="Bound on URLs waiting for dispatch, 0 for unbounded",
    type=int,
)
@click.option(
    "--timeout",
    default=CrawlConfig.model_fields["timeout"].default,
    show_default=True,
    help="Per-request timeout in seconds",
    type=float,
)
@click.option(
    "--crawl-timeout",
    default=None,
    help="Stop the crawl after this many seconds",
    type=float,
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False),
    default=".",
    help="Directory for sitemap.txt and sitegraph.txt (default: current directory)",
)
@click.option(
    "--no-collect",
    is_flag=True,
    help="Crawl without recording pages; both output files are written empty",
)
@click.option(
    "--progress/--no-progress",
    default=True,
    help="Show a progress bar (default: on)",
)
def crawl(
    url: str,
    depth: int,
    delay: float,
    global_delay: bool,
    concurrency: int,
    exclude_path: tuple,
    exclude_subdomain: tuple,
    queue_size: int,
    timeout: float,
    crawl_timeout: float,
    output_dir: str,
    no_collect: bool,
    progress: bool,
):
    """
    Crawl a website starting from URL.

    Examples:

        sitegraph crawl https://example.com

        sitegraph crawl https://example.com --depth 3 --delay 0.5

        sitegraph crawl https://example.com --exclude-path /blog --exclude-subdomain status.
    """
    try:
        config = CrawlConfig(
            seed_url=url,
            max_depth=depth,
            politeness_delay=delay,
            per_host_delay=not global_delay,
            excluded_paths=list(exclude_path) if exclude_path else list(DEFAULT_EXCLUDED_PATHS),
            excluded_subdomains=list(exclude_subdomain),
            max_concurrency=concurrency,
            queue_size=queue_size,
            timeout=timeout,
            crawl_timeout=crawl_timeout,
            collect_pages=not no_collect,
        )
    except ValidationError as e:
        raise click.BadParameter(str(e))

    click.echo(f"Crawling {url}...")
    click.echo(f"Max depth: {depth}, Delay: {delay}s, Concurrency: {concurrency}")
    click.echo(f"Excluded paths: {', '.join(config.excluded_paths) or 'none'}")
    if config.excluded_subdomains:
        click.echo(f"Excluded subdomains: {', '.join(config.excluded_subdomains)}")

    crawler = Crawler(config=config)

    try:
        site = asyncio.run(crawler.crawl(progress=progress))
    except KeyboardInterrupt:
        click.echo("\nCrawl interrupted by user")
        site = crawler.site

    click.echo(
        f"Crawled {crawler.pages_crawled} pages "
        f"({crawler.fetch_failures} failed, {crawler.filtered_out} filtered)"
    )

    try:
        sitemap_path, sitegraph_path = Writer.write_all(site, Path(output_dir))
    except OSError as e:
        raise click.ClickException(f"Error writing output: {e}")

    click.echo(f"Sitemap at: {sitemap_path}")
    click.echo(f"Sitegraph at: {sitegraph_path}")

    if site.webpages:
        click.echo(CrawlStats(site).format_summary())


@main.command()
@click.argument("file_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--export",
    "-e",
    type=click.Path(),
    help="Export stats to CSV file",
)
@click.option(
    "--json",
    "output_json",
    is_flag=True,
    help="Output stats as JSON",
)
def stats(file_path: str, export: str, output_json: bool):
    """
    Show statistics for a sitegraph file.

    Examples:

        sitegraph stats sitegraph.txt

        sitegraph stats sitegraph.txt --export stats.csv

        sitegraph stats sitegraph.txt --json
    """
    try:
        crawl_stats = CrawlStats.from_file(Path(file_path))
    except (OSError, ValueError) as e:
        raise click.ClickException(str(e))

    if output_json:
        click.echo(json.dumps(crawl_stats.compute(), indent=2))
    else:
        click.echo(crawl_stats.format_summary())

    if export:
        export_path = Path(export)
        try:
            crawl_stats.export_csv(export_path)
        except OSError as e:
            raise click.ClickException(f"Error writing {export_path}: {e}")
        click.echo(f"\nStats exported to {export_path}")


@main.command()
def version():
    """Show version information."""
    click.echo(f"sitegraph version {__version__}")
    click.echo("Concurrent depth-bounded site crawler.")


if __name__ == "__main__":
    main()
