"""Main CLI entry point for pkgsearch."""

import json
import logging
import os
import sys
from typing import List, Optional, Tuple

import click
import yaml
from rich.console import Console
from rich.table import Table

from ..core.catalog import CatalogLoader
from ..core.configuration import ConfigurationManager
from ..core.engine import DiscoveryEngine
from ..core.exceptions import PkgSearchError
from ..core.interfaces import PackageRecord, PackageView, QueryParams, QueryResult, SortDirection, SortKey

# Initialize rich console for better output formatting
console = Console()


def setup_logging(verbose: bool = False):
    """Set up logging configuration."""
    # Check environment variable for log level override
    env_log_level = os.getenv('PKGSEARCH_LOG_LEVEL', '').upper()
    if env_log_level in ['DEBUG', 'INFO', 'WARNING', 'ERROR']:
        level = getattr(logging, env_log_level)
    else:
        level = logging.DEBUG if verbose else logging.WARNING

    log_format = os.getenv('PKGSEARCH_LOG_FORMAT', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    logging.basicConfig(
        level=level,
        format=log_format
    )


def format_output(data, output_format: str) -> str:
    """Serialize plain data as JSON or YAML."""
    if output_format == "json":
        return json.dumps(data, indent=2, default=str)
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)


def display_packages(packages: List[PackageView], title: str):
    """Display package views in a formatted table."""
    if not packages:
        console.print(f"[yellow]No packages to show:[/yellow] {title}")
        return

    table = Table(title=title)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Latest", style="green")
    table.add_column("Description", style="white")
    table.add_column("Downloads", style="magenta", justify="right")
    table.add_column("Stars", style="yellow", justify="right")

    for package in packages:
        description = package.description or "No description"
        table.add_row(
            package.name,
            package.latest or "N/A",
            description[:50] + ("..." if len(description) > 50 else ""),
            str(package.downloads),
            str(package.stargazers_count),
        )

    console.print(table)


def display_result(result: QueryResult, title: str, base_url: str, output_format: str):
    """Display one page of results with its pagination links."""
    if output_format != "table":
        data = {
            "packages": [package.to_dict() for package in result.items],
            "links": result.links(base_url),
            "total": result.page.total_count,
        }
        click.echo(format_output(data, output_format))
        return

    display_packages(result.items, title)
    descriptor = result.page
    console.print(
        f"Page {descriptor.page} of {descriptor.total_pages} "
        f"({descriptor.total_count} packages, sorted by {result.sort_key.value} {result.direction.value})"
    )
    for rel, url in result.links(base_url).items():
        console.print(f"  [blue]{rel}[/blue]: {url}")


def _query_params(page: int, sort: Optional[str], direction: Optional[str], query: str = "") -> QueryParams:
    return QueryParams(page=page, sort=sort, direction=SortDirection.parse(direction), query=query)


def _load(ctx) -> Tuple[DiscoveryEngine, List[PackageRecord]]:
    """Build the engine and read the catalog on first use."""
    if 'engine' not in ctx.obj:
        catalog_path = ctx.obj.get('catalog_path')
        if not catalog_path:
            raise click.UsageError("A catalog file is required (--catalog or PKGSEARCH_CATALOG)")
        try:
            server_config = ConfigurationManager(ctx.obj.get('config')).load()
            ctx.obj['engine'] = DiscoveryEngine(server_config)
            ctx.obj['catalog'] = CatalogLoader().load_file(catalog_path)
        except PkgSearchError as e:
            console.print(f"[red]Error:[/red] {e}")
            sys.exit(1)
    return ctx.obj['engine'], ctx.obj['catalog']


def _require_package(ctx, name: str) -> PackageRecord:
    _, catalog = _load(ctx)
    package = DiscoveryEngine.find_package(catalog, name)
    if package is None:
        console.print(f"[red]Package not found:[/red] {name}")
        sys.exit(1)
    return package


sort_option = click.option('--sort', '-s', help=f"Sort key ({', '.join(key.value for key in SortKey)})")
direction_option = click.option('--direction', '-d', type=click.Choice(['asc', 'desc']),
                                help="Sort direction (defaults to the sort key's own default)")
page_option = click.option('--page', '-p', default=1, type=int, help='Page number, starting at 1')
format_option = click.option('--format', '-f', 'output_format', default='table',
                             type=click.Choice(['table', 'json', 'yaml']), help='Output format')


# Global options that apply to all commands
@click.group()
@click.option('--config', '-c', type=click.Path(),
              default=lambda: os.getenv('PKGSEARCH_CONFIG'),
              help='Path to configuration file (env: PKGSEARCH_CONFIG)')
@click.option('--catalog', type=click.Path(),
              default=lambda: os.getenv('PKGSEARCH_CATALOG'),
              help='Path to a YAML or JSON catalog file (env: PKGSEARCH_CATALOG)')
@click.option('--verbose', '-v', is_flag=True,
              help='Enable verbose logging (env: PKGSEARCH_VERBOSE)')
@click.pass_context
def cli(ctx, config, catalog, verbose):
    """
    Query a catalog of versioned packages.

    \b
    Examples:

      # List the most downloaded packages
      pkgsearch --catalog catalog.yaml list

      # Search for themes, second page
      pkgsearch --catalog catalog.yaml search "zen theme" --page 2

      # Show versions compatible with an editor release
      pkgsearch --catalog catalog.yaml show zen-theme --engine 1.60.0
    """
    ctx.ensure_object(dict)
    ctx.obj['config'] = config
    ctx.obj['catalog_path'] = catalog

    if not verbose and os.getenv('PKGSEARCH_VERBOSE', '').lower() in ['true', '1', 'yes']:
        verbose = True
    ctx.obj['verbose'] = verbose
    setup_logging(verbose)


@cli.command(name='list')
@page_option
@sort_option
@direction_option
@format_option
@click.pass_context
def list_packages(ctx, page, sort, direction, output_format):
    """List all packages, sorted and paginated."""
    engine, catalog = _load(ctx)
    result = engine.list_packages(catalog, _query_params(page, sort, direction))
    base_url = f"{engine.config.server_url}/api/packages"
    display_result(result, "Packages", base_url, output_format)


@cli.command()
@click.argument('query')
@page_option
@sort_option
@direction_option
@format_option
@click.pass_context
def search(ctx, query, page, sort, direction, output_format):
    """
    Search packages by name and description.

    Every package is returned, ordered by relevance unless another sort is given.

    Examples:

      pkgsearch search "zen theme"

      pkgsearch search linter --sort downloads
    """
    engine, catalog = _load(ctx)
    result = engine.search_packages(catalog, _query_params(page, sort, direction, query))
    base_url = f"{engine.config.server_url}/api/packages/search"
    display_result(result, f"Search Results for '{query}'", base_url, output_format)


@cli.command()
@click.argument('name')
@click.option('--engine', 'engine_version', help='Only show versions compatible with this engine version')
@click.option('--format', '-f', 'output_format', default='yaml', type=click.Choice(['json', 'yaml']),
              help='Output format')
@click.pass_context
def show(ctx, name, engine_version, output_format):
    """Show a package with its versions."""
    package = _require_package(ctx, name)
    engine, _ = _load(ctx)
    view = engine.package_details(package, engine_version)
    click.echo(format_output(view.to_dict(), output_format))


@cli.command()
@click.argument('name')
@click.argument('version')
@click.option('--format', '-f', 'output_format', default='yaml', type=click.Choice(['json', 'yaml']),
              help='Output format')
@click.pass_context
def version(ctx, name, version, output_format):
    """Show a single version of a package."""
    package = _require_package(ctx, name)
    engine, _ = _load(ctx)
    view = engine.package_version(package, version)
    if view is None:
        console.print(f"[red]Version not found:[/red] {name}@{version}")
        sys.exit(1)
    click.echo(format_output(view.to_dict(), output_format))


@cli.command()
@click.pass_context
def featured(ctx):
    """List featured packages."""
    engine, catalog = _load(ctx)
    display_packages(engine.featured_packages(catalog), "Featured Packages")


@cli.command()
@click.argument('name')
@click.pass_context
def stargazers(ctx, name):
    """List the users who starred a package."""
    package = _require_package(ctx, name)
    engine, _ = _load(ctx)
    users = engine.stargazers(package)
    if not users:
        console.print(f"[yellow]{name} has no stargazers[/yellow]")
        return
    for user in users:
        click.echo(user)


def main() -> int:
    """Main CLI entry point."""
    try:
        cli(standalone_mode=False)
        return 0
    except click.ClickException as e:
        e.show()
        return e.exit_code
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 130
    except SystemExit as e:
        return e.code


if __name__ == '__main__':
    sys.exit(main())
