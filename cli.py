#!/usr/bin/env python3
"""
Sportfolio Command Line Interface

Main CLI entry point for the Sportfolio metadata toolchain.
Provides commands for AI enrichment, sport taxonomy, album naming,
story collections and search over the photo_metadata table.
"""

import json
import click
import logging
from typing import Optional

from sportfolio import __version__
from sportfolio.config import load_config
from sportfolio.utils.logging import setup_console_logging
from sportfolio.cli import ensure_database
from sportfolio.cli.db_commands import db
from sportfolio.cli.enrich_commands import enrich
from sportfolio.cli.album_commands import albums
from sportfolio.cli.taxonomy_commands import taxonomy
from sportfolio.cli.collection_commands import collections

logger = logging.getLogger(__name__)


@click.group()
@click.option('--config', '-c', type=click.Path(exists=True),
              help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.pass_context
def main(ctx, config: Optional[str] = None, verbose: bool = False, quiet: bool = False):
    """
    Sportfolio - metadata toolchain for a sports photography portfolio

    Enriches photos with a vision API, keeps the sport taxonomy and album
    names clean, and curates story collections from the results.
    """

    # Ensure context object exists
    if ctx.obj is None:
        ctx.obj = {}

    # A pre-loaded config (tests, embedding) wins over --config
    if 'config' not in ctx.obj:
        ctx.obj['config'] = load_config(config)

    log_config = ctx.obj['config'].get('logging', {})
    if verbose:
        level = 'DEBUG'
    elif quiet:
        level = 'ERROR'
    else:
        level = log_config.get('level', 'INFO')
    setup_console_logging(level, color=bool(log_config.get('color', True)))

    # Store CLI options in context
    ctx.obj['verbose'] = verbose
    ctx.obj['quiet'] = quiet


@main.command()
@click.argument('query', required=False)
@click.option('--limit', '-l', default=24, help='Photos to show')
@click.option('--sort', default='photo_date', help='Sort column (descending)')
@click.option('--examples', is_flag=True, help='Show example queries')
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON')
@click.pass_context
def search(ctx, query: Optional[str], limit: int, sort: str, examples: bool, as_json: bool):
    """
    Search photos with a natural language query.

    QUERY: e.g. "blocks at golden hour"
    """
    from sportfolio.db.connection import get_session
    from sportfolio.db.operations import PhotoOperations
    from sportfolio.search.query_parser import parse_query, describe_filters, EXAMPLE_QUERIES

    if examples or not query:
        click.echo("💡 Example queries:")
        for example in EXAMPLE_QUERIES:
            click.echo(f"  {example}")
        return

    filters = parse_query(query)
    if filters.is_empty():
        click.echo(f"🤷 No filters recognized in '{query}'")
        return

    ensure_database(ctx)
    with get_session() as session:
        photos, total = PhotoOperations(session).search(filters.to_dict(), sort=sort, limit=limit)
        rows = [p.to_dict() for p in photos]

    if as_json:
        click.echo(json.dumps({'filters': filters.to_dict(), 'total': total, 'photos': rows},
                              indent=2, default=str))
        return

    click.echo(f"🔍 {describe_filters(filters)}: {total} photos")
    for row in rows:
        date = str(row.get('photo_date') or '')[:10]
        click.echo(f"  {row['photo_id']:<14} {date:<10} {(row.get('sport_type') or '-'):<11} "
                   f"{(row.get('play_type') or '-'):<8} {row.get('album_name') or ''}")
    if total > len(rows):
        click.echo(f"  ... and {total - len(rows)} more")


# Add command groups
main.add_command(db)
main.add_command(enrich)
main.add_command(albums)
main.add_command(taxonomy)
main.add_command(collections)


@main.command()
def version():
    """Show Sportfolio version information."""
    click.echo(f"Sportfolio v{__version__}")
    click.echo("Metadata toolchain for a sports photography portfolio")


if __name__ == '__main__':
    main()
