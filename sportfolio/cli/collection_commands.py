"""
Collection CLI commands for Sportfolio
"""

import json
import click
import logging

from . import ensure_database, fail
from ..collections.curation import COLLECTIONS, get_collection, generate_all, assign_collection
from ..db.connection import get_session

logger = logging.getLogger(__name__)


@click.group()
def collections():
    """Story collection commands"""
    pass


@collections.command()
@click.option('--slug', '-s', 'slugs', multiple=True,
              type=click.Choice([c.slug for c in COLLECTIONS]),
              help='Only this collection (repeatable)')
@click.option('--assign', is_flag=True, help='Tag the selected photos with the collection slug')
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON')
@click.pass_context
def generate(ctx, slugs, assign, as_json):
    """Generate the story collections"""
    ensure_database(ctx)

    try:
        definitions = [get_collection(slug) for slug in slugs] if slugs else COLLECTIONS
    except ValueError as e:
        fail(str(e))

    with get_session() as session:
        results = generate_all(session, definitions)
        assigned = sum(assign_collection(session, r) for r in results) if assign else 0

        if as_json:
            payload = [
                {
                    'slug': r.collection.slug,
                    'title': r.collection.title,
                    'narrative': r.collection.narrative,
                    'stats': r.stats(),
                    'photo_ids': [p.photo_id for p in r.photos],
                }
                for r in results
            ]
            click.echo(json.dumps(payload, indent=2))
            return

    click.echo("🚀 Collections Curation\n")
    for r in results:
        click.echo(f"🎨 {r.collection.title}: {r.total} photos")
        click.echo(f"   {r.collection.narrative}")
        click.echo(f"   📊 Sharpness {r.avg_sharpness} | Impact {r.avg_emotional_impact} | "
                   f"Composition {r.avg_composition}")

    click.echo(f"\nTotal Collections: {len(results)}/{len(definitions)}")
    click.echo(f"Total Photos Curated: {sum(r.total for r in results)}")
    if assign:
        click.echo(f"🏷️  Assigned {assigned} photos")

    empty = [r for r in results if r.is_empty]
    if empty:
        click.echo("\n⚠️  Empty collections:")
        for r in empty:
            click.echo(f"   - {r.collection.title}: filters {r.collection.filters}, "
                       f"min scores {r.collection.min_scores}")
